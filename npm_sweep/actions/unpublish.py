# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unpublish a single version or a whole package.
"""

from typing import Optional

from npm_sweep.core.errors import OtpRequiredError, SweepError
from npm_sweep.core.logging import get_service_logger, log_event
from npm_sweep.models.action import ActionResult, ActionType
from npm_sweep.policy.unpublish import check_unpublish_eligibility
from npm_sweep.registry.client import RegistryClient
from npm_sweep.registry.packument import get_packument, packument_to_discovered
from npm_sweep.registry.tarball import unpublish_package, unpublish_version

logger = get_service_logger("actions")


async def unpublish(
    client: RegistryClient,
    package: str,
    version: Optional[str] = None,
    force: bool = False,
    otp: Optional[str] = None,
    skip_eligibility_check: bool = False,
) -> ActionResult:
    """
    Unpublish `package@version`, or the whole package when version is None.

    Eligibility is re-checked against live state unless skip_eligibility_check.
    Whole-package unpublish additionally requires force.
    """
    action = ActionType.UNPUBLISH

    if version is None and not force:
        return ActionResult.fail(action, package, "Full package unpublish requires force=true")

    try:
        if not skip_eligibility_check:
            discovered = packument_to_discovered(await get_packument(client, package))
            eligibility = await check_unpublish_eligibility(client, discovered)
            if not eligibility.eligible:
                return ActionResult.fail(
                    action, package,
                    f"Not eligible for unpublish: {eligibility.reason}",
                    eligibility=eligibility.model_dump(),
                )

        if version is not None:
            logger.info(f"Unpublishing {package}@{version}...")
            await unpublish_version(client, package, version, otp)
            message = f"Unpublished version {version}"
        else:
            logger.info(f"Unpublishing entire package {package}...")
            await unpublish_package(client, package, otp)
            message = "Unpublished entire package"
    except OtpRequiredError:
        raise
    except SweepError as e:
        return ActionResult.fail(action, package, e.message)

    log_event(logger, "action_completed", action=action.value, package=package, version=version)
    if version is not None:
        return ActionResult.ok(action, package, message, version=version)
    return ActionResult.ok(action, package, message, force=True)
