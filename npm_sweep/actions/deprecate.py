# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Deprecate / undeprecate versions in a range.

Both actions rewrite the `deprecated` field of every matching version in
the packument and PUT the document back. OtpRequiredError propagates so the
executor can retry with a code; every other failure becomes an ActionResult.
"""

import copy
from typing import Optional

from npm_sweep.core.errors import OtpRequiredError, SweepError
from npm_sweep.core.logging import get_service_logger, log_event
from npm_sweep.models.action import ActionResult, ActionType
from npm_sweep.registry.client import RegistryClient
from npm_sweep.registry.packument import get_packument, update_packument

from .semver import satisfies, valid_range

logger = get_service_logger("actions")


async def deprecate(
    client: RegistryClient,
    package: str,
    range_: str,
    message: str,
    otp: Optional[str] = None,
) -> ActionResult:
    action = ActionType.DEPRECATE
    normalized = valid_range(range_)
    if normalized is None:
        return ActionResult.fail(action, package, f"Invalid version range: {range_}")

    try:
        logger.info(f"Deprecating {package}@{range_}...")
        packument = copy.deepcopy(await get_packument(client, package))

        updated = 0
        for version, data in (packument.get("versions") or {}).items():
            if satisfies(version, normalized):
                data["deprecated"] = message
                updated += 1

        if updated == 0:
            return ActionResult.fail(action, package, f"No versions matched range: {range_}")

        await update_packument(client, packument, otp)
    except OtpRequiredError:
        raise
    except SweepError as e:
        return ActionResult.fail(action, package, e.message)

    log_event(logger, "action_completed", action=action.value, package=package, versions_updated=updated)
    return ActionResult.ok(
        action, package,
        f"Deprecated {updated} version(s)",
        versions_updated=updated, range=range_, deprecation_message=message,
    )


async def undeprecate(
    client: RegistryClient,
    package: str,
    range_: str = "*",
    otp: Optional[str] = None,
) -> ActionResult:
    action = ActionType.UNDEPRECATE
    normalized = valid_range(range_)
    if normalized is None:
        return ActionResult.fail(action, package, f"Invalid version range: {range_}")

    try:
        logger.info(f"Removing deprecation from {package}@{range_}...")
        packument = copy.deepcopy(await get_packument(client, package))

        updated = 0
        for version, data in (packument.get("versions") or {}).items():
            if data.get("deprecated") and satisfies(version, normalized):
                # npm clears deprecation with an empty string, not by deleting the key
                data["deprecated"] = ""
                updated += 1

        if updated == 0:
            return ActionResult.ok(action, package, "No deprecated versions in range")

        await update_packument(client, packument, otp)
    except OtpRequiredError:
        raise
    except SweepError as e:
        return ActionResult.fail(action, package, e.message)

    log_event(logger, "action_completed", action=action.value, package=package, versions_updated=updated)
    return ActionResult.ok(
        action, package,
        f"Removed deprecation from {updated} version(s)",
        versions_updated=updated, range=range_,
    )
