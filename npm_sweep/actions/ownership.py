# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Owner add / remove actions.
"""

from typing import Optional

from npm_sweep.core.errors import OtpRequiredError, SweepError
from npm_sweep.core.logging import get_service_logger, log_event
from npm_sweep.models.action import ActionResult, ActionType
from npm_sweep.registry import owners
from npm_sweep.registry.client import RegistryClient

logger = get_service_logger("actions")


async def add_owner(
    client: RegistryClient,
    package: str,
    user: str,
    otp: Optional[str] = None,
) -> ActionResult:
    action = ActionType.OWNER_ADD

    try:
        logger.info(f"Adding {user} as owner of {package}...")
        changed = await owners.add_owner(client, package, user, otp)
    except OtpRequiredError:
        raise
    except SweepError as e:
        return ActionResult.fail(action, package, e.message)

    log_event(logger, "action_completed", action=action.value, package=package, user=user, changed=changed)
    if not changed:
        return ActionResult.ok(action, package, f"{user} is already an owner", user=user)
    return ActionResult.ok(action, package, f"Added {user} as owner", user=user)


async def remove_owner(
    client: RegistryClient,
    package: str,
    user: str,
    otp: Optional[str] = None,
) -> ActionResult:
    action = ActionType.OWNER_REMOVE

    try:
        logger.info(f"Removing {user} from owners of {package}...")
        changed = await owners.remove_owner(client, package, user, otp)
    except OtpRequiredError:
        raise
    except SweepError as e:
        return ActionResult.fail(action, package, e.message)

    log_event(logger, "action_completed", action=action.value, package=package, user=user, changed=changed)
    if not changed:
        return ActionResult.ok(action, package, f"{user} is not an owner", user=user)
    return ActionResult.ok(action, package, f"Removed {user} from owners", user=user)
