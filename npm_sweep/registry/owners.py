# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package maintainers, edited through the packument.
"""

from typing import Any, Dict, List, Optional

from npm_sweep.core.errors import PolicyViolationError

from .client import RegistryClient
from .packument import get_packument, update_packument


def _same_user(a: str, b: str) -> bool:
    return a.lower() == b.lower()


async def get_owners(client: RegistryClient, package_name: str) -> List[Dict[str, Any]]:
    packument = await get_packument(client, package_name)
    return packument.get("maintainers") or []


async def add_owner(
    client: RegistryClient,
    package_name: str,
    username: str,
    otp: Optional[str] = None,
) -> bool:
    """
    Add a maintainer.

    Returns:
        False when the user already was an owner (nothing written)
    """
    packument = await get_packument(client, package_name)
    maintainers = list(packument.get("maintainers") or [])

    if any(_same_user(m.get("name", ""), username) for m in maintainers):
        return False

    maintainers.append({"name": username})
    await update_packument(client, {**packument, "maintainers": maintainers}, otp)
    return True


async def remove_owner(
    client: RegistryClient,
    package_name: str,
    username: str,
    otp: Optional[str] = None,
) -> bool:
    """
    Remove a maintainer.

    Returns:
        False when the user was not an owner (nothing written)

    Raises:
        PolicyViolationError: The user is the last remaining owner
    """
    packument = await get_packument(client, package_name)
    maintainers = list(packument.get("maintainers") or [])

    remaining = [m for m in maintainers if not _same_user(m.get("name", ""), username)]
    if len(remaining) == len(maintainers):
        return False

    if not remaining:
        raise PolicyViolationError(
            "Cannot remove the last owner of a package",
            code="LAST_OWNER",
            package=package_name,
        )

    await update_packument(client, {**packument, "maintainers": remaining}, otp)
    return True
