# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Ownership policy checks.
"""

from dataclasses import dataclass, field
from typing import List

from npm_sweep.core.errors import PolicyViolationError
from npm_sweep.models.package import DiscoveredPackage


def is_owner(owners: List[str], user: str) -> bool:
    return any(owner.lower() == user.lower() for owner in owners)


@dataclass
class OwnershipValidation:
    can_transfer: bool
    can_remove_self: bool
    is_only_owner: bool
    owners: List[str]
    warnings: List[str] = field(default_factory=list)


def validate_ownership(pkg: DiscoveredPackage, current_user: str) -> OwnershipValidation:
    owns = is_owner(pkg.owners, current_user)
    only_owner = owns and len(pkg.owners) == 1

    warnings = []
    if not owns:
        warnings.append("You are not an owner of this package")
    if only_owner:
        warnings.append("You are the only owner - removing yourself will orphan the package")

    return OwnershipValidation(
        can_transfer=owns,
        can_remove_self=owns and not only_owner,
        is_only_owner=only_owner,
        owners=list(pkg.owners),
        warnings=warnings,
    )


def check_owner_removal(package: str, owners: List[str], user: str) -> None:
    """
    Raises:
        PolicyViolationError: Removing `user` would leave the package without owners
    """
    if is_owner(owners, user) and len(owners) == 1:
        raise PolicyViolationError(
            f"Cannot remove {user}: they are the only owner of {package}",
            code="LAST_OWNER",
            package=package,
        )


def format_ownership_report(validation: OwnershipValidation) -> str:
    lines = [
        f"Owners: {', '.join(validation.owners)}",
        f"Can transfer: {'Yes' if validation.can_transfer else 'No'}",
        f"Can remove self: {'Yes' if validation.can_remove_self else 'No'}",
    ]

    if validation.warnings:
        lines.append("")
        lines.append("Warnings:")
        for warning in validation.warnings:
            lines.append(f"  ⚠ {warning}")

    return "\n".join(lines)
