# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan Runtime Validation

Checks a structurally valid plan against live registry state before
anything is executed. Read-only: issues GET requests only.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from npm_sweep.actions.tombstone import resolve_target_version
from npm_sweep.core.errors import (
    AuthenticationError,
    PolicyViolationError,
    SweepError,
    sanitize_error_for_user,
)
from npm_sweep.core.logging import get_service_logger
from npm_sweep.models.package import DiscoveredPackage
from npm_sweep.models.plan import (
    OwnerAddStep,
    OwnerRemoveStep,
    PackageAction,
    Plan,
    TombstoneStep,
    UnpublishStep,
)
from npm_sweep.policy.ownership import check_owner_removal, is_owner
from npm_sweep.policy.unpublish import check_unpublish_eligibility
from npm_sweep.registry.auth import whoami
from npm_sweep.registry.client import RegistryClient
from npm_sweep.registry.packument import get_packument, packument_to_discovered

logger = get_service_logger("validation")

# Error codes
AUTH_FAILED = "AUTH_FAILED"
UNPUBLISH_DISABLED = "UNPUBLISH_DISABLED"
FORCE_REQUIRED = "FORCE_REQUIRED"
NOT_OWNER = "NOT_OWNER"
UNPUBLISH_INELIGIBLE = "UNPUBLISH_INELIGIBLE"
VERSION_EXISTS = "VERSION_EXISTS"
LAST_OWNER = "LAST_OWNER"
VALIDATION_ERROR = "VALIDATION_ERROR"

# Warning codes
REMOVING_SELF = "REMOVING_SELF"
ALREADY_OWNER = "ALREADY_OWNER"


@dataclass
class ValidationIssue:
    code: str
    message: str
    package: Optional[str] = None
    step: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "package": self.package,
            "step": self.step,
        }


@dataclass
class ValidationResult:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


def _check_options(plan: Plan, result: ValidationResult) -> None:
    for action in plan.actions:
        for i, step in enumerate(action.steps):
            if not isinstance(step, UnpublishStep):
                continue
            if not plan.options.enable_unpublish:
                result.errors.append(ValidationIssue(
                    UNPUBLISH_DISABLED,
                    "Unpublish requires --enable-unpublish flag",
                    action.package, i,
                ))
            if step.is_full_package and not step.force:
                result.errors.append(ValidationIssue(
                    FORCE_REQUIRED,
                    "Full package unpublish requires force=true",
                    action.package, i,
                ))


async def _check_action(
    client: RegistryClient,
    action: PackageAction,
    current_user: str,
    result: ValidationResult,
) -> None:
    packument = await get_packument(client, action.package)
    pkg: DiscoveredPackage = packument_to_discovered(packument)

    if not is_owner(pkg.owners, current_user):
        result.errors.append(ValidationIssue(
            NOT_OWNER, f"You are not an owner of {action.package}", action.package,
        ))
        return

    # Ownership steps see the effect of the earlier ones in the same action
    owners = list(pkg.owners)
    existing_versions = set(packument.get("versions") or {})
    latest = (packument.get("dist-tags") or {}).get("latest")
    eligibility = None

    for i, step in enumerate(action.steps):
        if isinstance(step, UnpublishStep):
            if eligibility is None:
                eligibility = await check_unpublish_eligibility(client, pkg)
            if not eligibility.eligible:
                result.errors.append(ValidationIssue(
                    UNPUBLISH_INELIGIBLE,
                    f"Unpublish not eligible: {eligibility.reason}",
                    action.package, i,
                ))

        elif isinstance(step, TombstoneStep):
            version = resolve_target_version(step.target_version, latest)
            if version in existing_versions:
                result.errors.append(ValidationIssue(
                    VERSION_EXISTS, f"Version {version} already exists", action.package, i,
                ))

        elif isinstance(step, OwnerAddStep):
            if is_owner(owners, step.user):
                result.warnings.append(ValidationIssue(
                    ALREADY_OWNER, f"{step.user} is already an owner", action.package, i,
                ))
            else:
                owners.append(step.user)

        elif isinstance(step, OwnerRemoveStep):
            try:
                check_owner_removal(action.package, owners, step.user)
            except PolicyViolationError as e:
                result.errors.append(ValidationIssue(LAST_OWNER, e.message, action.package, i))
                continue

            if step.user.lower() == current_user.lower():
                result.warnings.append(ValidationIssue(
                    REMOVING_SELF,
                    "You are removing yourself - you will lose access",
                    action.package, i,
                ))
            owners = [o for o in owners if o.lower() != step.user.lower()]


async def validate_plan_runtime(client: RegistryClient, plan: Plan) -> ValidationResult:
    """
    Validate `plan` against live registry state.

    Authentication failure is fatal and reported alone. Any other failure
    while checking one package is reported for that package only.

    Returns:
        ValidationResult; execution must not start unless result.valid
    """
    result = ValidationResult()

    try:
        current_user = await whoami(client)
    except AuthenticationError as e:
        logger.error(f"Runtime validation aborted: {e.message}")
        result.errors.append(ValidationIssue(AUTH_FAILED, "Could not authenticate with registry"))
        return result

    _check_options(plan, result)

    for action in plan.actions:
        try:
            await _check_action(client, action, current_user, result)
        except SweepError as e:
            result.errors.append(ValidationIssue(
                VALIDATION_ERROR, f"Could not validate: {e.message}", action.package,
            ))
        except Exception as e:
            logger.warning(f"Unexpected error validating {action.package}: {e}")
            result.errors.append(ValidationIssue(
                VALIDATION_ERROR,
                f"Could not validate: {sanitize_error_for_user(e, include_type=False)}",
                action.package,
            ))

    logger.info(
        f"Validated plan: {len(result.errors)} error(s), {len(result.warnings)} warning(s)"
    )
    return result


def _issue_line(issue: ValidationIssue) -> str:
    if issue.package is None:
        return f"   {issue.message}"
    where = issue.package if issue.step is None else f"{issue.package} step {issue.step}"
    return f"  [{where}] {issue.message}"


def format_validation_result(result: ValidationResult) -> str:
    lines = ["✓ Plan is valid" if result.valid else "✗ Plan has errors"]

    if result.errors:
        lines.append("")
        lines.append("Errors:")
        lines.extend(_issue_line(issue) for issue in result.errors)

    if result.warnings:
        lines.append("")
        lines.append("Warnings:")
        lines.extend(_issue_line(issue) for issue in result.warnings)

    return "\n".join(lines)
