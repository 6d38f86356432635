# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unpublish Eligibility Policy

Mirrors the registry's unpublish rules closely enough to reject doomed
unpublish steps before anything is sent:

- within the recent-publish window (72h) only dependents matter
- afterwards: fewer than 300 weekly downloads, a single owner and no
  dependents are all required
- an unknown download count passes only inside the recent window
- dependents cannot be checked reliably and are reported as "unknown",
  which passes
"""

from datetime import datetime, timezone
from typing import Optional

from npm_sweep.core.config import get_config
from npm_sweep.models.eligibility import (
    DependentsSignal,
    Eligibility,
    EligibilityCheck,
    EligibilityChecks,
)
from npm_sweep.models.package import DiscoveredPackage
from npm_sweep.registry.client import RegistryClient
from npm_sweep.registry.downloads import get_weekly_downloads

UNKNOWN = "unknown"


def evaluate_unpublish_eligibility(
    pkg: DiscoveredPackage,
    now: datetime,
    weekly_downloads: Optional[int],
    has_dependents: DependentsSignal = UNKNOWN,
    recent_hours: Optional[int] = None,
    download_threshold: Optional[int] = None,
) -> Eligibility:
    """
    Decide whether `pkg` may be unpublished at `now`.

    Pure: every live input is passed in.

    Args:
        pkg: Package snapshot
        now: Reference time (timezone-aware)
        weekly_downloads: Last-week downloads, None when unknown
        has_dependents: True/False, or "unknown"
        recent_hours: Recent-publish window (default from config)
        download_threshold: Weekly download limit (default from config)

    Returns:
        Eligibility; an ineligible result names every failed check
    """
    config = get_config()
    if recent_hours is None:
        recent_hours = config.recent_publish_hours
    if download_threshold is None:
        download_threshold = config.download_threshold

    hours = (now - pkg.last_publish).total_seconds() / 3600
    recent = hours <= recent_hours

    if recent:
        publish_age = EligibilityCheck(
            passed=True,
            value=f"{round(hours)}h ago (within {recent_hours}h window)",
            description=f"Package was published recently (within {recent_hours}h), easier unpublish rules apply",
        )
    else:
        publish_age = EligibilityCheck(
            passed=True,
            value=f"{round(hours / 24)} days ago",
            description=f"Package is older than {recent_hours}h, stricter unpublish rules apply",
        )

    if weekly_downloads is None:
        downloads = EligibilityCheck(
            passed=recent,
            value=UNKNOWN,
            description=(
                "Could not determine download count (recent publish, npm will verify)"
                if recent else
                "Could not determine download count"
            ),
        )
    else:
        under = weekly_downloads < download_threshold
        downloads = EligibilityCheck(
            passed=under,
            value=weekly_downloads,
            description=(
                f"{weekly_downloads} downloads/week "
                f"({'under' if under else 'exceeds'} {download_threshold} threshold)"
            ),
        )

    owner_count = len(pkg.owners)
    single_owner = owner_count == 1
    owners = EligibilityCheck(
        passed=recent or single_owner,
        value=owner_count,
        description="Single owner (you)" if single_owner else f"{owner_count} owners - may need coordination",
    )

    if has_dependents == UNKNOWN:
        dependents_description = "Cannot check dependents (npm will verify at unpublish time)"
    elif has_dependents:
        dependents_description = "Package has dependents that would break"
    else:
        dependents_description = "No known dependents"
    dependents = EligibilityCheck(
        passed=has_dependents is not True,
        value=has_dependents,
        description=dependents_description,
    )

    checks = EligibilityChecks(
        publish_age=publish_age,
        weekly_downloads=downloads,
        owner_count=owners,
        has_dependents=dependents,
    )

    if recent:
        eligible = dependents.passed
    else:
        eligible = all(check.passed for _, check in checks.items())

    reason = None
    if not eligible:
        reason = "Failed checks: " + ", ".join(checks.failed_names())

    return Eligibility(eligible=eligible, reason=reason, checks=checks)


async def check_for_dependents(client: RegistryClient, package_name: str) -> DependentsSignal:
    # The registry has no public dependents API; `dependencies:<name>`
    # search results are full of false positives.
    return UNKNOWN


async def check_unpublish_eligibility(
    client: RegistryClient,
    pkg: DiscoveredPackage,
    now: Optional[datetime] = None,
) -> Eligibility:
    """Evaluate eligibility, looking up weekly downloads when the snapshot lacks them."""
    if now is None:
        now = datetime.now(timezone.utc)

    downloads = pkg.weekly_downloads
    if downloads is None:
        downloads = await get_weekly_downloads(client, pkg.name)

    dependents = await check_for_dependents(client, pkg.name)
    return evaluate_unpublish_eligibility(pkg, now, downloads, dependents)


def format_eligibility_report(eligibility: Eligibility) -> str:
    lines = ["✓ Eligible for unpublish" if eligibility.eligible else "✗ Not eligible for unpublish"]

    if eligibility.reason:
        lines.append(f"  Reason: {eligibility.reason}")

    lines.append("")
    lines.append("Checks:")
    for name, check in eligibility.checks.items():
        icon = "✓" if check.passed else "✗"
        lines.append(f"  {icon} {name}: {check.description}")

    return "\n".join(lines)
