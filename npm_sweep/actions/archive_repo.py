# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Archive the source repository of a retired package.
"""

from npm_sweep.core.logging import get_service_logger, log_event
from npm_sweep.models.action import ActionResult, ActionType
from npm_sweep.providers import github

logger = get_service_logger("actions")


async def archive_repo(package: str, provider: str, repo: str, add_banner: bool = True) -> ActionResult:
    """
    Add the unmaintained banner (optional) and archive the repository.

    A failed banner update is logged and does not stop archiving.
    """
    action = ActionType.ARCHIVE_REPO

    if provider != "github":
        return ActionResult.fail(
            action, package,
            f'Provider "{provider}" is not yet supported. Only "github" is available.',
        )

    parsed = github.parse_repo_url(repo)
    if parsed is None:
        return ActionResult.fail(
            action, package,
            f'Invalid repository format: {repo}. Expected "owner/repo" or GitHub URL.',
        )
    owner, name = parsed

    logger.info(f"Archiving repository {owner}/{name}...")

    if not await github.check_gh_cli():
        return ActionResult.fail(
            action, package,
            "GitHub CLI (gh) is not installed. Install it from https://cli.github.com/",
        )
    if not await github.check_gh_auth():
        return ActionResult.fail(
            action, package,
            'Not authenticated with GitHub CLI. Run "gh auth login" first.',
        )

    messages = []
    if add_banner:
        banner = await github.add_unmaintained_banner(owner, name, package)
        if banner.success:
            messages.append(banner.message or "Added banner")
        else:
            logger.warning(f"Banner update failed: {banner.error}")

    archived = await github.archive_repository(owner, name)
    if not archived.success:
        return ActionResult.fail(action, package, archived.error or "Archive failed", banner_results=messages)

    messages.append(archived.message or "Repository archived")
    log_event(logger, "action_completed", action=action.value, package=package, repo=f"{owner}/{name}")
    return ActionResult.ok(
        action, package, "; ".join(messages),
        owner=owner, name=name, banner_added=add_banner,
    )
