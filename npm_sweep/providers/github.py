# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
GitHub provider

Single responsibility: archive repositories and add an unmaintained banner,
driven through the GitHub CLI (`gh`), which owns authentication.
"""

import asyncio
import base64
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from npm_sweep.core.errors import SweepError
from npm_sweep.core.logging import get_service_logger

logger = get_service_logger("github")

_REPO_PATTERNS = (
    re.compile(r"github\.com[/:]([^/]+)/([^/.]+)(?:\.git)?$"),
    re.compile(r"^([^/]+)/([^/]+)$"),
)

BANNER_MARKER = "This project is no longer maintained"

UNMAINTAINED_BANNER = """> [!CAUTION]
> **This project is no longer maintained.**
>
> This repository has been archived and is read-only.
> No further updates, bug fixes, or support will be provided.
>
> If you need this functionality, consider forking the repository.

---

"""


class GitHubCliError(SweepError):
    """`gh` is missing or exited non-zero."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message, status_code=502)
        self.returncode = returncode


@dataclass
class GitHubRepo:
    owner: str
    name: str
    full_name: str
    archived: bool
    description: Optional[str]
    default_branch: str


@dataclass
class ArchiveResult:
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


def parse_repo_url(repo_url: str) -> Optional[Tuple[str, str]]:
    """
    Extract (owner, name) from a GitHub URL or an "owner/name" slug.

    Returns:
        (owner, name), or None when the input is neither
    """
    for pattern in _REPO_PATTERNS:
        match = pattern.search(repo_url)
        if match:
            name = match.group(2)
            if name.endswith(".git"):
                name = name[:-4]
            return match.group(1), name
    return None


async def _gh(*args: str) -> str:
    """Run `gh` and return its stdout."""
    try:
        process = await asyncio.create_subprocess_exec(
            "gh", *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise GitHubCliError("GitHub CLI (gh) is not installed") from e

    stdout, stderr = await process.communicate()

    if process.returncode != 0:
        error_msg = stderr.decode().strip() if stderr else "Unknown error"
        raise GitHubCliError(f"gh {' '.join(args[:2])} failed: {error_msg}", process.returncode)

    return stdout.decode()


async def check_gh_cli() -> bool:
    try:
        await _gh("--version")
        return True
    except GitHubCliError:
        return False


async def check_gh_auth() -> bool:
    try:
        await _gh("auth", "status")
        return True
    except GitHubCliError:
        return False


async def get_repo_info(owner: str, name: str) -> Optional[GitHubRepo]:
    try:
        stdout = await _gh(
            "api", f"repos/{owner}/{name}",
            "--jq", ".owner.login, .name, .full_name, .archived, .description, .default_branch",
        )
    except GitHubCliError as e:
        logger.debug(f"Failed to get repo info: {e.message}")
        return None

    lines = stdout.strip().split("\n")
    if len(lines) < 6:
        return None

    return GitHubRepo(
        owner=lines[0],
        name=lines[1],
        full_name=lines[2],
        archived=lines[3] == "true",
        description=None if lines[4] == "null" else lines[4],
        default_branch=lines[5],
    )


async def archive_repository(owner: str, name: str) -> ArchiveResult:
    repo = await get_repo_info(owner, name)
    if repo is None:
        return ArchiveResult(False, error=f"Repository {owner}/{name} not found or not accessible")

    if repo.archived:
        return ArchiveResult(True, message="Repository is already archived")

    try:
        await _gh("api", f"repos/{owner}/{name}", "-X", "PATCH", "-F", "archived=true")
    except GitHubCliError as e:
        return ArchiveResult(False, error=f"Failed to archive repository: {e.message}")

    logger.info(f"Archived repository {owner}/{name}")
    return ArchiveResult(True, message=f"Repository {owner}/{name} has been archived")


async def unarchive_repository(owner: str, name: str) -> ArchiveResult:
    try:
        await _gh("api", f"repos/{owner}/{name}", "-X", "PATCH", "-F", "archived=false")
    except GitHubCliError as e:
        return ArchiveResult(False, error=f"Failed to unarchive repository: {e.message}")

    return ArchiveResult(True, message=f"Repository {owner}/{name} has been unarchived")


async def add_unmaintained_banner(owner: str, name: str, package_name: str) -> ArchiveResult:
    """
    Prepend the unmaintained banner to README.md.

    Must run before archiving: archived repositories are read-only.
    """
    repo = await get_repo_info(owner, name)
    if repo is None:
        return ArchiveResult(False, error=f"Repository {owner}/{name} not found")

    if repo.archived:
        return ArchiveResult(
            False,
            error="Cannot modify README of archived repository. Add banner before archiving.",
        )

    contents_path = f"repos/{owner}/{name}/contents/README.md"
    try:
        encoded = await _gh("api", contents_path, "--jq", ".content")
        sha = (await _gh("api", contents_path, "--jq", ".sha")).strip()
    except GitHubCliError:
        return ArchiveResult(False, error="README.md not found in repository")

    readme = base64.b64decode(encoded).decode("utf-8") if encoded.strip() else ""
    if not readme:
        return ArchiveResult(False, error="README.md not found in repository")

    if BANNER_MARKER in readme:
        return ArchiveResult(True, message="Banner already present in README")

    updated = base64.b64encode((UNMAINTAINED_BANNER + readme).encode("utf-8")).decode("ascii")

    try:
        await _gh(
            "api", contents_path, "-X", "PUT",
            "-f", f"message=docs: add unmaintained banner for {package_name}",
            "-f", f"content={updated}",
            "-f", f"sha={sha}",
        )
    except GitHubCliError as e:
        return ArchiveResult(False, error=f"Failed to update README: {e.message}")

    logger.info(f"Added unmaintained banner to {owner}/{name}/README.md")
    return ArchiveResult(True, message="Added unmaintained banner to README.md")
