# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Packument access.

A packument is the registry's full metadata document for a package:
versions, dist-tags, maintainers, publish times and the revision token.
Packuments are handled as plain dicts; only the fields we touch are read.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from npm_sweep.models.package import DiscoveredPackage, PackageVersion, RepositoryLink

from .client import RegistryClient, encode_package_name

ABBREVIATED_ACCEPT = "application/vnd.npm.install-v1+json"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _parse_time(value: Any) -> Optional[datetime]:
    # time.unpublished holds an object, not a timestamp
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def get_packument(client: RegistryClient, package_name: str) -> Dict[str, Any]:
    return await client.request(f"/{encode_package_name(package_name)}")


async def get_abbreviated_packument(client: RegistryClient, package_name: str) -> Dict[str, Any]:
    """Install-time metadata only (no readme, no time map)."""
    return await client.request(
        f"/{encode_package_name(package_name)}",
        headers={"Accept": ABBREVIATED_ACCEPT},
    )


async def update_packument(
    client: RegistryClient,
    packument: Dict[str, Any],
    otp: Optional[str] = None,
) -> None:
    """PUT the full, modified document back."""
    await client.request(
        f"/{encode_package_name(packument['name'])}",
        method="PUT",
        body=packument,
        otp=otp,
    )


def packument_to_discovered(packument: Dict[str, Any]) -> DiscoveredPackage:
    """
    Build a DiscoveredPackage snapshot from a packument.

    Versions are ordered newest publish first. The last publish time is the
    most recent per-version entry of the time map ("created"/"modified"
    are not publishes).
    """
    versions_doc = packument.get("versions") or {}
    time_map = packument.get("time") or {}
    dist_tags = packument.get("dist-tags") or {}

    latest_version = dist_tags.get("latest")
    if latest_version is None:
        latest_version = list(versions_doc)[-1] if versions_doc else "0.0.0"

    versions = []
    for version, data in versions_doc.items():
        dist = data.get("dist") or {}
        versions.append(PackageVersion(
            version=version,
            published_at=_parse_time(time_map.get(version)),
            deprecated=data.get("deprecated") or None,
            tarball=dist.get("tarball"),
            shasum=dist.get("shasum"),
            integrity=dist.get("integrity"),
        ))
    versions.sort(key=lambda v: v.published_at or _EPOCH, reverse=True)

    publish_times = [
        parsed for key, value in time_map.items()
        if key not in ("created", "modified") and (parsed := _parse_time(value))
    ]
    last_publish = max(publish_times) if publish_times else datetime.now(timezone.utc)

    name = packument["name"]
    scope = name.split("/")[0] if name.startswith("@") else None

    repository = packument.get("repository")
    if isinstance(repository, str):
        repository = RepositoryLink(url=repository)
    elif isinstance(repository, dict) and repository.get("url"):
        repository = RepositoryLink(type=repository.get("type", "git"), url=repository["url"])
    else:
        repository = None

    latest_doc = versions_doc.get(latest_version) or {}

    return DiscoveredPackage(
        name=name,
        scope=scope,
        description=packument.get("description"),
        versions=versions,
        latest_version=latest_version,
        last_publish=last_publish,
        owners=[m["name"] for m in packument.get("maintainers") or [] if m.get("name")],
        deprecated=latest_doc.get("deprecated") or None,
        repository=repository,
    )
