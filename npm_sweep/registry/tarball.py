# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Tarball download, publish and unpublish.
"""

import base64
import hashlib
from typing import Any, Dict, Optional

from npm_sweep.core.errors import RegistryError
from npm_sweep.core.logging import get_service_logger

from .client import RegistryClient, encode_package_name

logger = get_service_logger("registry")


def calculate_integrity(data: bytes) -> str:
    """Subresource integrity string: sha512-<base64 digest>."""
    return "sha512-" + base64.b64encode(hashlib.sha512(data).digest()).decode("ascii")


def calculate_shasum(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


async def download_tarball(client: RegistryClient, url: str) -> bytes:
    logger.debug(f"Downloading tarball: {url}")
    return await client.fetch_bytes(url)


async def publish_package(
    client: RegistryClient,
    manifest: Dict[str, Any],
    tarball: bytes,
    tag: str = "latest",
    otp: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Publish one version with its tarball attached.

    Args:
        client: Registry client
        manifest: Version manifest (at least name and version)
        tarball: Gzipped tarball bytes
        tag: Dist-tag pointed at the new version
        otp: One-time password

    Returns:
        The payload that was PUT
    """
    name = manifest["name"]
    version = manifest["version"]
    tarball_name = f"{name}-{version}.tgz"

    version_doc = {
        **manifest,
        "_id": f"{name}@{version}",
        "dist": {
            "integrity": calculate_integrity(tarball),
            "shasum": calculate_shasum(tarball),
            "tarball": f"{client.get_registry()}/{name}/-/{tarball_name}",
        },
    }

    payload = {
        "_id": name,
        "name": name,
        "description": manifest.get("description"),
        "dist-tags": {tag: version},
        "versions": {version: version_doc},
        "readme": manifest.get("readme"),
        "_attachments": {
            tarball_name: {
                "content_type": "application/octet-stream",
                "data": base64.b64encode(tarball).decode("ascii"),
                "length": len(tarball),
            }
        },
    }

    await client.request(f"/{encode_package_name(name)}", method="PUT", body=payload, otp=otp)
    return payload


async def _current_revision(client: RegistryClient, package_name: str) -> str:
    packument = await client.request(f"/{encode_package_name(package_name)}")
    rev = packument.get("_rev") if isinstance(packument, dict) else None
    if not rev:
        raise RegistryError("Could not get package revision for unpublish", 0, packument)
    return rev


async def unpublish_version(
    client: RegistryClient,
    package_name: str,
    version: str,
    otp: Optional[str] = None,
) -> None:
    """DELETE one version's tarball against the document's current revision."""
    rev = await _current_revision(client, package_name)
    encoded = encode_package_name(package_name)
    await client.request(
        f"/{encoded}/-/{package_name}-{version}.tgz/-rev/{rev}",
        method="DELETE",
        otp=otp,
    )


async def unpublish_package(
    client: RegistryClient,
    package_name: str,
    otp: Optional[str] = None,
) -> None:
    """DELETE the whole package against the document's current revision."""
    rev = await _current_revision(client, package_name)
    await client.request(
        f"/{encode_package_name(package_name)}/-rev/{rev}",
        method="DELETE",
        otp=otp,
    )
