# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""npm registry transport and endpoints."""

from .client import RegistryClient, encode_package_name, resolve_token
from .auth import verify_auth, whoami
from .packument import (
    get_abbreviated_packument,
    get_packument,
    packument_to_discovered,
    update_packument,
)
from .downloads import get_bulk_downloads, get_weekly_downloads
from .search import find_packages_by_maintainer, search_all_packages, search_packages
from .owners import add_owner, get_owners, remove_owner
from .tarball import (
    calculate_integrity,
    calculate_shasum,
    download_tarball,
    publish_package,
    unpublish_package,
    unpublish_version,
)

__all__ = [
    "RegistryClient",
    "encode_package_name",
    "resolve_token",
    "verify_auth",
    "whoami",
    "get_abbreviated_packument",
    "get_packument",
    "packument_to_discovered",
    "update_packument",
    "get_bulk_downloads",
    "get_weekly_downloads",
    "find_packages_by_maintainer",
    "search_all_packages",
    "search_packages",
    "add_owner",
    "get_owners",
    "remove_owner",
    "calculate_integrity",
    "calculate_shasum",
    "download_tarball",
    "publish_package",
    "unpublish_package",
    "unpublish_version",
]
