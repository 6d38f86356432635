# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry-derived package snapshots.

Read-only input to planning; never persisted as part of a plan.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class PackageVersion(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str
    published_at: Optional[datetime] = None
    deprecated: Optional[str] = None
    tarball: Optional[str] = None
    shasum: Optional[str] = None
    integrity: Optional[str] = None


class RepositoryLink(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "git"
    url: str


class DiscoveredPackage(BaseModel):
    """Snapshot of one package as seen on the registry, versions newest first."""
    model_config = ConfigDict(frozen=True)

    name: str
    scope: Optional[str] = None
    description: Optional[str] = None
    versions: List[PackageVersion] = []
    latest_version: str
    last_publish: datetime
    owners: List[str] = []
    weekly_downloads: Optional[int] = None
    deprecated: Optional[str] = None
    repository: Optional[RepositoryLink] = None
