# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Per-step actions against the registry and source repositories."""

from .deprecate import deprecate, undeprecate
from .tombstone import create_tombstone
from .unpublish import unpublish
from .ownership import add_owner, remove_owner
from .archive_repo import archive_repo

__all__ = [
    "deprecate",
    "undeprecate",
    "create_tombstone",
    "unpublish",
    "add_owner",
    "remove_owner",
    "archive_repo",
]
