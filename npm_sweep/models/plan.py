# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan Models

Pydantic models for the versioned, persisted retirement plan.
Field aliases match the on-disk JSON document (camelCase).
"""

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _FrozenModel(BaseModel):
    """Immutable plan node. Edits go through the generator's copy functions."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")


# =============================================================================
# STEPS (closed tagged union on `type`)
# =============================================================================

class DeprecateStep(_FrozenModel):
    """Mark every version in `range` as deprecated with `message`."""
    type: Literal["deprecate"] = "deprecate"
    range_: str = Field(default="*", alias="range")
    message: str


class UndeprecateStep(_FrozenModel):
    """Clear the deprecation message on every version in `range`."""
    type: Literal["undeprecate"] = "undeprecate"
    range_: str = Field(default="*", alias="range")


class UnpublishStep(_FrozenModel):
    """Unpublish one version, or the whole package when `version` is omitted."""
    type: Literal["unpublish"] = "unpublish"
    version: Optional[str] = None
    force: bool = Field(default=False, strict=True)

    @property
    def is_full_package(self) -> bool:
        return self.version is None


class TombstoneStep(_FrozenModel):
    """Publish a release that throws on import. `target_version` may be "nextMajor"."""
    type: Literal["tombstone"] = "tombstone"
    target_version: str = Field(alias="targetVersion")
    message: str


class OwnerAddStep(_FrozenModel):
    type: Literal["ownerAdd"] = "ownerAdd"
    user: str


class OwnerRemoveStep(_FrozenModel):
    type: Literal["ownerRemove"] = "ownerRemove"
    user: str


class ArchiveRepoStep(_FrozenModel):
    """Archive the source repository, optionally adding an unmaintained banner first."""
    type: Literal["archiveRepo"] = "archiveRepo"
    provider: Literal["github", "gitlab"]
    repo: str
    add_banner: bool = Field(default=True, alias="addBanner", strict=True)


STEP_TYPES = (
    DeprecateStep,
    UndeprecateStep,
    UnpublishStep,
    TombstoneStep,
    OwnerAddStep,
    OwnerRemoveStep,
    ArchiveRepoStep,
)

Step = Annotated[
    Union[
        DeprecateStep,
        UndeprecateStep,
        UnpublishStep,
        TombstoneStep,
        OwnerAddStep,
        OwnerRemoveStep,
        ArchiveRepoStep,
    ],
    Field(discriminator="type"),
]

# Step `type` tags in declaration order
STEP_TAGS = tuple(model.model_fields["type"].default for model in STEP_TYPES)

DESTRUCTIVE_STEP_TAGS = frozenset({"unpublish", "ownerRemove"})


# =============================================================================
# PLAN
# =============================================================================

class PackageAction(_FrozenModel):
    """All steps for one package, executed strictly in order."""
    package: str = Field(min_length=1)
    steps: List[Step] = Field(min_length=1)


class PlanOptions(_FrozenModel):
    """Switches that unlock destructive behaviour take real JSON booleans only."""
    dry_run: bool = Field(default=False, alias="dryRun", strict=True)
    enable_unpublish: bool = Field(default=False, alias="enableUnpublish", strict=True)
    concurrency: int = Field(default=3, ge=1, strict=True)


class Plan(_FrozenModel):
    """
    Versioned retirement plan.

    At most one PackageAction per package name; the generator merges steps
    for a repeated package into the existing action.
    """
    version: Literal[1] = 1
    generated_at: datetime = Field(alias="generatedAt")
    actor: str
    options: PlanOptions = Field(default_factory=PlanOptions)
    actions: List[PackageAction] = Field(default_factory=list)

    @field_validator("actions")
    @classmethod
    def _unique_packages(cls, actions: List[PackageAction]) -> List[PackageAction]:
        seen = set()
        for action in actions:
            if action.package in seen:
                raise ValueError(f"duplicate action for package '{action.package}'")
            seen.add(action.package)
        return actions

    def find_action(self, package: str) -> Optional[PackageAction]:
        return next((a for a in self.actions if a.package == package), None)
