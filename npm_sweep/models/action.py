# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Action results and the impact table shown before confirmation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class ActionType(str, Enum):
    """Registry and repository actions, one per plan step kind."""
    DEPRECATE = "deprecate"
    UNDEPRECATE = "undeprecate"
    UNPUBLISH = "unpublish"
    TOMBSTONE = "tombstone"
    OWNER_ADD = "ownerAdd"
    OWNER_REMOVE = "ownerRemove"
    ARCHIVE_REPO = "archiveRepo"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ActionResult(BaseModel):
    """What a single action did (or why it did not)."""
    model_config = ConfigDict(frozen=True)

    success: bool
    action: ActionType
    package: str
    message: Optional[str] = None
    error: Optional[str] = None
    details: Dict[str, Any] = {}

    @classmethod
    def ok(cls, action: ActionType, package: str, message: str, **details: Any) -> "ActionResult":
        return cls(success=True, action=action, package=package, message=message, details=details)

    @classmethod
    def fail(cls, action: ActionType, package: str, error: str, **details: Any) -> "ActionResult":
        return cls(success=False, action=action, package=package, error=error, details=details)


@dataclass(frozen=True)
class ImpactInfo:
    action: ActionType
    title: str
    description: str
    consequences: List[str] = field(default_factory=list)
    reversible: bool = True
    severity: Severity = Severity.LOW


ACTION_IMPACTS: Dict[ActionType, ImpactInfo] = {
    ActionType.DEPRECATE: ImpactInfo(
        action=ActionType.DEPRECATE,
        title="Deprecate Package",
        description="Mark package or version range as deprecated",
        consequences=[
            "Users will see a deprecation warning on install",
            "Does not break existing installs",
            "Package remains installable",
        ],
        reversible=True,
        severity=Severity.LOW,
    ),
    ActionType.UNDEPRECATE: ImpactInfo(
        action=ActionType.UNDEPRECATE,
        title="Remove Deprecation",
        description="Remove deprecation warning from package",
        consequences=[
            "Deprecation warning will no longer appear",
            "Package appears maintained again",
        ],
        reversible=True,
        severity=Severity.LOW,
    ),
    ActionType.UNPUBLISH: ImpactInfo(
        action=ActionType.UNPUBLISH,
        title="Unpublish Package",
        description="Permanently remove package or version from registry",
        consequences=[
            "Package/version becomes uninstallable",
            "IRREVERSIBLE - cannot undo",
            "pkg@version can never be reused",
            "Full package unpublish blocks republish for 24h",
            "May break dependent projects",
        ],
        reversible=False,
        severity=Severity.CRITICAL,
    ),
    ActionType.TOMBSTONE: ImpactInfo(
        action=ActionType.TOMBSTONE,
        title="Tombstone Release",
        description="Publish a major version that throws on import",
        consequences=[
            "Latest version will fail intentionally",
            "Users auto-updating (^) may break",
            "Package remains in registry (auditable)",
            "Old versions still installable",
        ],
        reversible=True,
        severity=Severity.HIGH,
    ),
    ActionType.OWNER_ADD: ImpactInfo(
        action=ActionType.OWNER_ADD,
        title="Add Owner",
        description="Add a maintainer to the package",
        consequences=[
            "New user gains full publish/admin rights",
            "They can add/remove other owners",
        ],
        reversible=True,
        severity=Severity.MEDIUM,
    ),
    ActionType.OWNER_REMOVE: ImpactInfo(
        action=ActionType.OWNER_REMOVE,
        title="Remove Owner",
        description="Remove a maintainer from the package",
        consequences=[
            "User loses all access to package",
            "If removing yourself, you lose control",
            "Cannot undo without another owner adding you back",
        ],
        reversible=False,
        severity=Severity.HIGH,
    ),
    ActionType.ARCHIVE_REPO: ImpactInfo(
        action=ActionType.ARCHIVE_REPO,
        title="Archive Repository",
        description="Set repository to read-only and add unmaintained banner",
        consequences=[
            "Repository becomes read-only",
            "No new issues, PRs, or commits allowed",
            "README will show unmaintained banner",
            "Code remains accessible for reference",
        ],
        reversible=True,
        severity=Severity.MEDIUM,
    ),
}
