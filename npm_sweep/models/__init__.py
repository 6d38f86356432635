# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Data models: plans, execution results, packages, eligibility, actions."""

from .plan import (
    ArchiveRepoStep,
    DeprecateStep,
    OwnerAddStep,
    OwnerRemoveStep,
    PackageAction,
    Plan,
    PlanOptions,
    Step,
    TombstoneStep,
    UndeprecateStep,
    UnpublishStep,
)
from .execution import (
    ExecutionSummary,
    PackageResult,
    PackageStatus,
    PlanExecutionResult,
    StepResult,
    StepStatus,
)
from .package import DiscoveredPackage, PackageVersion, RepositoryLink
from .eligibility import Eligibility, EligibilityCheck, EligibilityChecks
from .action import ACTION_IMPACTS, ActionResult, ActionType, ImpactInfo, Severity

__all__ = [
    "ArchiveRepoStep",
    "DeprecateStep",
    "OwnerAddStep",
    "OwnerRemoveStep",
    "PackageAction",
    "Plan",
    "PlanOptions",
    "Step",
    "TombstoneStep",
    "UndeprecateStep",
    "UnpublishStep",
    "ExecutionSummary",
    "PackageResult",
    "PackageStatus",
    "PlanExecutionResult",
    "StepResult",
    "StepStatus",
    "DiscoveredPackage",
    "PackageVersion",
    "RepositoryLink",
    "Eligibility",
    "EligibilityCheck",
    "EligibilityChecks",
    "ACTION_IMPACTS",
    "ActionResult",
    "ActionType",
    "ImpactInfo",
    "Severity",
]
