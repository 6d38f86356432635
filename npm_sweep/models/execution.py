# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Execution result models.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .plan import Plan, Step


class StepStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class PackageStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class StepResult(BaseModel):
    """Outcome of one step."""
    model_config = ConfigDict(frozen=True)

    step: Step
    status: StepStatus
    message: Optional[str] = None
    error: Optional[str] = None


class PackageResult(BaseModel):
    """Outcome of every step of one package, plus its aggregate status."""
    model_config = ConfigDict(frozen=True)

    package: str
    steps: List[StepResult]
    overall_status: PackageStatus

    @staticmethod
    def aggregate(steps: List[StepResult]) -> PackageStatus:
        """success iff every step succeeded, failed iff none did, partial otherwise."""
        succeeded = sum(1 for s in steps if s.status == StepStatus.SUCCESS)
        if succeeded == len(steps):
            return PackageStatus.SUCCESS
        if succeeded == 0:
            return PackageStatus.FAILED
        return PackageStatus.PARTIAL


class ExecutionSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    partial: int = 0

    @classmethod
    def from_results(cls, results: List[PackageResult]) -> "ExecutionSummary":
        return cls(
            total=len(results),
            succeeded=sum(1 for r in results if r.overall_status == PackageStatus.SUCCESS),
            failed=sum(1 for r in results if r.overall_status == PackageStatus.FAILED),
            partial=sum(1 for r in results if r.overall_status == PackageStatus.PARTIAL),
        )


class PlanExecutionResult(BaseModel):
    """Result of executing a whole plan"""
    model_config = ConfigDict(frozen=True)

    plan: Plan
    started_at: datetime
    completed_at: datetime
    results: List[PackageResult] = Field(default_factory=list)
    summary: ExecutionSummary
