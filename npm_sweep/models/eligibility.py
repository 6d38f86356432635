# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unpublish eligibility models.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, model_validator


class EligibilityCheck(BaseModel):
    """One named criterion contributing to an unpublish decision."""
    model_config = ConfigDict(frozen=True)

    passed: bool
    value: Union[bool, int, str]
    description: str


class EligibilityChecks(BaseModel):
    model_config = ConfigDict(frozen=True)

    publish_age: EligibilityCheck
    weekly_downloads: EligibilityCheck
    owner_count: EligibilityCheck
    has_dependents: EligibilityCheck

    def failed_names(self) -> list:
        return [name for name, check in self.items() if not check.passed]

    def items(self):
        return [
            ("publishAge", self.publish_age),
            ("weeklyDownloads", self.weekly_downloads),
            ("ownerCount", self.owner_count),
            ("hasDependents", self.has_dependents),
        ]


class Eligibility(BaseModel):
    """
    Unpublish decision.

    An ineligible result always carries a reason naming the failed checks.
    """
    model_config = ConfigDict(frozen=True)

    eligible: bool
    reason: Optional[str] = None
    checks: EligibilityChecks

    @model_validator(mode="after")
    def _reason_required(self) -> "Eligibility":
        if not self.eligible and not self.reason:
            raise ValueError("ineligible result must carry a reason")
        return self


DependentsSignal = Union[bool, Literal["unknown"]]
