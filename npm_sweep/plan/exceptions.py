# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan Exceptions

Raised by the plan workflow; step-level failures never surface as
exceptions (they are recorded on the step result).
"""

from npm_sweep.core.errors import SweepError


class PlanValidationError(SweepError):
    """Runtime validation found errors; execution must not start."""

    def __init__(self, result):
        self.result = result
        count = len(result.errors)
        super().__init__(
            f"Plan validation failed with {count} error(s)",
            status_code=422,
            details={"errors": [issue.to_dict() for issue in result.errors]},
        )


class ConfirmationError(SweepError):
    """The confirmation phrase was not typed exactly."""

    def __init__(self, expected: str):
        self.expected = expected
        super().__init__(f"Confirmation failed: expected '{expected}'", status_code=400)
