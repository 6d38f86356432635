# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Unpublish and ownership policies."""

from .unpublish import (
    check_for_dependents,
    check_unpublish_eligibility,
    evaluate_unpublish_eligibility,
    format_eligibility_report,
)
from .ownership import (
    OwnershipValidation,
    check_owner_removal,
    format_ownership_report,
    validate_ownership,
)

__all__ = [
    "check_for_dependents",
    "check_unpublish_eligibility",
    "evaluate_unpublish_eligibility",
    "format_eligibility_report",
    "OwnershipValidation",
    "check_owner_removal",
    "format_ownership_report",
    "validate_ownership",
]
