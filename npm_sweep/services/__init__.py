# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Application services."""

from .plan_service import ApplyReport, PlanService

__all__ = ["ApplyReport", "PlanService"]
