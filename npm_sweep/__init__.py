# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
npm-sweep

Retire npm packages through persisted, validated plans: deprecate,
tombstone, unpublish, transfer ownership, archive repositories.
"""

from npm_sweep.plan.generator import add_action_to_plan, create_plan
from npm_sweep.plan.serializer import load_plan, save_plan
from npm_sweep.plan.validation import validate_plan_runtime
from npm_sweep.plan.executor import execute_plan
from npm_sweep.policy.unpublish import check_unpublish_eligibility
from npm_sweep.registry.client import RegistryClient

__version__ = "1.0.0"

__all__ = [
    "add_action_to_plan",
    "create_plan",
    "load_plan",
    "save_plan",
    "validate_plan_runtime",
    "execute_plan",
    "check_unpublish_eligibility",
    "RegistryClient",
]
