# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan engine: generation, persistence, runtime validation and execution.
"""

from .generator import (
    add_action_to_plan,
    confirmation_phrase,
    count_steps,
    create_archive_repo_action,
    create_deprecate_action,
    create_owner_add_action,
    create_owner_remove_action,
    create_plan,
    create_tombstone_action,
    create_undeprecate_action,
    create_unpublish_action,
    get_destructive_steps,
    has_destructive_actions,
    remove_action_from_plan,
    with_options,
)
from .serializer import load_plan, plan_from_json, plan_to_json, save_plan, validate_plan_schema
from .validation import (
    ValidationIssue,
    ValidationResult,
    format_validation_result,
    validate_plan_runtime,
)
from .context import ExecutionContext, OtpSession
from .executor import PlanExecutor, execute_plan, format_execution_result
from .exceptions import ConfirmationError, PlanValidationError

__all__ = [
    "add_action_to_plan",
    "confirmation_phrase",
    "count_steps",
    "create_archive_repo_action",
    "create_deprecate_action",
    "create_owner_add_action",
    "create_owner_remove_action",
    "create_plan",
    "create_tombstone_action",
    "create_undeprecate_action",
    "create_unpublish_action",
    "get_destructive_steps",
    "has_destructive_actions",
    "remove_action_from_plan",
    "with_options",
    "load_plan",
    "plan_from_json",
    "plan_to_json",
    "save_plan",
    "validate_plan_schema",
    "ValidationIssue",
    "ValidationResult",
    "format_validation_result",
    "validate_plan_runtime",
    "ExecutionContext",
    "OtpSession",
    "PlanExecutor",
    "execute_plan",
    "format_execution_result",
    "ConfirmationError",
    "PlanValidationError",
]
