# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan Service

Single responsibility: the load -> validate -> confirm -> execute workflow
for a persisted plan. Every validation issue is reported before any
mutating request is made.
"""

import inspect
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from npm_sweep.core.logging import get_service_logger
from npm_sweep.models.action import ACTION_IMPACTS, ActionType
from npm_sweep.models.execution import PlanExecutionResult
from npm_sweep.models.plan import Plan
from npm_sweep.plan.context import OtpSource, ProgressCallback
from npm_sweep.plan.exceptions import ConfirmationError, PlanValidationError
from npm_sweep.plan.executor import PlanExecutor
from npm_sweep.plan.generator import (
    confirmation_phrase,
    count_steps,
    get_destructive_steps,
    has_destructive_actions,
    with_options,
)
from npm_sweep.plan.serializer import load_plan
from npm_sweep.plan.validation import (
    ValidationResult,
    format_validation_result,
    validate_plan_runtime,
)
from npm_sweep.registry.client import RegistryClient

logger = get_service_logger("plan")

# Receives the expected phrase, returns what the operator typed
ConfirmCallback = Callable[[str], Union[str, Awaitable[str]]]


@dataclass
class ApplyReport:
    plan: Plan
    validation: ValidationResult
    result: PlanExecutionResult


class PlanService:
    """Applies persisted plans."""

    def __init__(self, client: RegistryClient, otp_source: Optional[OtpSource] = None):
        """
        Initialize plan service.

        Args:
            client: Registry client used for validation and execution
            otp_source: Called when the registry asks for a one-time password
        """
        self.client = client
        self.otp_source = otp_source

    async def load(self, path: str) -> Plan:
        """Load and structurally validate a plan file (raises SchemaError)."""
        plan = await load_plan(path)
        stats = count_steps(plan)
        logger.info(
            f"Loaded plan {path}: actor={plan.actor}, "
            f"packages={len(plan.actions)}, steps={stats.total}"
        )
        return plan

    async def validate(self, plan: Plan) -> ValidationResult:
        result = await validate_plan_runtime(self.client, plan)
        for issue in result.errors:
            logger.error(f"[{issue.code}] {issue.package or '-'}: {issue.message}")
        for issue in result.warnings:
            logger.warning(f"[{issue.code}] {issue.package or '-'}: {issue.message}")
        return result

    async def apply(
        self,
        path: str,
        confirm: Optional[ConfirmCallback] = None,
        dry_run: bool = False,
        enable_unpublish: bool = False,
        concurrency: Optional[int] = None,
        otp: Optional[str] = None,
        assume_yes: bool = False,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        """
        Load, validate, confirm and execute a plan file.

        Destructive plans (unpublish, ownerRemove) always need the
        confirmation phrase; other plans need it unless assume_yes.

        Raises:
            SchemaError: The file is not a valid plan
            PlanValidationError: Runtime validation found errors
            ConfirmationError: The phrase was not confirmed
        """
        plan = await self.load(path)

        overrides = {}
        if enable_unpublish:
            overrides["enable_unpublish"] = True
        if dry_run:
            overrides["dry_run"] = True
        if concurrency is not None:
            overrides["concurrency"] = concurrency
        if overrides:
            plan = with_options(plan, **overrides)

        validation = await self.validate(plan)
        logger.info(format_validation_result(validation))
        if not validation.valid:
            raise PlanValidationError(validation)

        destructive = has_destructive_actions(plan)
        if destructive or not assume_yes:
            await self._confirm(plan, confirm, destructive)

        executor = PlanExecutor(self.client, self.otp_source)
        result = await executor.execute(plan, otp=otp, on_progress=on_progress)

        if result.summary.failed or result.summary.partial:
            logger.warning(
                f"Completed with {result.summary.failed} failed and "
                f"{result.summary.partial} partial package(s)"
            )
        else:
            logger.info("All actions completed successfully")

        return ApplyReport(plan=plan, validation=validation, result=result)

    async def _confirm(self, plan: Plan, confirm: Optional[ConfirmCallback], destructive: bool) -> None:
        phrase = confirmation_phrase(plan)
        if confirm is None:
            raise ConfirmationError(phrase)

        if destructive:
            logger.warning("This plan contains IRREVERSIBLE actions")
            for item in get_destructive_steps(plan):
                impact = ACTION_IMPACTS[ActionType(item.step.type)]
                logger.warning(f"  {impact.title}: {item.package} (severity: {impact.severity.value})")

        answer = confirm(phrase)
        if inspect.isawaitable(answer):
            answer = await answer

        if (answer or "").strip() != phrase:
            raise ConfirmationError(phrase)
