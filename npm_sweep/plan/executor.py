# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan Executor

Batch-based execution engine.

Packages are partitioned into batches of `concurrency`; all packages of a
batch run concurrently and the whole batch resolves before the next one
starts. Steps of one package run strictly in order; the first failed step
turns every later step of that package into "skipped".
"""

import asyncio
from typing import List, Optional, assert_never

from npm_sweep.actions.archive_repo import archive_repo
from npm_sweep.actions.deprecate import deprecate, undeprecate
from npm_sweep.actions.ownership import add_owner, remove_owner
from npm_sweep.actions.tombstone import create_tombstone
from npm_sweep.actions.unpublish import unpublish
from npm_sweep.core.errors import OtpRequiredError, OtpUnavailableError, sanitize_error_for_user
from npm_sweep.core.logging import get_service_logger, log_event
from npm_sweep.models.action import ActionResult
from npm_sweep.models.execution import (
    ExecutionSummary,
    PackageResult,
    PackageStatus,
    PlanExecutionResult,
    StepResult,
    StepStatus,
)
from npm_sweep.models.plan import (
    STEP_TYPES,
    ArchiveRepoStep,
    DeprecateStep,
    OwnerAddStep,
    OwnerRemoveStep,
    PackageAction,
    Plan,
    Step,
    TombstoneStep,
    UndeprecateStep,
    UnpublishStep,
)
from npm_sweep.registry.client import RegistryClient

from .context import ExecutionContext, OtpSession, OtpSource, ProgressCallback

logger = get_service_logger("executor")

CASCADE_MESSAGE = "Skipped due to previous failure"
DRY_RUN_MESSAGE = "[DRY RUN] Skipped"
UNPUBLISH_DISABLED_MESSAGE = "Unpublish disabled (use --enable-unpublish)"

# Every step model must have a branch in PlanExecutor._run_step
_HANDLED_STEP_TYPES = (
    DeprecateStep,
    UndeprecateStep,
    UnpublishStep,
    TombstoneStep,
    OwnerAddStep,
    OwnerRemoveStep,
    ArchiveRepoStep,
)
assert set(_HANDLED_STEP_TYPES) == set(STEP_TYPES), "executor does not handle every step type"


def _to_step_result(step: Step, result: ActionResult) -> StepResult:
    return StepResult(
        step=step,
        status=StepStatus.SUCCESS if result.success else StepStatus.FAILED,
        message=result.message,
        error=result.error,
    )


class PlanExecutor:
    """
    Executes a validated plan against the registry.

    Only validated plans should be passed in; the executor does not
    re-run runtime validation.
    """

    def __init__(self, client: RegistryClient, otp_source: Optional[OtpSource] = None):
        self.client = client
        self.otp_source = otp_source

    async def execute(
        self,
        plan: Plan,
        dry_run: Optional[bool] = None,
        otp: Optional[str] = None,
        concurrency: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PlanExecutionResult:
        """
        Execute every action of `plan`.

        Args:
            plan: Validated plan
            dry_run: Override plan.options.dry_run
            otp: Initial one-time password for the run
            concurrency: Override plan.options.concurrency
            on_progress: Called as (package, step number, step count)

        Returns:
            PlanExecutionResult with one PackageResult per action, in plan order
        """
        if dry_run is None:
            dry_run = plan.options.dry_run
        if concurrency is None:
            concurrency = plan.options.concurrency
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        context = ExecutionContext(
            otp=OtpSession(self.otp_source, otp),
            dry_run=dry_run,
            enable_unpublish=plan.options.enable_unpublish,
            on_progress=on_progress,
        )

        batches = [
            plan.actions[i:i + concurrency]
            for i in range(0, len(plan.actions), concurrency)
        ]
        logger.info(
            f"Executing {len(plan.actions)} package(s) in {len(batches)} batch(es)"
            f"{' [DRY RUN]' if dry_run else ''}"
        )

        results: List[PackageResult] = []
        try:
            for number, batch in enumerate(batches, start=1):
                logger.debug(f"Batch {number}/{len(batches)}: {[a.package for a in batch]}")
                results.extend(await self._execute_batch(batch, context))
        finally:
            context.finalize()

        summary = ExecutionSummary.from_results(results)
        log_event(
            logger, "plan_executed",
            total=summary.total, succeeded=summary.succeeded,
            failed=summary.failed, partial=summary.partial, dry_run=dry_run,
        )

        return PlanExecutionResult(
            plan=plan,
            started_at=context.started_at,
            completed_at=context.completed_at,
            results=results,
            summary=summary,
        )

    async def _execute_batch(
        self,
        actions: List[PackageAction],
        context: ExecutionContext,
    ) -> List[PackageResult]:
        """Run one batch concurrently; returns once every package is terminal."""
        outcomes = await asyncio.gather(
            *(self._execute_package(action, context) for action in actions),
            return_exceptions=True,
        )

        results = []
        for action, outcome in zip(actions, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(f"Unexpected error executing {action.package}: {outcome}")
                outcome = self._crashed_package(action, outcome)
            results.append(outcome)
        return results

    def _crashed_package(self, action: PackageAction, error: Exception) -> PackageResult:
        steps = [StepResult(step=action.steps[0], status=StepStatus.FAILED, error=sanitize_error_for_user(error))]
        steps.extend(
            StepResult(step=step, status=StepStatus.SKIPPED, message=CASCADE_MESSAGE)
            for step in action.steps[1:]
        )
        return PackageResult(package=action.package, steps=steps, overall_status=PackageStatus.FAILED)

    async def _execute_package(self, action: PackageAction, context: ExecutionContext) -> PackageResult:
        """Run the steps of one package in order, cascading on the first failure."""
        step_results: List[StepResult] = []
        failed = False
        total = len(action.steps)

        for index, step in enumerate(action.steps, start=1):
            if failed:
                step_results.append(StepResult(step=step, status=StepStatus.SKIPPED, message=CASCADE_MESSAGE))
                continue

            context.report_progress(action.package, index, total)

            if context.dry_run:
                logger.info(f"[DRY RUN] Would execute {step.type} on {action.package}")
                step_results.append(StepResult(step=step, status=StepStatus.SUCCESS, message=DRY_RUN_MESSAGE))
                continue

            try:
                result = await self._execute_step_with_otp_retry(action.package, step, context)
            except Exception as e:
                logger.error(f"Unexpected error in {step.type} on {action.package}: {e}")
                result = StepResult(step=step, status=StepStatus.FAILED, error=sanitize_error_for_user(e))
            step_results.append(result)
            if result.status == StepStatus.FAILED:
                failed = True

        return PackageResult(
            package=action.package,
            steps=step_results,
            overall_status=PackageResult.aggregate(step_results),
        )

    async def _execute_step_with_otp_retry(
        self,
        package: str,
        step: Step,
        context: ExecutionContext,
    ) -> StepResult:
        """Run a step; on an OTP challenge obtain a code and retry exactly once."""
        code, generation = context.otp.snapshot()
        try:
            return await self._execute_step(package, step, context, code)
        except OtpRequiredError:
            logger.debug(f"OTP required for {step.type} on {package}")

        try:
            code = await context.otp.refresh(generation)
        except OtpUnavailableError as e:
            return StepResult(step=step, status=StepStatus.FAILED, error=e.message)

        try:
            return await self._execute_step(package, step, context, code)
        except OtpRequiredError as e:
            return StepResult(step=step, status=StepStatus.FAILED, error=e.message)

    async def _execute_step(
        self,
        package: str,
        step: Step,
        context: ExecutionContext,
        otp: Optional[str],
    ) -> StepResult:
        """
        Run one step. OtpRequiredError propagates; any other error becomes
        a failed StepResult.
        """
        if isinstance(step, UnpublishStep) and not context.enable_unpublish:
            return StepResult(step=step, status=StepStatus.SKIPPED, message=UNPUBLISH_DISABLED_MESSAGE)

        try:
            result = await self._run_step(package, step, otp)
        except OtpRequiredError:
            raise
        except Exception as e:
            logger.warning(f"{step.type} on {package} failed: {e}")
            return StepResult(step=step, status=StepStatus.FAILED, error=sanitize_error_for_user(e, include_type=False))

        return _to_step_result(step, result)

    async def _run_step(self, package: str, step: Step, otp: Optional[str]) -> ActionResult:
        client = self.client

        if isinstance(step, DeprecateStep):
            return await deprecate(client, package, step.range_, step.message, otp)
        elif isinstance(step, UndeprecateStep):
            return await undeprecate(client, package, step.range_, otp)
        elif isinstance(step, UnpublishStep):
            return await unpublish(client, package, step.version, step.force, otp)
        elif isinstance(step, TombstoneStep):
            return await create_tombstone(client, package, step.target_version, step.message, otp)
        elif isinstance(step, OwnerAddStep):
            return await add_owner(client, package, step.user, otp)
        elif isinstance(step, OwnerRemoveStep):
            return await remove_owner(client, package, step.user, otp)
        elif isinstance(step, ArchiveRepoStep):
            return await archive_repo(package, step.provider, step.repo, step.add_banner)
        else:
            assert_never(step)


async def execute_plan(
    client: RegistryClient,
    plan: Plan,
    dry_run: Optional[bool] = None,
    otp: Optional[str] = None,
    concurrency: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    otp_source: Optional[OtpSource] = None,
) -> PlanExecutionResult:
    """Execute `plan` with a fresh PlanExecutor."""
    executor = PlanExecutor(client, otp_source)
    return await executor.execute(
        plan,
        dry_run=dry_run,
        otp=otp,
        concurrency=concurrency,
        on_progress=on_progress,
    )


def format_execution_result(result: PlanExecutionResult) -> str:
    duration_ms = int((result.completed_at - result.started_at).total_seconds() * 1000)
    summary = result.summary

    lines = [
        f"Execution completed in {duration_ms}ms",
        f"Summary: {summary.succeeded} succeeded, {summary.partial} partial, {summary.failed} failed",
        "",
    ]

    package_icons = {
        PackageStatus.SUCCESS: "✓",
        PackageStatus.PARTIAL: "◐",
        PackageStatus.FAILED: "✗",
    }
    step_icons = {
        StepStatus.SUCCESS: "✓",
        StepStatus.SKIPPED: "○",
        StepStatus.FAILED: "✗",
    }

    for package_result in result.results:
        lines.append(f"{package_icons[package_result.overall_status]} {package_result.package}")
        for step_result in package_result.steps:
            detail = step_result.message or step_result.error or ""
            lines.append(f"  {step_icons[step_result.status]} {step_result.step.type}: {detail}")

    return "\n".join(lines)
