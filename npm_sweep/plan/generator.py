# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan Generator

Copy-producing edits: every function returns a new Plan and leaves its
input untouched.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from npm_sweep.models.plan import (
    DESTRUCTIVE_STEP_TAGS,
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


class StepCounts(NamedTuple):
    total: int
    by_type: Dict[str, int]


class DestructiveStep(NamedTuple):
    package: str
    step: Step


def create_plan(
    actions: Iterable[PackageAction],
    actor: str,
    dry_run: bool = False,
    enable_unpublish: bool = False,
    concurrency: int = 3,
    generated_at: Optional[datetime] = None,
) -> Plan:
    """
    Build a new plan.

    Actions for the same package are merged, keeping step order.
    """
    plan = Plan(
        version=1,
        generated_at=generated_at or datetime.now(timezone.utc),
        actor=actor,
        options=PlanOptions(
            dry_run=dry_run,
            enable_unpublish=enable_unpublish,
            concurrency=concurrency,
        ),
        actions=[],
    )
    for action in actions:
        plan = add_action_to_plan(plan, action)
    return plan


def add_action_to_plan(plan: Plan, action: PackageAction) -> Plan:
    """Append an action; a repeated package gets its steps appended instead."""
    actions: List[PackageAction] = []
    merged = False

    for existing in plan.actions:
        if existing.package == action.package:
            existing = existing.model_copy(update={"steps": [*existing.steps, *action.steps]})
            merged = True
        actions.append(existing)

    if not merged:
        actions.append(action)

    return plan.model_copy(update={"actions": actions})


def remove_action_from_plan(plan: Plan, package: str) -> Plan:
    return plan.model_copy(update={"actions": [a for a in plan.actions if a.package != package]})


def with_options(plan: Plan, **changes: Any) -> Plan:
    """
    Copy of `plan` with some options replaced.

    Keyword names are PlanOptions field names (dry_run, enable_unpublish,
    concurrency). Values are validated.
    """
    options = PlanOptions(**{**plan.options.model_dump(), **changes})
    return plan.model_copy(update={"options": options})


def create_deprecate_action(package: str, range_: str, message: str) -> PackageAction:
    return PackageAction(package=package, steps=[DeprecateStep(range_=range_, message=message)])


def create_undeprecate_action(package: str, range_: str = "*") -> PackageAction:
    return PackageAction(package=package, steps=[UndeprecateStep(range_=range_)])


def create_unpublish_action(package: str, version: Optional[str] = None, force: bool = False) -> PackageAction:
    return PackageAction(package=package, steps=[UnpublishStep(version=version, force=force)])


def create_tombstone_action(package: str, target_version: str, message: str) -> PackageAction:
    return PackageAction(
        package=package,
        steps=[TombstoneStep(target_version=target_version, message=message)],
    )


def create_owner_add_action(package: str, user: str) -> PackageAction:
    return PackageAction(package=package, steps=[OwnerAddStep(user=user)])


def create_owner_remove_action(package: str, user: str) -> PackageAction:
    return PackageAction(package=package, steps=[OwnerRemoveStep(user=user)])


def create_archive_repo_action(
    package: str,
    repo: str,
    provider: str = "github",
    add_banner: bool = True,
) -> PackageAction:
    return PackageAction(
        package=package,
        steps=[ArchiveRepoStep(provider=provider, repo=repo, add_banner=add_banner)],
    )


def count_steps(plan: Plan) -> StepCounts:
    by_type: Dict[str, int] = {}
    total = 0
    for action in plan.actions:
        for step in action.steps:
            total += 1
            by_type[step.type] = by_type.get(step.type, 0) + 1
    return StepCounts(total, by_type)


def get_destructive_steps(plan: Plan) -> List[DestructiveStep]:
    """Unpublish and ownerRemove steps, in plan order."""
    return [
        DestructiveStep(action.package, step)
        for action in plan.actions
        for step in action.steps
        if step.type in DESTRUCTIVE_STEP_TAGS
    ]


def has_destructive_actions(plan: Plan) -> bool:
    return bool(get_destructive_steps(plan))


def confirmation_phrase(plan: Plan) -> str:
    """What the operator must type to apply `plan`."""
    return f"APPLY {count_steps(plan).total}"
