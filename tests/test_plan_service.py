# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for the Plan Service (load -> validate -> confirm -> execute)
"""

import json

import pytest

from npm_sweep.core.errors import SchemaError
from npm_sweep.plan.exceptions import ConfirmationError, PlanValidationError
from npm_sweep.plan.generator import (
    create_deprecate_action,
    create_owner_add_action,
    create_owner_remove_action,
    create_plan,
)
from npm_sweep.plan.serializer import save_plan
from npm_sweep.plan.validation import NOT_OWNER
from npm_sweep.services.plan_service import PlanService


@pytest.fixture
def registry(fake_registry, packument):
    fake_registry.whoami("testuser").packument(packument)
    fake_registry.json("PUT", "/test-package", {"ok": True})
    return fake_registry


@pytest.fixture
def service(client):
    return PlanService(client)


async def write_plan(tmp_path, *actions, **options):
    path = tmp_path / "plan.json"
    await save_plan(create_plan(list(actions), actor="testuser", **options), str(path))
    return str(path)


class TestLoad:

    @pytest.mark.asyncio
    async def test_invalid_file(self, service, tmp_path):
        path = tmp_path / "plan.json"
        path.write_text(json.dumps({"version": 1, "actions": "nope"}))

        with pytest.raises(SchemaError):
            await service.load(str(path))


class TestApply:

    @pytest.mark.asyncio
    async def test_assume_yes_skips_confirmation(self, service, registry, tmp_path):
        path = await write_plan(tmp_path, create_deprecate_action("test-package", "*", "gone"))

        report = await service.apply(path, assume_yes=True)

        assert report.validation.valid
        assert report.result.summary.succeeded == 1
        assert len(registry.mutations) == 1

    @pytest.mark.asyncio
    async def test_confirmation_phrase(self, service, registry, tmp_path):
        path = await write_plan(tmp_path, create_deprecate_action("test-package", "*", "gone"))
        asked = []

        def confirm(phrase):
            asked.append(phrase)
            return phrase

        report = await service.apply(path, confirm=confirm)

        assert asked == ["APPLY 1"]
        assert report.result.summary.succeeded == 1

    @pytest.mark.asyncio
    async def test_async_confirmation(self, service, registry, tmp_path):
        path = await write_plan(tmp_path, create_deprecate_action("test-package", "*", "gone"))

        async def confirm(phrase):
            return phrase

        report = await service.apply(path, confirm=confirm)

        assert report.result.summary.succeeded == 1

    @pytest.mark.asyncio
    async def test_wrong_phrase_aborts(self, service, registry, tmp_path):
        path = await write_plan(tmp_path, create_deprecate_action("test-package", "*", "gone"))

        with pytest.raises(ConfirmationError) as exc:
            await service.apply(path, confirm=lambda phrase: "apply 1")

        assert exc.value.expected == "APPLY 1"
        assert registry.mutations == []

    @pytest.mark.asyncio
    async def test_destructive_needs_phrase_even_with_assume_yes(self, service, fake_registry, packument, tmp_path):
        packument["maintainers"].append({"name": "alice"})
        fake_registry.whoami("testuser").packument(packument)
        path = await write_plan(tmp_path, create_owner_remove_action("test-package", "alice"))

        with pytest.raises(ConfirmationError):
            await service.apply(path, assume_yes=True)

        assert fake_registry.mutations == []

    @pytest.mark.asyncio
    async def test_validation_errors_abort(self, service, fake_registry, packument, tmp_path):
        fake_registry.whoami("mallory").packument(packument)
        path = await write_plan(tmp_path, create_owner_add_action("test-package", "alice"))

        with pytest.raises(PlanValidationError) as exc:
            await service.apply(path, assume_yes=True)

        assert [e.code for e in exc.value.result.errors] == [NOT_OWNER]
        assert exc.value.details["errors"][0]["code"] == NOT_OWNER
        assert fake_registry.mutations == []

    @pytest.mark.asyncio
    async def test_dry_run_override(self, service, registry, tmp_path):
        path = await write_plan(tmp_path, create_deprecate_action("test-package", "*", "gone"))

        report = await service.apply(path, dry_run=True, assume_yes=True)

        assert report.plan.options.dry_run is True
        assert registry.mutations == []
        assert report.result.summary.succeeded == 1

    @pytest.mark.asyncio
    async def test_concurrency_override(self, service, registry, tmp_path):
        path = await write_plan(tmp_path, create_deprecate_action("test-package", "*", "gone"))

        report = await service.apply(path, concurrency=1, assume_yes=True)

        assert report.plan.options.concurrency == 1
