# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for Runtime Plan Validation
"""

import httpx
import pytest

from conftest import make_discovered, make_packument
from npm_sweep.core.errors import PolicyViolationError
from npm_sweep.plan.generator import (
    create_deprecate_action,
    create_owner_add_action,
    create_owner_remove_action,
    create_plan,
    create_tombstone_action,
    create_unpublish_action,
)
from npm_sweep.plan.validation import (
    ALREADY_OWNER,
    AUTH_FAILED,
    FORCE_REQUIRED,
    LAST_OWNER,
    NOT_OWNER,
    REMOVING_SELF,
    UNPUBLISH_DISABLED,
    UNPUBLISH_INELIGIBLE,
    VALIDATION_ERROR,
    VERSION_EXISTS,
    format_validation_result,
    validate_plan_runtime,
)
from npm_sweep.policy.ownership import check_owner_removal, format_ownership_report, validate_ownership


def plan_of(*actions, **options):
    return create_plan(list(actions), actor="testuser", **options)


def codes(issues):
    return [issue.code for issue in issues]


@pytest.fixture
def registry(fake_registry, packument):
    """Authenticated as the package's only owner."""
    return fake_registry.whoami("testuser").packument(packument)


class TestAuthentication:

    @pytest.mark.asyncio
    async def test_auth_failure_is_fatal(self, client, fake_registry):
        fake_registry.json("GET", "/-/whoami", {"error": "Unauthorized"}, status=401)
        plan = plan_of(create_deprecate_action("test-package", "*", "gone"))

        result = await validate_plan_runtime(client, plan)

        assert not result.valid
        assert codes(result.errors) == [AUTH_FAILED]
        assert len(fake_registry.requests) == 1


class TestOwnership:

    @pytest.mark.asyncio
    async def test_valid_plan(self, client, registry):
        plan = plan_of(create_deprecate_action("test-package", "*", "gone"))

        result = await validate_plan_runtime(client, plan)

        assert result.valid
        assert result.warnings == []

    @pytest.mark.asyncio
    async def test_not_owner(self, client, fake_registry, packument):
        fake_registry.whoami("mallory").packument(packument)
        plan = plan_of(create_deprecate_action("test-package", "*", "gone"))

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [NOT_OWNER]
        assert result.errors[0].package == "test-package"

    @pytest.mark.asyncio
    async def test_owner_match_ignores_case(self, client, fake_registry, packument):
        fake_registry.whoami("TestUser").packument(packument)
        plan = plan_of(create_deprecate_action("test-package", "*", "gone"))

        assert (await validate_plan_runtime(client, plan)).valid

    @pytest.mark.asyncio
    async def test_last_owner_removal(self, client, registry):
        plan = plan_of(create_owner_remove_action("test-package", "testuser"))

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [LAST_OWNER]
        assert result.errors[0].step == 0
        assert registry.mutations == []

    @pytest.mark.asyncio
    async def test_removal_after_add_is_allowed(self, client, registry):
        plan = plan_of(
            create_owner_add_action("test-package", "alice"),
            create_owner_remove_action("test-package", "testuser"),
        )

        result = await validate_plan_runtime(client, plan)

        assert result.valid
        assert codes(result.warnings) == [REMOVING_SELF]
        assert result.warnings[0].step == 1

    @pytest.mark.asyncio
    async def test_removing_everyone(self, client, fake_registry, packument):
        packument["maintainers"].append({"name": "alice"})
        fake_registry.whoami("testuser").packument(packument)
        plan = plan_of(
            create_owner_remove_action("test-package", "alice"),
            create_owner_remove_action("test-package", "testuser"),
        )

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [LAST_OWNER]
        assert result.errors[0].step == 1

    @pytest.mark.asyncio
    async def test_already_owner_warning(self, client, registry):
        plan = plan_of(create_owner_add_action("test-package", "testuser"))

        result = await validate_plan_runtime(client, plan)

        assert result.valid
        assert codes(result.warnings) == [ALREADY_OWNER]


class TestTombstone:

    @pytest.mark.asyncio
    async def test_existing_version(self, client, registry):
        plan = plan_of(create_tombstone_action("test-package", "1.2.3", "gone"))

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [VERSION_EXISTS]
        assert "1.2.3" in result.errors[0].message

    @pytest.mark.asyncio
    async def test_next_major_free(self, client, registry):
        plan = plan_of(create_tombstone_action("test-package", "nextMajor", "gone"))

        assert (await validate_plan_runtime(client, plan)).valid

    @pytest.mark.asyncio
    async def test_next_major_taken(self, client, fake_registry):
        doc = make_packument()
        doc["versions"]["2.0.0"] = {"name": "test-package", "version": "2.0.0"}
        fake_registry.whoami("testuser").packument(doc)
        plan = plan_of(create_tombstone_action("test-package", "nextMajor", "gone"))

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [VERSION_EXISTS]
        assert result.errors[0].message == "Version 2.0.0 already exists"


class TestUnpublish:

    @pytest.mark.asyncio
    async def test_disabled_and_force(self, client, registry):
        registry.json("GET", "/downloads/point/last-week/test-package", {"downloads": 1})
        plan = plan_of(create_unpublish_action("test-package"))

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [UNPUBLISH_DISABLED, FORCE_REQUIRED]

    @pytest.mark.asyncio
    async def test_enabled_and_eligible(self, client, registry):
        registry.json("GET", "/downloads/point/last-week/test-package", {"downloads": 1})
        plan = plan_of(create_unpublish_action("test-package", "1.0.0"), enable_unpublish=True)

        assert (await validate_plan_runtime(client, plan)).valid

    @pytest.mark.asyncio
    async def test_ineligible(self, client, registry):
        registry.json("GET", "/downloads/point/last-week/test-package", {"downloads": 5000})
        plan = plan_of(create_unpublish_action("test-package", "1.0.0"), enable_unpublish=True)

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [UNPUBLISH_INELIGIBLE]
        assert "weeklyDownloads" in result.errors[0].message


class TestReadOnly:

    @pytest.mark.asyncio
    async def test_missing_package(self, client, fake_registry):
        fake_registry.whoami("testuser")
        plan = plan_of(create_deprecate_action("ghost", "*", "gone"))

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [VALIDATION_ERROR]
        assert result.errors[0].package == "ghost"

    @pytest.mark.asyncio
    async def test_unparseable_document_stops_only_that_package(self, client, registry):
        registry.add("GET", "/broken", httpx.Response(200, text="<html>maintenance</html>"))
        plan = plan_of(
            create_deprecate_action("broken", "*", "gone"),
            create_owner_add_action("test-package", "alice"),
        )

        result = await validate_plan_runtime(client, plan)

        assert codes(result.errors) == [VALIDATION_ERROR]
        assert result.errors[0].package == "broken"
        assert any(r.url.path == "/test-package" for r in registry.requests)

    @pytest.mark.asyncio
    async def test_unpublished_time_entry(self, client, registry):
        doc = make_packument("revived")
        doc["time"]["unpublished"] = {"time": "2023-01-01T00:00:00.000Z", "versions": ["0.1.0"]}
        registry.packument(doc)
        plan = plan_of(
            create_deprecate_action("revived", "*", "gone"),
            create_deprecate_action("test-package", "*", "gone"),
        )

        result = await validate_plan_runtime(client, plan)

        assert result.valid

    @pytest.mark.asyncio
    async def test_only_reads(self, client, registry):
        registry.json("GET", "/downloads/point/last-week/test-package", {"downloads": 1})
        plan = plan_of(
            create_deprecate_action("test-package", "*", "gone"),
            create_owner_add_action("test-package", "alice"),
            create_owner_remove_action("test-package", "testuser"),
            create_tombstone_action("test-package", "nextMajor", "gone"),
            create_unpublish_action("test-package", "1.0.0"),
        )

        await validate_plan_runtime(client, plan)

        assert {r.method for r in registry.requests} == {"GET"}


class TestFormat:

    @pytest.mark.asyncio
    async def test_format(self, client, registry):
        plan = plan_of(create_owner_remove_action("test-package", "testuser"))

        text = format_validation_result(await validate_plan_runtime(client, plan))

        assert text.splitlines()[0] == "✗ Plan has errors"
        assert "[test-package step 0]" in text


class TestOwnershipPolicy:

    def test_check_owner_removal(self):
        check_owner_removal("pkg", ["a", "b"], "a")
        check_owner_removal("pkg", ["a"], "b")

        with pytest.raises(PolicyViolationError) as exc:
            check_owner_removal("pkg", ["a"], "A")
        assert exc.value.code == "LAST_OWNER"

    def test_validate_only_owner(self):
        validation = validate_ownership(make_discovered(1, owners=["me"]), "me")

        assert validation.can_transfer
        assert validation.is_only_owner
        assert not validation.can_remove_self
        assert "Can remove self: No" in format_ownership_report(validation)

    def test_validate_not_owner(self):
        validation = validate_ownership(make_discovered(1, owners=["a", "b"]), "me")

        assert not validation.can_transfer
        assert validation.warnings == ["You are not an owner of this package"]
