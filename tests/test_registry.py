# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Unit Tests for Registry Operations

Packuments, downloads, owners, search and tarball publish/unpublish.
"""

import base64
import hashlib
from datetime import datetime, timezone

import httpx
import pytest

from conftest import make_packument
from npm_sweep.core.config import reload_config
from npm_sweep.core.errors import PolicyViolationError, RegistryError
from npm_sweep.registry import owners, search
from npm_sweep.registry.downloads import get_bulk_downloads, get_weekly_downloads
from npm_sweep.registry.packument import (
    ABBREVIATED_ACCEPT,
    get_abbreviated_packument,
    get_packument,
    packument_to_discovered,
    update_packument,
)
from npm_sweep.registry.tarball import (
    calculate_integrity,
    calculate_shasum,
    download_tarball,
    publish_package,
    unpublish_package,
    unpublish_version,
)

DOWNLOADS_API = "https://api.npmjs.test"


class TestPackument:

    @pytest.mark.asyncio
    async def test_get_scoped(self, client, fake_registry):
        doc = make_packument("@scope/pkg")
        fake_registry.json("GET", "/@scope/pkg", doc)

        assert (await get_packument(client, "@scope/pkg"))["name"] == "@scope/pkg"
        assert fake_registry.requests[0].url.raw_path == b"/@scope%2Fpkg"

    @pytest.mark.asyncio
    async def test_get_abbreviated(self, client, fake_registry, packument):
        fake_registry.packument(packument)

        await get_abbreviated_packument(client, "test-package")

        assert fake_registry.requests[0].headers["accept"] == ABBREVIATED_ACCEPT

    @pytest.mark.asyncio
    async def test_update_puts_document(self, client, fake_registry, packument):
        fake_registry.json("PUT", "/test-package", {"ok": True})

        await update_packument(client, packument, otp="111111")

        request = fake_registry.mutations[0]
        assert request.method == "PUT"
        assert request.headers["npm-otp"] == "111111"
        assert fake_registry.body_of(request)["_rev"] == "12-abcdef"

    def test_to_discovered(self, packument):
        pkg = packument_to_discovered(packument)

        assert pkg.name == "test-package"
        assert pkg.scope is None
        assert pkg.latest_version == "1.2.3"
        assert pkg.owners == ["testuser"]
        assert [v.version for v in pkg.versions] == ["1.2.3", "1.0.0"]
        assert pkg.versions[0].shasum == "def456"
        assert pkg.last_publish == datetime(2024, 1, 15, tzinfo=timezone.utc)
        assert pkg.repository.url == "https://github.com/test/test-package.git"
        assert pkg.deprecated is None

    def test_last_publish_ignores_modified(self, packument):
        packument["time"]["modified"] = "2030-01-01T00:00:00.000Z"

        pkg = packument_to_discovered(packument)

        assert pkg.last_publish == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_scope_and_deprecation(self):
        doc = make_packument("@scope/pkg")
        doc["versions"]["1.2.3"]["deprecated"] = "gone"

        pkg = packument_to_discovered(doc)

        assert pkg.scope == "@scope"
        assert pkg.deprecated == "gone"
        assert pkg.versions[0].deprecated == "gone"

    def test_unpublished_entry_is_not_a_publish(self, packument):
        packument["time"]["unpublished"] = {"time": "2030-01-01T00:00:00.000Z", "versions": ["0.0.1"]}

        pkg = packument_to_discovered(packument)

        assert pkg.last_publish == datetime(2024, 1, 15, tzinfo=timezone.utc)

    def test_string_repository(self, packument):
        packument["repository"] = "github:test/test-package"

        assert packument_to_discovered(packument).repository.url == "github:test/test-package"


class TestDownloads:

    @pytest.mark.asyncio
    async def test_weekly(self, client, fake_registry):
        fake_registry.json("GET", "/downloads/point/last-week/test-package", {"downloads": 42})

        assert await get_weekly_downloads(client, "test-package", DOWNLOADS_API) == 42
        assert fake_registry.requests[0].url.host == "api.npmjs.test"

    @pytest.mark.asyncio
    async def test_failure_is_unknown(self, client, fake_registry):
        assert await get_weekly_downloads(client, "missing", DOWNLOADS_API) is None

    @pytest.mark.asyncio
    async def test_malformed_is_unknown(self, client, fake_registry):
        fake_registry.json("GET", "/downloads/point/last-week/test-package", {"downloads": "many"})

        assert await get_weekly_downloads(client, "test-package", DOWNLOADS_API) is None

    @pytest.mark.asyncio
    async def test_bulk(self, client, fake_registry):
        fake_registry.json("GET", "/downloads/point/last-week/a", {"downloads": 1})
        fake_registry.json("GET", "/downloads/point/last-week/b", {"downloads": 2})

        counts = await get_bulk_downloads(client, ["a", "b", "c"], DOWNLOADS_API)

        assert counts == {"a": 1, "b": 2, "c": None}


class TestOwners:

    @pytest.mark.asyncio
    async def test_get_owners(self, client, fake_registry, packument):
        fake_registry.packument(packument)

        assert await owners.get_owners(client, "test-package") == packument["maintainers"]

    @pytest.mark.asyncio
    async def test_add_owner(self, client, fake_registry, packument):
        fake_registry.packument(packument)
        fake_registry.json("PUT", "/test-package", {"ok": True})

        assert await owners.add_owner(client, "test-package", "alice") is True

        body = fake_registry.body_of(fake_registry.mutations[0])
        assert [m["name"] for m in body["maintainers"]] == ["testuser", "alice"]

    @pytest.mark.asyncio
    async def test_add_existing_owner_is_noop(self, client, fake_registry, packument):
        fake_registry.packument(packument)

        assert await owners.add_owner(client, "test-package", "TestUser") is False
        assert fake_registry.mutations == []

    @pytest.mark.asyncio
    async def test_remove_owner(self, client, fake_registry, packument):
        packument["maintainers"].append({"name": "alice"})
        fake_registry.packument(packument)
        fake_registry.json("PUT", "/test-package", {"ok": True})

        assert await owners.remove_owner(client, "test-package", "alice") is True

        body = fake_registry.body_of(fake_registry.mutations[0])
        assert [m["name"] for m in body["maintainers"]] == ["testuser"]

    @pytest.mark.asyncio
    async def test_remove_non_owner_is_noop(self, client, fake_registry, packument):
        fake_registry.packument(packument)

        assert await owners.remove_owner(client, "test-package", "mallory") is False
        assert fake_registry.mutations == []

    @pytest.mark.asyncio
    async def test_remove_last_owner_refused(self, client, fake_registry, packument):
        fake_registry.packument(packument)

        with pytest.raises(PolicyViolationError) as exc:
            await owners.remove_owner(client, "test-package", "testuser")

        assert exc.value.code == "LAST_OWNER"
        assert fake_registry.mutations == []


class TestSearch:

    @pytest.mark.asyncio
    async def test_search_query(self, client, fake_registry):
        fake_registry.json("GET", "/-/v1/search", {"objects": [], "total": 0})

        await search.search_packages(client, maintainer="alice", scope="acme", text="old", size=10)

        params = fake_registry.requests[0].url.params
        assert params["text"] == "maintainer:alice scope:acme old"
        assert params["size"] == "10"

    @pytest.mark.asyncio
    async def test_search_all_paginates(self, client, fake_registry, monkeypatch, tmp_path):
        config_file = tmp_path / "npm-sweep.yaml"
        config_file.write_text("search:\n  page_size: 2\n")
        monkeypatch.setenv("NPM_SWEEP_CONFIG_PATH", str(config_file))
        reload_config()

        fake_registry.add(
            "GET", "/-/v1/search",
            httpx.Response(200, json={"objects": [{"package": {"name": "a"}}, {"package": {"name": "b"}}], "total": 3}),
            httpx.Response(200, json={"objects": [{"package": {"name": "c"}}], "total": 3}),
        )

        names = await search.find_packages_by_maintainer(client, "alice")

        assert names == ["a", "b", "c"]
        assert [r.url.params["from"] for r in fake_registry.requests] == ["0", "2"]


class TestTarball:

    def test_hashes(self):
        data = b"hello"

        assert calculate_shasum(data) == hashlib.sha1(data).hexdigest()
        assert calculate_integrity(data) == "sha512-" + base64.b64encode(hashlib.sha512(data).digest()).decode()

    @pytest.mark.asyncio
    async def test_download(self, client, fake_registry):
        fake_registry.add("GET", "/test-package/-/test-package-1.0.0.tgz", httpx.Response(200, content=b"\x1f\x8b"))

        data = await download_tarball(client, "https://registry.test/test-package/-/test-package-1.0.0.tgz")

        assert data == b"\x1f\x8b"

    @pytest.mark.asyncio
    async def test_download_failure(self, client, fake_registry):
        with pytest.raises(RegistryError):
            await download_tarball(client, "https://registry.test/missing.tgz")

    @pytest.mark.asyncio
    async def test_publish_payload(self, client, fake_registry):
        fake_registry.json("PUT", "/test-package", {"ok": True})
        tarball = b"tarball-bytes"

        await publish_package(
            client,
            {"name": "test-package", "version": "2.0.0", "description": "gone"},
            tarball,
            otp="123456",
        )

        body = fake_registry.body_of(fake_registry.mutations[0])
        attachment = body["_attachments"]["test-package-2.0.0.tgz"]
        assert base64.b64decode(attachment["data"]) == tarball
        assert attachment["length"] == len(tarball)
        assert body["dist-tags"] == {"latest": "2.0.0"}
        version = body["versions"]["2.0.0"]
        assert version["_id"] == "test-package@2.0.0"
        assert version["dist"]["shasum"] == calculate_shasum(tarball)
        assert version["dist"]["tarball"] == "https://registry.test/test-package/-/test-package-2.0.0.tgz"

    @pytest.mark.asyncio
    async def test_unpublish_version(self, client, fake_registry, packument):
        fake_registry.packument(packument)
        fake_registry.json("DELETE", "/test-package/-/test-package-1.0.0.tgz/-rev/12-abcdef", {"ok": True})

        await unpublish_version(client, "test-package", "1.0.0")

        assert [r.method for r in fake_registry.mutations] == ["DELETE"]

    @pytest.mark.asyncio
    async def test_unpublish_package(self, client, fake_registry, packument):
        fake_registry.packument(packument)
        fake_registry.json("DELETE", "/test-package/-rev/12-abcdef", {"ok": True})

        await unpublish_package(client, "test-package", otp="654321")

        assert fake_registry.mutations[0].headers["npm-otp"] == "654321"

    @pytest.mark.asyncio
    async def test_unpublish_without_revision(self, client, fake_registry, packument):
        del packument["_rev"]
        fake_registry.packument(packument)

        with pytest.raises(RegistryError, match="revision"):
            await unpublish_package(client, "test-package")

        assert fake_registry.mutations == []
