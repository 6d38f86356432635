# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Fixtures and Utilities

Provides packument fixtures and an in-memory registry (httpx.MockTransport)
that records every request it receives.
"""

import copy
import json
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest

from npm_sweep.core import config as config_module
from npm_sweep.models.package import DiscoveredPackage
from npm_sweep.registry.client import RegistryClient

REGISTRY_URL = "https://registry.test"

MOCK_PACKUMENT: Dict[str, Any] = {
    "_id": "test-package",
    "_rev": "12-abcdef",
    "name": "test-package",
    "description": "A test package",
    "dist-tags": {"latest": "1.2.3"},
    "versions": {
        "1.0.0": {
            "name": "test-package",
            "version": "1.0.0",
            "description": "A test package",
            "main": "index.js",
            "dist": {
                "tarball": "https://registry.npmjs.org/test-package/-/test-package-1.0.0.tgz",
                "shasum": "abc123",
                "integrity": "sha512-xxx",
            },
        },
        "1.2.3": {
            "name": "test-package",
            "version": "1.2.3",
            "description": "A test package",
            "main": "index.js",
            "dist": {
                "tarball": "https://registry.npmjs.org/test-package/-/test-package-1.2.3.tgz",
                "shasum": "def456",
                "integrity": "sha512-yyy",
            },
        },
    },
    "time": {
        "created": "2020-01-01T00:00:00.000Z",
        "modified": "2024-01-15T00:00:00.000Z",
        "1.0.0": "2020-01-01T00:00:00.000Z",
        "1.2.3": "2024-01-15T00:00:00.000Z",
    },
    "maintainers": [
        {"name": "testuser", "email": "test@example.com"},
    ],
    "repository": {
        "type": "git",
        "url": "https://github.com/test/test-package.git",
    },
}


def make_packument(name: str = "test-package", **overrides: Any) -> Dict[str, Any]:
    """Copy of MOCK_PACKUMENT renamed to `name`, with top-level overrides."""
    doc = copy.deepcopy(MOCK_PACKUMENT)
    doc["_id"] = name
    doc["name"] = name
    for version in doc["versions"].values():
        version["name"] = name
    doc.update(overrides)
    return doc


def make_discovered(
    hours_ago: float,
    owners: List[str] = None,
    weekly_downloads: int = None,
    now: datetime = None,
) -> DiscoveredPackage:
    now = now or datetime.now(timezone.utc)
    return DiscoveredPackage(
        name="test-package",
        latest_version="1.2.3",
        last_publish=now - timedelta(hours=hours_ago),
        owners=owners if owners is not None else ["testuser"],
        weekly_downloads=weekly_downloads,
    )


Responder = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FakeRegistry:
    """
    In-memory registry for httpx.MockTransport.

    Routes are keyed by (method, url path). Several responses for one route
    are served in order; the last one repeats. Unrouted requests get 404.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Responder]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: Responder) -> "FakeRegistry":
        self.routes.setdefault((method, path), []).extend(responses)
        return self

    def json(self, method: str, path: str, body: Any, status: int = 200, **kwargs: Any) -> "FakeRegistry":
        return self.add(method, path, httpx.Response(status, json=body, **kwargs))

    def packument(self, doc: Dict[str, Any]) -> "FakeRegistry":
        return self.json("GET", f"/{doc['name']}", doc)

    def whoami(self, username: str = "testuser") -> "FakeRegistry":
        return self.json("GET", "/-/whoami", {"username": username})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": "Not found"})

        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(responder) and not isinstance(responder, httpx.Response):
            return responder(request)
        return responder

    @property
    def mutations(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method in ("PUT", "DELETE")]

    def body_of(self, request: httpx.Request) -> Any:
        return json.loads(request.content)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Default configuration, no ambient tokens."""
    monkeypatch.setenv("NPM_SWEEP_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("NPM_TOKEN", raising=False)
    monkeypatch.delenv("NODE_AUTH_TOKEN", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    config_module.reload_config()
    yield
    config_module.reload_config()


@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def client(fake_registry):
    """Registry client wired to fake_registry, without retry delays."""
    return RegistryClient(
        registry=REGISTRY_URL,
        token="test-token",
        retry_delay=0,
        transport=httpx.MockTransport(fake_registry),
        npmrc_paths=[],
    )


@pytest.fixture
def packument():
    return make_packument()
