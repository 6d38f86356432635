# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Tombstone release: publish a new highest version that throws on import.
"""

import json
from typing import Any, Dict, Optional

from npm_sweep.core.errors import OtpRequiredError, SweepError
from npm_sweep.core.logging import get_service_logger, log_event
from npm_sweep.models.action import ActionResult, ActionType
from npm_sweep.registry.client import RegistryClient
from npm_sweep.registry.packument import get_packument
from npm_sweep.registry.tarball import publish_package

from . import tar
from .semver import get_next_major

logger = get_service_logger("actions")

NEXT_MAJOR = "nextMajor"

INDEX_TEMPLATE = """'use strict';

const PACKAGE_NAME = '%PACKAGE_NAME%';
const MESSAGE = `%MESSAGE%`;

const error = new Error(
  `[TOMBSTONE] "${PACKAGE_NAME}" is no longer maintained.\\n\\n` +
  `${MESSAGE}\\n\\n` +
  `This package was intentionally deprecated. Do not use.\\n` +
  `If you need this functionality, fork the last working version.\\n`
);

error.code = 'ERR_PACKAGE_TOMBSTONED';

throw error;
"""

README_TEMPLATE = """# %PACKAGE_NAME%

> **THIS PACKAGE IS NO LONGER MAINTAINED**

%MESSAGE%

This is a **tombstone release**: importing this package will throw an error.

## What happened?

The maintainer has decided to end support for this package. This release exists to:

1. Clearly signal that the package is unmaintained
2. Prevent silent failures in projects that auto-update
3. Keep the package name from being claimed by someone else

## What should I do?

- If you're using this package, pin to the last working version
- Consider forking if you need continued development
- Look for alternative packages that provide similar functionality

## Last working version

Check the npm page for this package to find the last version before this tombstone release.
"""


def resolve_target_version(target_version: str, latest_version: Optional[str]) -> str:
    """Turn "nextMajor" into a concrete version relative to the current latest."""
    if target_version == NEXT_MAJOR:
        return get_next_major(latest_version or "0.0.0")
    return target_version


def render_files(package: str, version: str, message: str, description: Optional[str]) -> Dict[str, str]:
    """Files of the tombstone tarball, keyed by archive path."""
    # Backslashes first so the escaped backticks survive
    js_message = message.replace("\\", "\\\\").replace("`", "\\`").replace("${", "\\${")
    index_js = INDEX_TEMPLATE.replace("%PACKAGE_NAME%", package.replace("'", "\\'")).replace("%MESSAGE%", js_message)
    readme = README_TEMPLATE.replace("%PACKAGE_NAME%", package).replace("%MESSAGE%", message)

    package_json = build_manifest(package, version, message, description)
    package_json.pop("readme")

    return {
        "package/index.js": index_js,
        "package/README.md": readme,
        "package/package.json": json.dumps(package_json, indent=2),
    }


def build_manifest(package: str, version: str, message: str, description: Optional[str]) -> Dict[str, Any]:
    return {
        "name": package,
        "version": version,
        "description": f"[TOMBSTONE] {description or package} - NO LONGER MAINTAINED",
        "main": "index.js",
        "scripts": {},
        "keywords": ["tombstone", "deprecated", "unmaintained"],
        "license": "UNLICENSED",
        "deprecated": message,
        "readme": README_TEMPLATE.replace("%PACKAGE_NAME%", package).replace("%MESSAGE%", message),
    }


async def create_tombstone(
    client: RegistryClient,
    package: str,
    target_version: str,
    message: str,
    otp: Optional[str] = None,
) -> ActionResult:
    """
    Publish a tombstone release under the `latest` dist-tag.

    Fails without publishing when the target version already exists.
    """
    action = ActionType.TOMBSTONE

    try:
        logger.info(f"Creating tombstone release for {package}...")
        packument = await get_packument(client, package)
        latest = (packument.get("dist-tags") or {}).get("latest")
        version = resolve_target_version(target_version, latest)

        if version in (packument.get("versions") or {}):
            return ActionResult.fail(action, package, f"Version {version} already exists")

        description = packument.get("description")
        tarball = tar.build(render_files(package, version, message, description))
        manifest = build_manifest(package, version, message, description)

        await publish_package(client, manifest, tarball, tag="latest", otp=otp)
    except OtpRequiredError:
        raise
    except SweepError as e:
        return ActionResult.fail(action, package, e.message)

    log_event(logger, "action_completed", action=action.value, package=package, version=version)
    return ActionResult.ok(
        action, package,
        f"Published tombstone release {version}",
        version=version, previous_latest=latest or "0.0.0",
    )
