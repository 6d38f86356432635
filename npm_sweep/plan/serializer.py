# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan Serializer

A plan persists as one UTF-8 JSON object (camelCase keys, ISO-8601
generatedAt). Loading is all-or-nothing: a malformed document raises
SchemaError listing every violation.
"""

import json
from typing import Any

import aiofiles
from pydantic import ValidationError

from npm_sweep.core.errors import SchemaError
from npm_sweep.models.plan import Plan


def _format_location(loc) -> str:
    return ".".join(str(part) for part in loc) or "<root>"


def validate_plan_schema(data: Any) -> Plan:
    """
    Structural validation of a decoded plan document.

    Raises:
        SchemaError: One "path: message" violation per invalid field
    """
    try:
        return Plan.model_validate(data)
    except ValidationError as e:
        raise SchemaError([
            f"{_format_location(err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]) from e


def plan_to_json(plan: Plan) -> str:
    return plan.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def plan_from_json(text: str) -> Plan:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError([f"<root>: invalid JSON ({e.msg} at line {e.lineno})"]) from e
    return validate_plan_schema(data)


async def save_plan(plan: Plan, file_path: str) -> None:
    async with aiofiles.open(file_path, "w", encoding="utf-8") as f:
        await f.write(plan_to_json(plan))


async def load_plan(file_path: str) -> Plan:
    async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
        content = await f.read()
    return plan_from_json(content)
