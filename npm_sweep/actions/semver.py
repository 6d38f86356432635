# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Minimal semver support for version ranges in plan steps.

Supported ranges:
    *                 every version
    1.2.3             exactly that version (pre-release/build allowed)
    <=1.2.3 >=1.2.3   comparator + version (also < and >)
    1.x  1.2.x        major / major.minor wildcards
    1                 shorthand for 1.x
"""

import re
from typing import NamedTuple, Optional

SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

_MAJOR_WILDCARD = re.compile(r"^(\d+)\.x$")
_MINOR_WILDCARD = re.compile(r"^(\d+)\.(\d+)\.x$")
_BARE_MAJOR = re.compile(r"^\d+$")
_COMPARATORS = ("<=", ">=", "<", ">")


class Version(NamedTuple):
    major: int
    minor: int
    patch: int


def parse_version(version: str) -> Optional[Version]:
    match = SEMVER_PATTERN.match(version)
    if not match:
        return None
    return Version(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def compare_versions(a: Version, b: Version) -> int:
    """Negative, zero or positive as a sorts before, equal to or after b (release part only)."""
    for left, right in zip(a, b):
        if left != right:
            return left - right
    return 0


def _split_comparator(range_: str):
    for op in _COMPARATORS:
        if range_.startswith(op):
            return op, range_[len(op):]
    return None, range_


def valid_range(range_: str) -> Optional[str]:
    """
    Normalize a range, or None when it is not one we understand.

    >>> valid_range("2")
    '2.x'
    """
    if range_ == "*":
        return "*"
    if SEMVER_PATTERN.match(range_):
        return range_

    op, version = _split_comparator(range_)
    if op and SEMVER_PATTERN.match(version):
        return range_

    if _MAJOR_WILDCARD.match(range_) or _MINOR_WILDCARD.match(range_):
        return range_
    if _BARE_MAJOR.match(range_):
        return f"{range_}.x"
    return None


def satisfies(version: str, range_: str) -> bool:
    if range_ == "*":
        return True

    parsed = parse_version(version)
    if parsed is None:
        return False

    if SEMVER_PATTERN.match(range_):
        return version == range_

    op, target = _split_comparator(range_)
    if op:
        target_parsed = parse_version(target)
        if target_parsed is None:
            return False
        cmp = compare_versions(parsed, target_parsed)
        return {
            "<=": cmp <= 0,
            ">=": cmp >= 0,
            "<": cmp < 0,
            ">": cmp > 0,
        }[op]

    match = _MAJOR_WILDCARD.match(range_)
    if match:
        return parsed.major == int(match.group(1))

    match = _MINOR_WILDCARD.match(range_)
    if match:
        return parsed.major == int(match.group(1)) and parsed.minor == int(match.group(2))

    return False


def get_next_major(current_version: str) -> str:
    """Next major release ("1.2.3" -> "2.0.0"); "99.0.0" when the input is not semver."""
    parsed = parse_version(current_version)
    if parsed is None:
        return "99.0.0"
    return f"{parsed.major + 1}.0.0"
