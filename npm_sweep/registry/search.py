# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Package discovery through the registry search endpoint.
"""

from typing import Any, AsyncIterator, Dict, List, Optional
from urllib.parse import urlencode

from npm_sweep.core.config import get_config
from npm_sweep.core.logging import get_service_logger

from .client import RegistryClient

logger = get_service_logger("search")


def _search_text(maintainer: Optional[str], scope: Optional[str], text: Optional[str]) -> str:
    parts = []
    if maintainer:
        parts.append(f"maintainer:{maintainer}")
    if scope:
        parts.append(f"scope:{scope}")
    if text:
        parts.append(text)
    return " ".join(parts)


async def search_packages(
    client: RegistryClient,
    maintainer: Optional[str] = None,
    scope: Optional[str] = None,
    text: Optional[str] = None,
    size: Optional[int] = None,
    offset: int = 0,
) -> Dict[str, Any]:
    """One page of search results ({"objects": [...], "total": n})."""
    params = {
        "text": _search_text(maintainer, scope, text),
        "size": size or get_config().search_page_size,
    }
    if offset:
        params["from"] = offset
    return await client.request(f"/-/v1/search?{urlencode(params)}")


async def search_all_packages(
    client: RegistryClient,
    maintainer: Optional[str] = None,
    scope: Optional[str] = None,
    text: Optional[str] = None,
) -> AsyncIterator[Dict[str, Any]]:
    """Yield every search result object, following pagination."""
    page_size = get_config().search_page_size
    offset = 0

    while True:
        logger.debug(f"Searching packages (from={offset})...")
        params = {
            "text": _search_text(maintainer, scope, text),
            "size": page_size,
            "from": offset,
        }
        result = await client.request(f"/-/v1/search?{urlencode(params)}")
        objects = result.get("objects") or []
        total = result.get("total", 0)

        for obj in objects:
            yield obj

        offset += len(objects)
        if len(objects) < page_size or offset >= total:
            break


async def find_packages_by_maintainer(client: RegistryClient, username: str) -> List[str]:
    return [
        obj["package"]["name"]
        async for obj in search_all_packages(client, maintainer=username)
    ]
