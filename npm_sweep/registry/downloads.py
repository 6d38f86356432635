# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Download counts from the npm downloads API.

Counts are best effort: any failure yields None ("unknown").
"""

import asyncio
from typing import Dict, List, Optional

from npm_sweep.core.config import get_config
from npm_sweep.core.errors import RegistryError
from npm_sweep.core.logging import get_service_logger

from .client import RegistryClient, encode_package_name

logger = get_service_logger("downloads")

BULK_CHUNK_SIZE = 128


async def get_weekly_downloads(
    client: RegistryClient,
    package_name: str,
    downloads_api: Optional[str] = None,
) -> Optional[int]:
    base = (downloads_api or get_config().downloads_api_url).rstrip("/")
    url = f"{base}/downloads/point/last-week/{encode_package_name(package_name)}"

    try:
        data = await client.request(url)
    except RegistryError as e:
        logger.debug(f"Failed to get downloads for {package_name}: {e.message}")
        return None

    downloads = data.get("downloads") if isinstance(data, dict) else None
    return downloads if isinstance(downloads, int) else None


async def get_bulk_downloads(
    client: RegistryClient,
    package_names: List[str],
    downloads_api: Optional[str] = None,
) -> Dict[str, Optional[int]]:
    """Weekly downloads for many packages, fetched concurrently in chunks of 128."""
    results: Dict[str, Optional[int]] = {}

    for i in range(0, len(package_names), BULK_CHUNK_SIZE):
        chunk = package_names[i:i + BULK_CHUNK_SIZE]
        counts = await asyncio.gather(
            *(get_weekly_downloads(client, name, downloads_api) for name in chunk)
        )
        results.update(zip(chunk, counts))

    return results
