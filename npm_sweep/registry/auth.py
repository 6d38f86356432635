# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry identity lookups.
"""

from typing import Optional, Tuple

from npm_sweep.core.errors import AuthenticationError, RegistryError
from npm_sweep.core.logging import get_service_logger

from .client import RegistryClient

logger = get_service_logger("registry")


async def whoami(client: RegistryClient) -> str:
    """
    Username the current token belongs to.

    Raises:
        AuthenticationError: No usable identity (bad token, network failure, odd response)
    """
    try:
        response = await client.request("/-/whoami")
    except RegistryError as e:
        raise AuthenticationError(f"Could not authenticate with registry: {e.message}") from e

    username = response.get("username") if isinstance(response, dict) else None
    if not username:
        raise AuthenticationError("Registry did not report a username")
    return username


async def verify_auth(client: RegistryClient) -> Tuple[bool, Optional[str]]:
    """Returns (authenticated, username) without raising."""
    if not client.has_token():
        return False, None

    try:
        return True, await whoami(client)
    except AuthenticationError as e:
        logger.debug(f"Authentication check failed: {e.message}")
        return False, None
