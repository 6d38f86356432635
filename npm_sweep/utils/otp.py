# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
One-time password provider.

Order: explicitly supplied code, then a 1Password item (`op` CLI), then an
interactive prompt.
"""

import asyncio
import re
from typing import Callable, Optional

from npm_sweep.core.config import get_config
from npm_sweep.core.errors import OtpUnavailableError
from npm_sweep.core.logging import get_service_logger

logger = get_service_logger("otp")

_OTP_PATTERN = re.compile(r"^\d{6}$")


def validate_otp(otp: str) -> bool:
    """True for a six-digit code."""
    return bool(_OTP_PATTERN.match(otp))


async def _run(*cmd: str) -> Optional[str]:
    """stdout of `cmd`, or None when it is missing or fails."""
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        return None

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        logger.debug(f"{cmd[0]} exited {process.returncode}: {stderr.decode().strip()}")
        return None
    return stdout.decode().strip()


async def is_one_password_available() -> bool:
    return await _run("op", "--version") is not None


async def get_otp_from_one_password(item: str) -> Optional[str]:
    code = await _run("op", "item", "get", item, "--otp")
    if not code:
        logger.error(f'Failed to get OTP from 1Password item "{item}"')
        return None
    return code


async def validate_one_password_setup(item: str) -> None:
    """
    Fail fast when a configured 1Password item cannot produce a code.

    Raises:
        OtpUnavailableError: `op` missing, or the item has no OTP
    """
    if not await is_one_password_available():
        raise OtpUnavailableError(
            "1Password CLI (op) is not installed or not in PATH. "
            "Install it from: https://1password.com/downloads/command-line/"
        )
    if await get_otp_from_one_password(item) is None:
        raise OtpUnavailableError(
            f'1Password: Cannot get OTP from item "{item}". '
            "Make sure the item exists and has a one-time password configured."
        )
    logger.info(f'1Password: Successfully connected to item "{item}"')


class OtpProvider:
    """
    Source of one-time passwords for an execution run.

    Instances are awaitable callables, usable directly as an OtpSession source.
    """

    def __init__(
        self,
        one_password_item: Optional[str] = None,
        prompt: Optional[Callable[[str], str]] = None,
    ):
        self.one_password_item = one_password_item or get_config().one_password_item
        self._prompt = prompt or input

    async def __call__(self) -> str:
        return await self.get_otp()

    async def get_otp(self, provided: Optional[str] = None) -> str:
        """
        Raises:
            OtpUnavailableError: Every source came up empty
        """
        if provided:
            return provided

        if self.one_password_item and await is_one_password_available():
            logger.debug(f"Attempting to get OTP from 1Password item: {self.one_password_item}")
            code = await get_otp_from_one_password(self.one_password_item)
            if code:
                logger.info("OTP retrieved from 1Password")
                return code
            logger.warning("Could not get OTP from 1Password, falling back to manual input")

        return await self._prompt_for_otp()

    async def _prompt_for_otp(self) -> str:
        try:
            answer = await asyncio.to_thread(self._prompt, "Enter OTP code: ")
        except EOFError as e:
            raise OtpUnavailableError("No OTP entered (stdin closed)") from e

        answer = answer.strip()
        if not answer:
            raise OtpUnavailableError("No OTP entered")
        if not validate_otp(answer):
            logger.warning("OTP does not look like a 6-digit code, sending it anyway")
        return answer
