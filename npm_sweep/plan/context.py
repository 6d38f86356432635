# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Plan Execution Context

Run-scoped state threaded through every concurrently executing package.
The OTP code is the only value shared between packages; OtpSession is its
single writer.
"""

import asyncio
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, Tuple

from npm_sweep.core.errors import OtpUnavailableError
from npm_sweep.core.logging import get_service_logger

logger = get_service_logger("executor")

OtpSource = Callable[[], Awaitable[str]]
ProgressCallback = Callable[[str, int, int], None]


class OtpSession:
    """
    One-time password shared by a whole execution run.

    Readers take a snapshot (code, generation). A branch that hits an OTP
    challenge calls refresh() with the generation it used: if another branch
    already obtained a newer code meanwhile, that code is reused instead of
    prompting again.
    """

    def __init__(self, source: Optional[OtpSource] = None, initial: Optional[str] = None):
        self._source = source
        self._code = initial
        self._generation = 0
        self._lock = asyncio.Lock()

    @property
    def code(self) -> Optional[str]:
        return self._code

    def snapshot(self) -> Tuple[Optional[str], int]:
        return self._code, self._generation

    async def refresh(self, seen_generation: int) -> str:
        """
        Get a code newer than the one used at `seen_generation`.

        Raises:
            OtpUnavailableError: No source configured, or the source failed
        """
        async with self._lock:
            if self._generation != seen_generation and self._code:
                return self._code

            if self._source is None:
                raise OtpUnavailableError("OTP required but no OTP provider is configured")

            code = await self._source()
            if not code:
                raise OtpUnavailableError("Empty OTP code")

            self._code = code
            self._generation += 1
            return code


class ExecutionContext:
    """
    Execution context for a plan run.

    Holds the run options, the shared OTP session and the run timestamps.
    """

    def __init__(
        self,
        otp: OtpSession,
        dry_run: bool = False,
        enable_unpublish: bool = False,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.otp = otp
        self.dry_run = dry_run
        self.enable_unpublish = enable_unpublish
        self.on_progress = on_progress
        self.started_at = datetime.now(timezone.utc)
        self.completed_at: Optional[datetime] = None

    def report_progress(self, package: str, step: int, total: int) -> None:
        if self.on_progress is None:
            return
        try:
            self.on_progress(package, step, total)
        except Exception as e:
            logger.warning(f"Progress callback failed for {package}: {e}")

    def finalize(self) -> None:
        self.completed_at = datetime.now(timezone.utc)
