# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Registry Client

Single responsibility: issue one authenticated request to the npm registry
and classify its outcome, retrying transient failures.

Retry policy:
- network errors and 5xx: retried with linear backoff (retry_delay x attempt)
- 429: consumes an attempt; waits Retry-After seconds when present
- 401/403: OtpRequiredError when the registry asks for a one-time password,
  AuthorizationError otherwise. Never retried.
- other 4xx: RegistryError with the registry's own message. Never retried.
"""

import asyncio
import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from npm_sweep.core.config import get_config, get_registry_token
from npm_sweep.core.errors import (
    AuthorizationError,
    OtpRequiredError,
    RegistryError,
    RegistryUnavailableError,
)
from npm_sweep.core.logging import get_service_logger

logger = get_service_logger("registry")

_AUTH_TOKEN_LINE = re.compile(r":_authToken=(.+)$")
_OTP_MARKERS = ("otp", "one-time pass", "eotp")


def encode_package_name(name: str) -> str:
    """URL-encode a package name, keeping the scope's '@' literal."""
    return quote(name, safe="").replace("%40", "@")


def read_npmrc_token(paths: Optional[List[Path]] = None) -> Optional[str]:
    """
    Scan .npmrc files for an `_authToken` assignment.

    Args:
        paths: Files to scan in order (default: ./.npmrc then ~/.npmrc)

    Returns:
        First token found, or None
    """
    if paths is None:
        paths = [Path.cwd() / ".npmrc", Path.home() / ".npmrc"]

    for npmrc in paths:
        if not npmrc.is_file():
            continue
        try:
            content = npmrc.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug(f"Failed to read {npmrc}: {e}")
            continue

        for line in content.splitlines():
            match = _AUTH_TOKEN_LINE.search(line.strip())
            if match:
                return match.group(1).strip()

    return None


def resolve_token(explicit: Optional[str] = None, npmrc_paths: Optional[List[Path]] = None) -> Optional[str]:
    """Explicit token, then NPM_TOKEN/NODE_AUTH_TOKEN, then project and home .npmrc."""
    if explicit:
        return explicit

    env_token = get_registry_token()
    if env_token:
        logger.debug("Using token from environment variable")
        return env_token

    npmrc_token = read_npmrc_token(npmrc_paths)
    if npmrc_token:
        logger.debug("Using token from .npmrc")
    return npmrc_token


def _parse_body(response: httpx.Response) -> Any:
    text = response.text
    try:
        return json.loads(text)
    except ValueError:
        return text


def _needs_otp(response: httpx.Response, body: Any) -> bool:
    challenge = response.headers.get("www-authenticate", "").lower()
    notice = response.headers.get("npm-notice", "").lower()
    if "otp" in challenge or "otp" in notice:
        return True

    body_text = json.dumps(body) if isinstance(body, (dict, list)) else str(body)
    body_text = body_text.lower()
    return any(marker in body_text for marker in _OTP_MARKERS)


def _error_message(status_code: int, body: Any) -> str:
    if isinstance(body, dict):
        for key in ("error", "message", "reason"):
            if isinstance(body.get(key), str):
                return body[key]
    elif isinstance(body, str) and 0 < len(body) < 500:
        return body
    return f"Request failed with status {status_code}"


def _retry_after(response: httpx.Response) -> Optional[float]:
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class RegistryClient:
    """
    Async client for the npm registry.

    Use as an async context manager, or call aclose() when done.
    """

    def __init__(
        self,
        registry: Optional[str] = None,
        token: Optional[str] = None,
        max_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        npmrc_paths: Optional[List[Path]] = None,
    ):
        """
        Initialize registry client.

        Args:
            registry: Registry base URL (default from config)
            token: Bearer token; resolved from env/.npmrc when omitted
            max_attempts: Attempt budget per request
            retry_delay: Linear backoff base in seconds
            timeout: Per-request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
            npmrc_paths: .npmrc files scanned for a token
        """
        config = get_config()
        self.registry = (registry or config.registry_url).rstrip("/")
        self.token = resolve_token(token, npmrc_paths)
        self.max_attempts = max_attempts or config.max_attempts
        self.retry_delay = config.retry_delay if retry_delay is None else retry_delay
        self._client = httpx.AsyncClient(
            timeout=timeout or config.http_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_bytes(self, url: str) -> bytes:
        """GET a binary resource (e.g. a tarball). No retries, no auth outside the registry."""
        response = await self._client.get(url, headers=self._headers(url, None, {"Accept": "*/*"}))
        if response.status_code != 200:
            raise RegistryError(f"Failed to download {url}: {response.status_code}", response.status_code)
        return response.content

    def get_registry(self) -> str:
        return self.registry

    def has_token(self) -> bool:
        return bool(self.token)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.registry}{path}"

    def _is_registry_url(self, url: str) -> bool:
        return url == self.registry or url.startswith(self.registry + "/")

    def _headers(self, url: str, otp: Optional[str], extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if extra:
            headers.update(extra)
        if self.token and self._is_registry_url(url):
            headers["Authorization"] = f"Bearer {self.token}"
        if otp:
            headers["npm-otp"] = otp
        return headers

    async def request(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        otp: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Issue one request, retrying transient failures.

        Args:
            path: Registry path (e.g. "/-/whoami") or absolute URL
            method: HTTP method
            body: JSON-serializable request body
            otp: One-time password for the npm-otp header
            headers: Extra headers

        Returns:
            Parsed JSON body (or raw text when the body is not JSON)

        Raises:
            OtpRequiredError: Registry asked for a one-time password
            AuthorizationError: 401/403 without an OTP challenge
            RegistryError: Non-retryable error, or 429/5xx after the budget
            RegistryUnavailableError: Network failure after the budget
        """
        url = self._url(path)
        request_headers = self._headers(url, otp, headers)
        content = json.dumps(body) if body is not None else None
        last_error: Optional[RegistryError] = None

        for attempt in range(1, self.max_attempts + 1):
            logger.debug(f"{method} {url} (attempt {attempt}/{self.max_attempts})")
            backoff = self.retry_delay * attempt

            try:
                response = await self._client.request(
                    method, url, headers=request_headers, content=content
                )
            except httpx.TransportError as e:
                last_error = RegistryUnavailableError(f"{method} {url} failed: {e}", attempts=attempt)
                if attempt < self.max_attempts:
                    logger.warning(f"Request failed ({type(e).__name__}), retrying in {backoff}s...")
                    await asyncio.sleep(backoff)
                continue

            parsed = _parse_body(response)
            status = response.status_code

            if status in (401, 403):
                if _needs_otp(response, parsed):
                    logger.debug(f"OTP challenge on {method} {url} (status {status})")
                    raise OtpRequiredError(status, parsed)
                raise AuthorizationError(status, parsed)

            if status == 429:
                last_error = RegistryError("Rate limited by registry", 429, parsed)
                if attempt < self.max_attempts:
                    delay = _retry_after(response)
                    if delay is None:
                        delay = backoff
                    logger.warning(f"Rate limited, retrying in {delay}s...")
                    await asyncio.sleep(delay)
                continue

            if status >= 500:
                last_error = RegistryError(_error_message(status, parsed), status, parsed)
                if attempt < self.max_attempts:
                    logger.warning(f"Registry returned {status}, retrying in {backoff}s...")
                    await asyncio.sleep(backoff)
                continue

            if status >= 400:
                raise RegistryError(_error_message(status, parsed), status, parsed)

            return parsed

        logger.error(f"{method} {url} failed after {self.max_attempts} attempts: {last_error}")
        raise last_error
