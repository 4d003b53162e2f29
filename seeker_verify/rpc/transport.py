"""
JSON-RPC 2.0 transport over HTTPS with sliding-window rate limiting and 429 retry.

Every RPC client in the package goes through RpcTransport.call(), which never
raises for expected failures: it returns Ok(result) or Err(RpcError). HTTP 429
and JSON-RPC error code 429 are retried with linear backoff (base * attempt)
after resetting the rate-limiter window; every other failure is returned
immediately.
"""

from __future__ import annotations

import asyncio
import itertools
import json
import time
from typing import Any, Awaitable, Callable

import httpx

from seeker_verify.config.env import is_helius_url, mask_rpc_url
from seeker_verify.config.settings import Settings, get_settings
from seeker_verify.core.exceptions import (
    EmptyResponse,
    HttpStatusError,
    MalformedResponse,
    MissingResult,
    RateLimited,
    RpcError,
    RpcResponseError,
    TransportFailure,
)
from seeker_verify.rpc.result import Err, Ok, Result
from seeker_verify.verify_logging import get_logger

logger = get_logger(__name__)

RATE_LIMIT_CODE = 429

Sleep = Callable[[float], Awaitable[None]]


class RateLimiter:
    """
    Fixed window request counter shared by concurrent callers.

    The first request after the window has elapsed opens a new window with
    count 1. Once the count exceeds the ceiling, the caller sleeps for the rest
    of the window and then opens a new window. Counter and window start are only
    touched while holding the lock.
    """

    def __init__(
        self,
        max_requests_public: int,
        max_requests_helius: int | None = None,
        window_sec: float = 10.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_requests_public <= 0:
            raise ValueError("max_requests_public must be positive")
        self._max_public = max_requests_public
        self._max_helius = max_requests_helius if max_requests_helius is not None else max_requests_public
        self._window = window_sec
        self._clock = clock
        self._sleep = sleep
        self._count = 0
        self._window_start = clock()
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimiter":
        return cls(
            settings.max_requests_public,
            settings.max_requests_helius,
            settings.rate_limit_window_sec,
        )

    @property
    def window_sec(self) -> float:
        return self._window

    @property
    def count(self) -> int:
        return self._count

    def ceiling_for(self, url: str) -> int:
        return self._max_helius if is_helius_url(url) else self._max_public

    async def acquire(self, url: str = "") -> float:
        """Count one request; returns seconds spent waiting (0.0 when under the ceiling)."""
        ceiling = self.ceiling_for(url)
        async with self._lock:
            now = self._clock()
            elapsed = now - self._window_start
            if elapsed > self._window:
                self._window_start = now
                self._count = 1
                return 0.0
            self._count += 1
            if self._count <= ceiling:
                return 0.0
            wait = self._window - elapsed
            if wait > 0:
                logger.debug(
                    "rpc_rate_limit_wait",
                    wait_sec=round(wait, 3),
                    provider="helius" if is_helius_url(url) else "public",
                )
                await self._sleep(wait)
            self._window_start = self._clock()
            self._count = 1
            return max(wait, 0.0)

    async def reset(self) -> None:
        """Open a fresh window (used after the server answered 429)."""
        async with self._lock:
            self._window_start = self._clock()
            self._count = 0


class RpcTransport:
    """
    JSON-RPC 2.0 client bound to one endpoint.

    Use as an async context manager, or call aclose() when done. An existing
    httpx.AsyncClient (e.g. with a MockTransport in tests) can be injected.
    """

    def __init__(
        self,
        endpoint_url: str | None = None,
        *,
        settings: Settings | None = None,
        rate_limiter: RateLimiter | None = None,
        client: httpx.AsyncClient | None = None,
        max_retries: int | None = None,
        retry_base_delay_sec: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        cfg = settings or get_settings()
        self.endpoint_url = (endpoint_url or cfg.rpc_url).strip()
        if not self.endpoint_url:
            raise ValueError("endpoint_url must be non-empty")
        self._rate_limiter = rate_limiter or RateLimiter.from_settings(cfg)
        self._max_retries = max(1, max_retries if max_retries is not None else cfg.max_retries)
        self._retry_base_delay = (
            retry_base_delay_sec if retry_base_delay_sec is not None else cfg.retry_base_delay_sec
        )
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(cfg.read_timeout_sec, connect=cfg.connect_timeout_sec),
            headers={"Content-Type": "application/json"},
        )
        self._ids = itertools.count(1)

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._rate_limiter

    async def __aenter__(self) -> "RpcTransport":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _envelope(self, method: str, params: list[Any]) -> dict[str, Any]:
        return {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}

    async def call(
        self,
        method: str,
        params: list[Any] | None = None,
        *,
        endpoint_url: str | None = None,
    ) -> Result[Any]:
        """
        Make one JSON-RPC call.

        Returns Ok(result) on success (result may legitimately be None, e.g.
        getTransaction for an unknown signature) or Err(RpcError).
        """
        url = endpoint_url or self.endpoint_url
        params = list(params or [])
        last_error: RpcError | None = None

        for attempt in range(1, self._max_retries + 1):
            await self._rate_limiter.acquire(url)
            body = self._envelope(method, params)
            logger.debug("rpc_request", method=method, request_id=body["id"], attempt=attempt)

            try:
                resp = await self._client.post(url, json=body)
            except httpx.TimeoutException as e:
                logger.warning("rpc_timeout", method=method, url=mask_rpc_url(url), error=str(e))
                return Err(TransportFailure(f"RPC timeout: {e}", method=method))
            except httpx.HTTPError as e:
                logger.warning("rpc_transport_error", method=method, url=mask_rpc_url(url), error=str(e))
                return Err(TransportFailure(f"RPC transport error: {e}", method=method))

            if resp.status_code == RATE_LIMIT_CODE:
                last_error = RateLimited(f"RPC HTTP 429: {resp.text[:200]}", method=method)
                await self._backoff(method, attempt, source="http")
                continue

            if not resp.is_success:
                logger.error("rpc_http_error", method=method, status_code=resp.status_code)
                return Err(HttpStatusError(resp.status_code, resp.text, method=method))

            if not resp.content or not resp.content.strip():
                return Err(EmptyResponse("Empty RPC response", method=method))

            try:
                payload = resp.json()
            except (json.JSONDecodeError, ValueError) as e:
                return Err(MalformedResponse(f"Malformed RPC response: {e}", method=method))
            if not isinstance(payload, dict):
                return Err(MalformedResponse("RPC response is not a JSON object", method=method))

            error = payload.get("error")
            if error is not None:
                code, message = _parse_error(error)
                if code == RATE_LIMIT_CODE:
                    last_error = RateLimited(f"RPC error 429: {message}", method=method)
                    await self._backoff(method, attempt, source="rpc")
                    continue
                logger.error("rpc_error", method=method, code=code, message=message)
                return Err(RpcResponseError(code, message, method=method))

            if "result" not in payload:
                return Err(MissingResult("No result in RPC response", method=method))

            return Ok(payload["result"])

        logger.error("rpc_retries_exhausted", method=method, attempts=self._max_retries)
        return Err(last_error or RateLimited(f"RPC call failed after {self._max_retries} retries", method=method))

    async def _backoff(self, method: str, attempt: int, *, source: str) -> None:
        if attempt >= self._max_retries:
            return
        delay = self._retry_base_delay * attempt
        logger.warning(
            "rpc_rate_limited_retry",
            method=method,
            source=source,
            attempt=attempt,
            max_retries=self._max_retries,
            backoff_sec=round(delay, 2),
        )
        await self._sleep(delay)
        await self._rate_limiter.reset()


def _parse_error(error: Any) -> tuple[int | None, str]:
    if not isinstance(error, dict):
        return None, str(error)
    raw_code = error.get("code")
    try:
        code = int(raw_code) if raw_code is not None else None
    except (TypeError, ValueError):
        code = None
    return code, str(error.get("message") or "Unknown RPC error")


_shared_limiter: RateLimiter | None = None


def shared_rate_limiter() -> RateLimiter:
    """Process-wide limiter behind the module-level call(); built from settings on first use."""
    global _shared_limiter
    if _shared_limiter is None:
        _shared_limiter = RateLimiter.from_settings(get_settings())
    return _shared_limiter


async def call(
    endpoint_url: str,
    method: str,
    params: list[Any] | None = None,
    *,
    rate_limiter: RateLimiter | None = None,
    client: httpx.AsyncClient | None = None,
) -> Result[Any]:
    """
    One-off call through a short-lived transport bound to endpoint_url.

    Calls share shared_rate_limiter() unless a limiter is passed in, so the
    request ceiling holds across one-off calls too.
    """
    limiter = rate_limiter or shared_rate_limiter()
    async with RpcTransport(endpoint_url, rate_limiter=limiter, client=client) as transport:
        return await transport.call(method, params)
