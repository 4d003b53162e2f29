"""
Application-level exceptions.

Transport failures are modeled as exception instances but are normally
returned inside an Err result rather than raised; Result.unwrap() raises them
for callers that prefer exceptions.
"""

from __future__ import annotations


class SeekerVerifyError(Exception):
    """Base class for all seeker_verify errors."""


class RpcError(SeekerVerifyError):
    """Any failure of a single JSON-RPC call."""

    def __init__(self, message: str, *, method: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.method = method


class TransportFailure(RpcError):
    """Timeout, connection error, or other network-level failure."""


class HttpStatusError(RpcError):
    """Non-2xx HTTP status other than 429."""

    def __init__(self, status_code: int, body: str = "", *, method: str | None = None) -> None:
        super().__init__(f"RPC HTTP {status_code}: {body[:200]}", method=method)
        self.status_code = status_code


class RpcResponseError(RpcError):
    """JSON-RPC error object in the response body."""

    def __init__(self, code: int | None, message: str, *, method: str | None = None) -> None:
        super().__init__(f"RPC error {code}: {message}", method=method)
        self.code = code


class RateLimited(RpcError):
    """Still rate limited (HTTP or RPC 429) after all retries."""


class EmptyResponse(RpcError):
    """Response body was empty."""


class MissingResult(RpcError):
    """Response body had neither `result` nor `error`."""


class MalformedResponse(RpcError):
    """Response body was not a JSON object."""
