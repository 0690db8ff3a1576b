"""
Application-level exceptions.

Every failure that can abort a snapshot build is a PrismError carrying an
ErrorKind (stable code for API responses and logs) and a user_message that
is safe to show. Detailed causes stay in str(exc) and the logs.
"""

from __future__ import annotations

from enum import Enum

GENERIC_USER_MESSAGE = "Cosmic synchronization failed."


class ErrorKind(str, Enum):
    INVALID_ADDRESS = "invalid_address"
    NO_ENDPOINTS_CONFIGURED = "no_endpoints_configured"
    ALL_ENDPOINTS_FAILED = "all_endpoints_failed"
    RATE_LIMITED = "rate_limited"
    MALFORMED_UPSTREAM_RESPONSE = "malformed_upstream_response"


class PrismError(Exception):
    """Base for all Identity Prism errors."""

    kind: ErrorKind = ErrorKind.ALL_ENDPOINTS_FAILED
    user_message: str = GENERIC_USER_MESSAGE


class InvalidAddress(PrismError):
    """Address is not a base58 32-byte public key. Client input; never retried."""

    kind = ErrorKind.INVALID_ADDRESS
    user_message = "Invalid wallet address"

    def __init__(self, address: str, reason: str | None = None) -> None:
        self.address = address
        detail = f"invalid wallet address {address!r}"
        if reason:
            detail += f": {reason}"
        super().__init__(detail)


class NoEndpointsConfigured(PrismError):
    """Neither a proxy URL nor any API key is configured."""

    kind = ErrorKind.NO_ENDPOINTS_CONFIGURED
    user_message = "Helius API key required."

    def __init__(self, message: str = "no ledger endpoints configured") -> None:
        super().__init__(message)


class EndpointError(PrismError):
    """One request against one endpoint failed; the caller moves to the next endpoint."""

    kind = ErrorKind.ALL_ENDPOINTS_FAILED

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RateLimited(EndpointError):
    """Upstream answered HTTP 429."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(self, message: str = "upstream rate limit (HTTP 429)") -> None:
        super().__init__(message, status_code=429)


class MalformedUpstreamResponse(EndpointError):
    """Upstream returned a JSON-RPC error payload or a body without a result."""

    kind = ErrorKind.MALFORMED_UPSTREAM_RESPONSE

    def __init__(self, message: str, *, code: int | None = None) -> None:
        self.code = code
        super().__init__(message)


class AllEndpointsFailed(PrismError):
    """Every configured endpoint was tried once and failed."""

    def __init__(self, label: str, attempts: int, last_error: Exception) -> None:
        self.label = label
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{label}: all {attempts} endpoint(s) failed; last error: {last_error}"
        )

    @property
    def kind(self) -> ErrorKind:  # type: ignore[override]
        if isinstance(self.last_error, RateLimited):
            return ErrorKind.RATE_LIMITED
        return ErrorKind.ALL_ENDPOINTS_FAILED


class InvalidFilename(PrismError):
    """Storage filename is empty or contains path traversal characters."""

    kind = ErrorKind.MALFORMED_UPSTREAM_RESPONSE
    user_message = "Invalid filename"


class StorageError(PrismError):
    """Metadata storage request failed or answered without the expected field."""

    kind = ErrorKind.MALFORMED_UPSTREAM_RESPONSE

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
