"""Custom exceptions for the rate limiter."""

from typing import Any, Dict, Optional


class RateLimitException(Exception):
    """Base class for rate limiter exceptions with HTTP status code.

    All custom exceptions should inherit from this class and define
    their specific status_code for consistent HTTP response handling.
    """
    status_code: int = 500

    def __init__(self, message: str = "Rate limiter error"):
        self.message = message
        super().__init__(message)


class ConfigurationError(RateLimitException):
    """Raised at setup time when the limiter is misconfigured.

    Covers unknown drivers, missing or non-conforming store handles
    and invalid policy values.
    """
    status_code = 500


class StoreError(RateLimitException):
    """Raised when the counter store cannot complete a lookup.

    The limiter never turns this into an admit or a deny; it is left
    to the host's error handling.

    Maps to HTTP 503 Service Unavailable.
    """
    status_code = 503

    def __init__(self, message: str = "Counter store unavailable", identity: Optional[str] = None):
        self.identity = identity
        super().__init__(message)


class RequestDeniedError(RateLimitException):
    """A denial surfaced as an error (``throw`` mode).

    Carries everything a direct response would have carried so an
    outer error handler can render it without losing headers.
    """
    status_code = 429

    def __init__(
        self,
        status_code: int,
        body: Any,
        headers: Optional[Dict[str, str]] = None,
        decision: Any = None,
    ):
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers or {})
        self.decision = decision
        message = body if isinstance(body, str) else "Request denied"
        super().__init__(message)

    def to_response(self):
        """Render the denial the same way the direct exit does."""
        # Deferred: the limiter package imports this module.
        from windowlimit.limiter.responses import render_denial

        return render_denial(self.status_code, self.body, self.headers)


class RateLimitExceededError(RequestDeniedError):
    """Raised in throw mode when an identity has used up its quota.

    Maps to HTTP 429 Too Many Requests unless a custom status is configured.
    """
    status_code = 429


class BlacklistedError(RequestDeniedError):
    """Raised in throw mode when the request matched the blacklist.

    Maps to HTTP 403 Forbidden.
    """
    status_code = 403
