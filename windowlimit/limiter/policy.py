"""Rate limit policy and access checks.

A ``RateLimitPolicy`` is built once and never changes for the lifetime
of a limiter. Identity, whitelist and blacklist hooks receive the request
and may be plain functions or coroutines.
"""

import inspect
from collections.abc import Callable, Collection
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from starlette.requests import Request

from windowlimit.core.config import Settings
from windowlimit.exceptions import ConfigurationError
from windowlimit.limiter.models import HeaderNames


class _Skip:
    """Sentinel type returned by identity functions to bypass limiting."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _Skip()

Guard = Union[Callable[[Request], Any], Collection[str]]


def client_address(request: Request) -> str:
    """Default identity: the request's network source address."""
    return request.client.host if request.client else "unknown"


@dataclass(frozen=True)
class RateLimitPolicy:
    """Immutable limiter configuration.

    Attributes:
        max_requests: Quota per window (0 denies every request)
        duration_ms: Window length in milliseconds
        identity: Function request -> identity token or SKIP
        whitelist: Predicate or collection of identities never limited
        blacklist: Predicate or collection of identities always rejected
        headers: Names of the exposed rate limit headers
        disable_headers: Suppress the rate limit headers entirely
        on_limit_exceeded: Hook called as hook(request, decision) on denial
        error_message: Denial body (str or JSON-serialisable structure)
        status_code: Status used when quota is exceeded
        throw: Surface denials as RequestDeniedError instead of a response
    """
    max_requests: int = 2500
    duration_ms: int = 60 * 60 * 1000
    identity: Callable[[Request], Any] = client_address
    whitelist: Optional[Guard] = None
    blacklist: Optional[Guard] = None
    headers: HeaderNames = field(default_factory=HeaderNames)
    disable_headers: bool = False
    on_limit_exceeded: Optional[Callable[..., Any]] = None
    error_message: Any = None
    status_code: int = 429
    throw: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.max_requests, bool) or not isinstance(self.max_requests, int):
            raise ConfigurationError("max_requests must be an integer")
        if self.max_requests < 0:
            raise ConfigurationError("max_requests must not be negative")
        if isinstance(self.duration_ms, bool) or not isinstance(self.duration_ms, int):
            raise ConfigurationError("duration_ms must be an integer number of milliseconds")
        if self.duration_ms <= 0:
            raise ConfigurationError("duration_ms must be positive")
        if not 400 <= self.status_code <= 599:
            raise ConfigurationError("status_code must be a 4xx or 5xx code")
        if not callable(self.identity):
            raise ConfigurationError("identity must be callable")
        for name in ("whitelist", "blacklist"):
            guard = getattr(self, name)
            if guard is None or callable(guard):
                continue
            if isinstance(guard, (str, bytes)) or not isinstance(guard, Collection):
                raise ConfigurationError(
                    f"{name} must be a predicate or a collection of identities"
                )
        if self.on_limit_exceeded is not None and not callable(self.on_limit_exceeded):
            raise ConfigurationError("on_limit_exceeded must be callable")

    @classmethod
    def from_settings(cls, config: Settings, **overrides: Any) -> "RateLimitPolicy":
        """Build a policy from environment settings.

        Hooks (identity, whitelist, blacklist, on_limit_exceeded) cannot
        come from the environment and are passed as overrides.
        """
        values = {
            "max_requests": config.max_requests,
            "duration_ms": config.duration_ms,
            "headers": HeaderNames(
                remaining=config.header_remaining,
                reset=config.header_reset,
                total=config.header_total,
            ),
            "disable_headers": config.disable_headers,
            "error_message": config.error_message,
            "status_code": config.status_code,
            "throw": config.throw,
        }
        values.update(overrides)
        return cls(**values)


async def _call(fn: Callable[[Request], Any], request: Request) -> Any:
    result = fn(request)
    if inspect.isawaitable(result):
        result = await result
    return result


async def resolve_identity(policy: RateLimitPolicy, request: Request) -> Any:
    """Resolve the identity token for a request.

    Returns:
        The identity as a string, or SKIP when the request is not limited.
    """
    identity = await _call(policy.identity, request)
    if identity is SKIP:
        return SKIP
    return str(identity)


async def matches(guard: Optional[Guard], request: Request, identity: str) -> bool:
    """Evaluate a whitelist/blacklist guard.

    Args:
        guard: Predicate over the request, collection of identities, or None
        request: Incoming request
        identity: Resolved identity (used for collection guards)

    Returns:
        True if the guard matches; False when no guard is configured.
    """
    if guard is None:
        return False
    if callable(guard):
        return bool(await _call(guard, request))
    return identity in guard
