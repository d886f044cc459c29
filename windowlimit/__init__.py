"""Fixed-window request admission control for ASGI applications."""

__version__ = "0.1.0"

from windowlimit.exceptions import (  # noqa: E402
    BlacklistedError,
    ConfigurationError,
    RateLimitException,
    RateLimitExceededError,
    RequestDeniedError,
    StoreError,
)
from windowlimit.limiter import (  # noqa: E402
    SKIP,
    CounterRecord,
    HeaderNames,
    LocalStore,
    Outcome,
    RateLimitDecision,
    RateLimiter,
    RateLimitPolicy,
    RedisStore,
    StoreDriver,
    create_store,
)
from windowlimit.middleware import RateLimitErrorMiddleware, RateLimitMiddleware  # noqa: E402

__all__ = [
    "__version__",
    "SKIP",
    "CounterRecord",
    "HeaderNames",
    "LocalStore",
    "Outcome",
    "RateLimitDecision",
    "RateLimiter",
    "RateLimitPolicy",
    "RedisStore",
    "StoreDriver",
    "create_store",
    "RateLimitMiddleware",
    "RateLimitErrorMiddleware",
    "RateLimitException",
    "ConfigurationError",
    "StoreError",
    "RequestDeniedError",
    "RateLimitExceededError",
    "BlacklistedError",
]
