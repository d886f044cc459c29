"""Fixed-window rate limiting.

Re-exports the engine, policy, models and counter stores.
"""

from windowlimit.limiter.backends import (
    CounterStore,
    LocalStore,
    RedisStore,
    StoreDriver,
    create_store,
)
from windowlimit.limiter.engine import RateLimiter
from windowlimit.limiter.models import (
    CounterRecord,
    HeaderNames,
    Outcome,
    RateLimitDecision,
)
from windowlimit.limiter.policy import SKIP, RateLimitPolicy, client_address

__all__ = [
    # Models
    "CounterRecord",
    "HeaderNames",
    "Outcome",
    "RateLimitDecision",
    # Policy
    "SKIP",
    "RateLimitPolicy",
    "client_address",
    # Stores
    "CounterStore",
    "LocalStore",
    "RedisStore",
    "StoreDriver",
    "create_store",
    # Engine
    "RateLimiter",
]
