"""Counter store backends."""

from windowlimit.limiter.backends.base import CounterStore
from windowlimit.limiter.backends.factory import StoreDriver, create_store, parse_driver
from windowlimit.limiter.backends.memory import LocalStore
from windowlimit.limiter.backends.redis import RedisStore
from windowlimit.limiter.backends.redis_lua import FIXED_WINDOW_SCRIPT

__all__ = [
    "CounterStore",
    "LocalStore",
    "RedisStore",
    "StoreDriver",
    "create_store",
    "parse_driver",
    "FIXED_WINDOW_SCRIPT",
]
