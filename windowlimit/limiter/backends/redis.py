"""Redis-backed counter store shared across processes."""

from typing import Any, Optional

import redis
import redis.asyncio as aioredis

from windowlimit.core.logging import get_log_context, get_logger, hash_identity
from windowlimit.exceptions import ConfigurationError, StoreError
from windowlimit.limiter.backends.base import CounterStore
from windowlimit.limiter.backends.redis_lua import FIXED_WINDOW_SCRIPT
from windowlimit.limiter.models import CounterRecord

logger = get_logger(__name__)

REDIS_EXCEPTIONS = (
    redis.ConnectionError,
    redis.TimeoutError,
    redis.RedisError,
    OSError,
)


class RedisStore(CounterStore):
    """Distributed counter store.

    Each ``get`` is one ``EVAL`` of ``FIXED_WINDOW_SCRIPT``; there is no
    client-side read-then-write. Connection and script failures are
    raised as ``StoreError``: the store never decides admit or deny on
    its own, and it does not retry (retries belong to the client's
    connection settings).
    """

    def __init__(
        self,
        db: Any,
        namespace: str = CounterStore.DEFAULT_NAMESPACE,
    ):
        """Initialize the store.

        Args:
            db: ``redis.asyncio.Redis`` client (or anything with a
                compatible ``eval`` coroutine)
            namespace: Key prefix

        Raises:
            ConfigurationError: If no usable client is given
        """
        super().__init__(namespace)
        if db is None:
            raise ConfigurationError("shared driver requires a Redis client as db")
        if not callable(getattr(db, "eval", None)):
            raise ConfigurationError(
                f"shared driver requires a Redis client as db, got {type(db).__name__}"
            )
        self._redis = db

    @classmethod
    def from_url(
        cls,
        url: str,
        namespace: str = CounterStore.DEFAULT_NAMESPACE,
        socket_timeout: Optional[float] = None,
    ) -> "RedisStore":
        """Create a store with its own client connected to ``url``."""
        client = aioredis.from_url(url, socket_timeout=socket_timeout)
        return cls(client, namespace=namespace)

    @property
    def db(self) -> Any:
        """The underlying Redis client."""
        return self._redis

    async def get(
        self,
        identity: str,
        max_requests: int,
        duration_ms: int,
        now_ms: int,
    ) -> CounterRecord:
        key = self.make_key(identity)
        try:
            result = await self._redis.eval(
                FIXED_WINDOW_SCRIPT,
                1,  # Number of keys
                key,  # KEYS[1]
                max_requests,  # ARGV[1]
                duration_ms,  # ARGV[2]
                now_ms,  # ARGV[3]
            )
        except REDIS_EXCEPTIONS as e:
            logger.error(
                f"Redis counter lookup failed: {e}",
                extra=get_log_context(identity=hash_identity(identity), driver="shared"),
            )
            raise StoreError(f"Redis counter lookup failed: {e}", identity=identity) from e

        try:
            remaining, total, reset_at = (int(v) for v in result)
        except (TypeError, ValueError) as e:
            raise StoreError(
                f"Unexpected reply from fixed-window script: {result!r}", identity=identity
            ) from e

        return CounterRecord(
            identity=identity,
            total=total,
            remaining=max(remaining, 0),
            reset_at=reset_at,
        )

    async def close(self) -> None:
        """Close the Redis connection pool."""
        close = getattr(self._redis, "aclose", None) or getattr(self._redis, "close", None)
        if close is not None:
            await close()
