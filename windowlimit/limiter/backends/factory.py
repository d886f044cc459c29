"""Counter store factory.

Resolves a driver tag into a concrete ``CounterStore`` at setup time so
an unknown driver fails before any request is processed.
"""

from enum import Enum
from typing import Any, Dict, Optional, Type

from windowlimit.core.logging import get_logger
from windowlimit.exceptions import ConfigurationError
from windowlimit.limiter.backends.base import CounterStore
from windowlimit.limiter.backends.memory import LocalStore
from windowlimit.limiter.backends.redis import RedisStore

logger = get_logger(__name__)


class StoreDriver(str, Enum):
    """Supported counter store drivers."""
    LOCAL = "local"
    SHARED = "shared"

    @classmethod
    def _missing_(cls, value: object) -> Optional["StoreDriver"]:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _LEGACY_ALIASES:
                return cls(_LEGACY_ALIASES[normalized])
            for member in cls:
                if member.value == normalized:
                    return member
        return None


# Driver names used by earlier releases
_LEGACY_ALIASES = {
    "memory": "local",
    "redis": "shared",
}

# Store registry mapping drivers to classes
_STORE_REGISTRY: Dict[StoreDriver, Type[CounterStore]] = {
    StoreDriver.LOCAL: LocalStore,
    StoreDriver.SHARED: RedisStore,
}


def parse_driver(driver: Any) -> StoreDriver:
    """Convert a driver tag into a ``StoreDriver``.

    Raises:
        ConfigurationError: If the tag is not a known driver
    """
    if isinstance(driver, StoreDriver):
        return driver
    try:
        return StoreDriver(driver)
    except ValueError:
        raise ConfigurationError(
            f"invalid driver. Expecting local or shared, got {driver!r}"
        ) from None


def create_store(
    driver: Any = StoreDriver.LOCAL,
    db: Any = None,
    *,
    namespace: str = CounterStore.DEFAULT_NAMESPACE,
) -> CounterStore:
    """Create a counter store for a driver tag.

    Args:
        driver: ``local`` / ``shared`` (or legacy ``memory`` / ``redis``)
        db: Store handle. Required for ``shared`` (a Redis client);
            optional mapping for ``local``.
        namespace: Key prefix

    Returns:
        The configured store

    Raises:
        ConfigurationError: Unknown driver or missing/invalid handle
    """
    resolved = parse_driver(driver)
    store = _STORE_REGISTRY[resolved](db=db, namespace=namespace)
    logger.info(
        f"Using {resolved.value} counter store",
        extra={"driver": resolved.value},
    )
    return store
