"""Process-local counter store."""

import threading
from collections.abc import MutableMapping
from typing import Optional

from windowlimit.exceptions import ConfigurationError
from windowlimit.limiter import algorithm
from windowlimit.limiter.backends.base import CounterStore
from windowlimit.limiter.models import CounterRecord


class LocalStore(CounterStore):
    """In-memory counter store for single-process deployments.

    Records are kept in a mapping keyed by ``<namespace>:<identity>``.
    Expired records are replaced lazily on the next request for the same
    identity and nothing is swept, so the mapping grows with the number
    of distinct identities until the owner calls ``clear()``.

    The read-modify-write runs under a lock and never awaits, so it is
    atomic both between coroutines and between threads.
    """

    def __init__(
        self,
        db: Optional[MutableMapping] = None,
        namespace: str = CounterStore.DEFAULT_NAMESPACE,
    ):
        """Initialize the store.

        Args:
            db: Optional mapping to keep records in. Passing one lets the
                caller inspect or clear state (e.g. between test runs).
            namespace: Key prefix

        Raises:
            ConfigurationError: If db is not a mutable mapping
        """
        super().__init__(namespace)
        if db is None:
            db = {}
        if not isinstance(db, MutableMapping):
            raise ConfigurationError(
                f"local driver requires a mutable mapping as db, got {type(db).__name__}"
            )
        self._db = db
        self._lock = threading.Lock()

    @property
    def db(self) -> MutableMapping:
        """The backing mapping."""
        return self._db

    async def get(
        self,
        identity: str,
        max_requests: int,
        duration_ms: int,
        now_ms: int,
    ) -> CounterRecord:
        key = self.make_key(identity)
        with self._lock:
            record = algorithm.advance(
                self._db.get(key), identity, max_requests, duration_ms, now_ms
            )
            self._db[key] = record
        return record

    def clear(self) -> None:
        """Drop every record. For the store's owner, not in-flight requests."""
        with self._lock:
            self._db.clear()

    def __len__(self) -> int:
        return len(self._db)
