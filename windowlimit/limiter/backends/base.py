"""Counter store interface."""

from abc import ABC, abstractmethod

from windowlimit.limiter.models import CounterRecord


class CounterStore(ABC):
    """Abstract base class for counter stores.

    ``get`` is the only way a record is read or written. It must be
    atomic per identity: two concurrent calls never both act on the same
    pre-decrement ``remaining``.
    """

    DEFAULT_NAMESPACE = "limit"

    def __init__(self, namespace: str = DEFAULT_NAMESPACE):
        self.namespace = namespace

    def __bool__(self) -> bool:
        # A store is truthy even when empty (LocalStore defines __len__).
        return True

    def make_key(self, identity: str) -> str:
        """Namespaced storage key for an identity."""
        if not identity:
            raise ValueError("identity must be a non-empty string")
        return f"{self.namespace}:{identity}"

    @abstractmethod
    async def get(
        self,
        identity: str,
        max_requests: int,
        duration_ms: int,
        now_ms: int,
    ) -> CounterRecord:
        """Advance and persist the window for an identity.

        Args:
            identity: Identity token
            max_requests: Quota per window
            duration_ms: Window length in milliseconds
            now_ms: Current time in epoch milliseconds

        Returns:
            The persisted post-state record.

        Raises:
            StoreError: If the store cannot complete the operation
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the store."""
