"""Rate limiting data models.

This module contains dataclasses for counter state and decisions.
All timestamps are integer epoch milliseconds.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class CounterRecord:
    """Window state for one identity.

    Attributes:
        identity: The token this record tracks
        total: Quota ceiling in effect when the window was opened
        remaining: Quota left in the window, never negative
        reset_at: Epoch milliseconds at which the window ends
    """
    identity: str
    total: int
    remaining: int
    reset_at: int


@dataclass(frozen=True)
class HeaderNames:
    """Names of the three rate limit response headers."""
    remaining: str = "X-RateLimit-Remaining"
    reset: str = "X-RateLimit-Reset"
    total: str = "X-RateLimit-Limit"


class Outcome(str, Enum):
    """How a request was resolved."""
    SKIPPED = "skipped"
    BLACKLISTED = "blacklisted"
    WHITELISTED = "whitelisted"
    ADMITTED = "admitted"
    LIMITED = "limited"


@dataclass
class RateLimitDecision:
    """Canonical result of evaluating one request.

    Both the direct-response exit and the error exit are rendered from
    this one descriptor.
    """
    outcome: Outcome
    identity: Optional[str] = None
    record: Optional[CounterRecord] = None
    headers: Dict[str, str] = field(default_factory=dict)
    status_code: Optional[int] = None
    body: Any = None
    retry_after: Optional[int] = None

    @property
    def allowed(self) -> bool:
        """Whether the host pipeline should continue."""
        return self.outcome in (Outcome.SKIPPED, Outcome.WHITELISTED, Outcome.ADMITTED)
