"""Fixed-window counter algorithm.

Pure functions over a single ``CounterRecord``; both store backends use
them (the Redis backend mirrors ``advance`` in its server-side script).

A window is opened by the first request for an identity, or the first
request after the previous window's ``reset_at`` has passed. Opening a
window stores ``remaining = max_requests`` and that request is admitted
when ``remaining > 0``. Each further request in the window decrements
``remaining`` (floored at zero) before the admit check, so exactly
``max_requests`` requests are admitted per window.
"""

from typing import Optional

from windowlimit.limiter.models import CounterRecord


def is_expired(record: CounterRecord, now_ms: int) -> bool:
    """Check if the record's window has ended."""
    return record.reset_at <= now_ms


def advance(
    record: Optional[CounterRecord],
    identity: str,
    max_requests: int,
    duration_ms: int,
    now_ms: int,
) -> CounterRecord:
    """Return the post-state of a window after observing one request.

    Args:
        record: Current record for the identity, if any
        identity: Identity being counted
        max_requests: Quota per window
        duration_ms: Window length in milliseconds
        now_ms: Current time in epoch milliseconds

    Returns:
        A fresh record when there is none or it has expired, otherwise
        the record with ``remaining`` decremented (never below zero).
    """
    if record is None or is_expired(record, now_ms):
        return CounterRecord(
            identity=identity,
            total=max_requests,
            remaining=max_requests,
            reset_at=now_ms + duration_ms,
        )
    return CounterRecord(
        identity=record.identity,
        total=record.total,
        remaining=max(record.remaining - 1, 0),
        reset_at=record.reset_at,
    )


def is_admitted(record: CounterRecord) -> bool:
    """Whether the request that produced ``record`` is admitted."""
    return record.remaining > 0


def exposed_remaining(record: CounterRecord) -> int:
    """Remaining quota after counting the current request."""
    return max(record.remaining - 1, 0)


def retry_after_ms(record: CounterRecord, now_ms: int) -> int:
    """Milliseconds until the window resets, floored at zero."""
    return max(record.reset_at - now_ms, 0)
