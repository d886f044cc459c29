"""Utility functions for the rate limiter."""

import math

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

_UNITS = (
    (DAY_MS, "day"),
    (HOUR_MS, "hour"),
    (MINUTE_MS, "minute"),
    (SECOND_MS, "second"),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_duration(duration_ms: int) -> str:
    """Format a millisecond duration in long human readable form.

    The largest unit the duration reaches is used and the value is
    rounded. The unit is pluralised once the duration is at least one
    and a half units long.

    Examples:
        >>> format_duration(59_000)
        '59 seconds'
        >>> format_duration(3_599_000)
        '60 minutes'
        >>> format_duration(1_000)
        '1 second'
        >>> format_duration(250)
        '250 ms'
    """
    magnitude = abs(duration_ms)
    for unit_ms, name in _UNITS:
        if magnitude >= unit_ms:
            value = _round_half_up(duration_ms / unit_ms)
            suffix = "s" if magnitude >= unit_ms * 1.5 else ""
            return f"{value} {name}{suffix}"
    return f"{duration_ms} ms"


def ms_to_seconds_ceil(value_ms: int) -> int:
    """Convert epoch milliseconds to whole epoch seconds, rounding up."""
    return -(-value_ms // SECOND_MS)


def ms_to_seconds_floor(value_ms: int) -> int:
    """Convert a millisecond span to whole seconds, floored at zero."""
    return max(value_ms, 0) // SECOND_MS
