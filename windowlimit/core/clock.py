"""Canonical time source for the limiter.

All internal timestamps are integer milliseconds since the Unix epoch.
The wall clock is sampled once at import and advanced with the monotonic
clock afterwards, so a wall-clock step backwards cannot make a window
expire early relative to other processes sharing the same store.
"""

import time

_EPOCH_MS = time.time() * 1000
_START = time.monotonic()


def now_ms() -> int:
    """Return the current time in integer epoch milliseconds."""
    return int(_EPOCH_MS + (time.monotonic() - _START) * 1000)
