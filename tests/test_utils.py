import time

import pytest

from windowlimit.core.clock import now_ms
from windowlimit.core.utils import (
    DAY_MS,
    HOUR_MS,
    MINUTE_MS,
    format_duration,
    ms_to_seconds_ceil,
    ms_to_seconds_floor,
)


@pytest.mark.parametrize(
    ("duration_ms", "expected"),
    [
        (0, "0 ms"),
        (250, "250 ms"),
        (999, "999 ms"),
        (1000, "1 second"),
        (1499, "1 second"),
        (1500, "2 seconds"),
        (59_000, "59 seconds"),
        (59_999, "60 seconds"),
        (MINUTE_MS, "1 minute"),
        (90_000, "2 minutes"),
        (3_540_000, "59 minutes"),
        (3_599_000, "60 minutes"),
        (HOUR_MS, "1 hour"),
        (2 * DAY_MS, "2 days"),
    ],
)
def test_format_duration(duration_ms: int, expected: str) -> None:
    assert format_duration(duration_ms) == expected


def test_reset_seconds_round_up() -> None:
    assert ms_to_seconds_ceil(1_700_000_000_000) == 1_700_000_000
    assert ms_to_seconds_ceil(1_700_000_000_001) == 1_700_000_001
    assert ms_to_seconds_ceil(1_700_000_000_999) == 1_700_000_001


def test_retry_seconds_floor_at_zero() -> None:
    assert ms_to_seconds_floor(59_999) == 59
    assert ms_to_seconds_floor(1000) == 1
    assert ms_to_seconds_floor(999) == 0
    assert ms_to_seconds_floor(-5) == 0


def test_now_ms_tracks_wall_clock() -> None:
    before = int(time.time() * 1000)
    value = now_ms()

    assert isinstance(value, int)
    assert abs(value - before) < 5000


def test_now_ms_never_goes_backwards() -> None:
    samples = [now_ms() for _ in range(100)]

    assert samples == sorted(samples)
