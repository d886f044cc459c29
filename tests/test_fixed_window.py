"""Tests for the fixed-window algorithm."""

from windowlimit.limiter import algorithm
from windowlimit.limiter.models import CounterRecord


class TestAdvance:
    """Tests for window state transitions."""

    def test_creates_window_when_absent(self):
        """Test creates window when absent."""
        record = algorithm.advance(None, "alice", 5, 1000, now_ms=10_000)

        assert record == CounterRecord(identity="alice", total=5, remaining=5, reset_at=11_000)

    def test_decrements_within_window(self):
        """Test decrements within window."""
        record = CounterRecord(identity="alice", total=5, remaining=5, reset_at=11_000)

        updated = algorithm.advance(record, "alice", 5, 1000, now_ms=10_500)

        assert updated.remaining == 4
        assert updated.reset_at == 11_000
        assert updated.total == 5

    def test_remaining_never_negative(self):
        """Test remaining never negative."""
        record = CounterRecord(identity="alice", total=1, remaining=0, reset_at=11_000)

        updated = algorithm.advance(record, "alice", 1, 1000, now_ms=10_999)

        assert updated.remaining == 0

    def test_replaces_window_at_reset_time(self):
        """Test replaces window at reset time."""
        record = CounterRecord(identity="alice", total=1, remaining=0, reset_at=11_000)

        updated = algorithm.advance(record, "alice", 1, 1000, now_ms=11_000)

        assert updated.remaining == 1
        assert updated.reset_at == 12_000

    def test_keeps_total_of_open_window(self):
        """A window keeps the quota it was opened with."""
        record = CounterRecord(identity="alice", total=3, remaining=3, reset_at=11_000)

        updated = algorithm.advance(record, "alice", 10, 1000, now_ms=10_100)

        assert updated.total == 3
        assert updated.remaining == 2

    def test_does_not_mutate_input(self):
        """Test does not mutate input."""
        record = CounterRecord(identity="alice", total=3, remaining=3, reset_at=11_000)

        algorithm.advance(record, "alice", 3, 1000, now_ms=10_100)

        assert record.remaining == 3


class TestDecisionHelpers:
    """Tests for admit/remaining derivations."""

    def test_first_n_requests_admitted_with_decreasing_remaining(self):
        """Test first N requests admitted with decreasing remaining."""
        record = None
        exposed = []
        for offset in range(4):
            record = algorithm.advance(record, "alice", 3, 1000, now_ms=10_000 + offset)
            exposed.append((algorithm.is_admitted(record), algorithm.exposed_remaining(record)))

        assert exposed == [(True, 2), (True, 1), (True, 0), (False, 0)]

    def test_zero_quota_denies_first_request(self):
        """Test zero quota denies first request."""
        record = algorithm.advance(None, "alice", 0, 1000, now_ms=10_000)

        assert algorithm.is_admitted(record) is False
        assert algorithm.exposed_remaining(record) == 0

    def test_retry_after_floored_at_zero(self):
        """Test Retry-After is floored at zero."""
        record = CounterRecord(identity="alice", total=1, remaining=0, reset_at=11_000)

        assert algorithm.retry_after_ms(record, 10_250) == 750
        assert algorithm.retry_after_ms(record, 12_000) == 0

    def test_is_expired(self):
        """Test is expired."""
        record = CounterRecord(identity="alice", total=1, remaining=0, reset_at=11_000)

        assert algorithm.is_expired(record, 10_999) is False
        assert algorithm.is_expired(record, 11_000) is True
