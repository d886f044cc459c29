"""Shared fixtures for rate limiter tests."""

import asyncio
import logging

import pytest
import redis
from starlette.requests import Request

from windowlimit.limiter.backends.redis_lua import FIXED_WINDOW_SCRIPT

BASE_TIME_MS = 1_700_000_000_000


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, start: int = BASE_TIME_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeRedis:
    """In-process stand-in for redis.asyncio.Redis.

    Only ``eval`` of the fixed-window script is supported. The script's
    effect is applied without awaiting, matching Redis' guarantee that a
    script runs atomically; the leading ``sleep(0)`` lets concurrent
    callers interleave the way network round trips would.
    """

    def __init__(self):
        self.hashes: dict[str, dict[str, int]] = {}
        self.expiry_ms: dict[str, int] = {}
        self.calls: list[tuple] = []
        self.error: Exception | None = None
        self.closed = False

    async def eval(self, script, numkeys, *args):
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        assert script == FIXED_WINDOW_SCRIPT
        assert numkeys == 1
        key = args[0]
        max_requests, duration, now = (int(v) for v in args[1:4])
        self.calls.append((key, max_requests, duration, now))

        state = self.hashes.get(key)
        if state is None or state["reset"] <= now:
            state = {"remaining": max_requests, "total": max_requests, "reset": now + duration}
            self.hashes[key] = state
            self.expiry_ms[key] = duration
            return [state["remaining"], state["total"], state["reset"]]

        if state["remaining"] > 0:
            state["remaining"] -= 1
        return [state["remaining"], state["total"], state["reset"]]

    async def aclose(self):
        self.closed = True


def make_request(
    client: str = "10.0.0.1",
    headers: dict | None = None,
    path: str = "/",
    method: str = "GET",
) -> Request:
    """Build a Starlette request without a running server."""
    raw_headers = [
        (name.lower().encode(), value.encode()) for name, value in (headers or {}).items()
    ]
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "headers": raw_headers,
        "client": (client, 50000),
        "server": ("testserver", 80),
        "scheme": "http",
        "root_path": "",
    }
    return Request(scope)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_connection_error():
    return redis.ConnectionError("Connection refused")


@pytest.fixture
def request_factory():
    return make_request


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so later tests see default propagation."""
    yield
    package_logger = logging.getLogger("windowlimit")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
