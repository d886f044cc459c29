"""Tests for rate limit policy and access checks."""

import pytest

from windowlimit.core.config import Settings
from windowlimit.exceptions import ConfigurationError
from windowlimit.limiter.models import HeaderNames
from windowlimit.limiter.policy import (
    SKIP,
    RateLimitPolicy,
    client_address,
    matches,
    resolve_identity,
)


class TestRateLimitPolicy:
    """Tests for policy construction."""

    def test_defaults(self):
        """Test default policy values."""
        policy = RateLimitPolicy()

        assert policy.max_requests == 2500
        assert policy.duration_ms == 3_600_000
        assert policy.status_code == 429
        assert policy.headers == HeaderNames(
            remaining="X-RateLimit-Remaining",
            reset="X-RateLimit-Reset",
            total="X-RateLimit-Limit",
        )
        assert policy.identity is client_address
        assert policy.throw is False

    def test_zero_quota_allowed(self):
        """Test a zero quota is allowed."""
        assert RateLimitPolicy(max_requests=0).max_requests == 0

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_requests": -1},
            {"max_requests": 1.5},
            {"max_requests": True},
            {"duration_ms": 0},
            {"duration_ms": -100},
            {"duration_ms": 0.5},
            {"status_code": 200},
            {"identity": "ip"},
            {"whitelist": "10.0.0.1"},
            {"blacklist": 42},
            {"on_limit_exceeded": "alert"},
        ],
    )
    def test_invalid_values(self, kwargs):
        """Test invalid values raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            RateLimitPolicy(**kwargs)

    def test_is_immutable(self):
        """Test the policy is immutable."""
        policy = RateLimitPolicy()
        with pytest.raises(AttributeError):
            policy.max_requests = 10

    def test_from_settings(self):
        """Test building a policy from settings."""
        config = Settings(
            max_requests=10,
            duration_ms=60_000,
            header_remaining="X-Left",
            disable_headers=True,
            status_code=503,
            error_message="slow down",
            throw=True,
        )

        policy = RateLimitPolicy.from_settings(config, whitelist={"127.0.0.1"})

        assert policy.max_requests == 10
        assert policy.duration_ms == 60_000
        assert policy.headers.remaining == "X-Left"
        assert policy.headers.total == "X-RateLimit-Limit"
        assert policy.disable_headers is True
        assert policy.status_code == 503
        assert policy.error_message == "slow down"
        assert policy.throw is True
        assert policy.whitelist == {"127.0.0.1"}


class TestIdentity:
    """Tests for identity resolution."""

    @pytest.mark.asyncio
    async def test_default_uses_client_address(self, request_factory):
        """Test default uses client address."""
        policy = RateLimitPolicy()

        assert await resolve_identity(policy, request_factory(client="192.168.1.9")) == "192.168.1.9"

    @pytest.mark.asyncio
    async def test_async_identity_function(self, request_factory):
        """Test async identity function."""
        async def by_header(request):
            return request.headers["foo"]

        policy = RateLimitPolicy(identity=by_header)

        assert await resolve_identity(policy, request_factory(headers={"foo": "fiz"})) == "fiz"

    @pytest.mark.asyncio
    async def test_identity_coerced_to_string(self, request_factory):
        """Test identity coerced to string."""
        policy = RateLimitPolicy(identity=lambda request: 42)

        assert await resolve_identity(policy, request_factory()) == "42"

    @pytest.mark.asyncio
    async def test_skip_sentinel(self, request_factory):
        """Test skip sentinel."""
        policy = RateLimitPolicy(identity=lambda request: SKIP)

        assert await resolve_identity(policy, request_factory()) is SKIP

    def test_skip_is_falsy_singleton(self):
        """Test skip is falsy singleton."""
        assert not SKIP
        assert repr(SKIP) == "SKIP"
        assert type(SKIP)() is SKIP


class TestGuards:
    """Tests for whitelist/blacklist evaluation."""

    @pytest.mark.asyncio
    async def test_absent_guard_never_matches(self, request_factory):
        """Test absent guard never matches."""
        assert await matches(None, request_factory(), "10.0.0.1") is False

    @pytest.mark.asyncio
    async def test_sync_predicate(self, request_factory):
        """Test sync predicate."""
        request = request_factory(headers={"foo": "blacklisted"})

        assert await matches(lambda r: r.headers.get("foo") == "blacklisted", request, "x") is True

    @pytest.mark.asyncio
    async def test_async_predicate(self, request_factory):
        """Test async predicate."""
        async def lookup(request):
            return False

        assert await matches(lookup, request_factory(), "x") is False

    @pytest.mark.asyncio
    async def test_collection_of_identities(self, request_factory):
        """Test collection of identities."""
        guard = frozenset({"10.0.0.1", "10.0.0.2"})

        assert await matches(guard, request_factory(), "10.0.0.2") is True
        assert await matches(guard, request_factory(), "10.0.0.3") is False
