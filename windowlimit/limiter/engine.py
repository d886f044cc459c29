"""Rate limit decision engine.

``RateLimiter`` combines identity resolution, the whitelist/blacklist
guards and the counter store into a single ``RateLimitDecision`` per
request. Denials are values; ``check`` turns them into exceptions when
the policy asks for throw mode.
"""

import asyncio
import inspect
from typing import Any, Callable, Optional, Set

from starlette.requests import Request

from windowlimit.core.clock import now_ms
from windowlimit.core.config import Settings, settings
from windowlimit.core.logging import get_log_context, get_logger, hash_identity
from windowlimit.core.utils import format_duration, ms_to_seconds_ceil, ms_to_seconds_floor
from windowlimit.exceptions import (
    BlacklistedError,
    RateLimitExceededError,
    RequestDeniedError,
)
from windowlimit.limiter import algorithm
from windowlimit.limiter.backends import (
    CounterStore,
    LocalStore,
    RedisStore,
    StoreDriver,
    create_store,
    parse_driver,
)
from windowlimit.limiter.models import CounterRecord, Outcome, RateLimitDecision
from windowlimit.limiter.policy import SKIP, RateLimitPolicy, matches, resolve_identity

logger = get_logger(__name__)

FORBIDDEN_STATUS = 403
FORBIDDEN_BODY = "Forbidden"
RETRY_AFTER_HEADER = "Retry-After"


class RateLimiter:
    """Fixed-window rate limiter over a counter store.

    Example:
        limiter = RateLimiter(LocalStore(), RateLimitPolicy(max_requests=100))
        decision = await limiter.evaluate(request)
        if not decision.allowed:
            ...
    """

    def __init__(
        self,
        store: CounterStore,
        policy: Optional[RateLimitPolicy] = None,
        *,
        clock: Callable[[], int] = now_ms,
    ):
        """Initialize the limiter.

        Args:
            store: Counter store shared by every request
            policy: Limiting policy (defaults to 2500 requests per hour)
            clock: Time source returning epoch milliseconds
        """
        self.store = store
        self.policy = policy or RateLimitPolicy()
        self._clock = clock
        self._hook_tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_settings(
        cls,
        config: Settings = settings,
        db: Any = None,
        **policy_overrides: Any,
    ) -> "RateLimiter":
        """Build a limiter from environment settings.

        For the shared driver a Redis client is created from
        ``config.redis_url`` unless one is passed as ``db``.
        """
        driver = parse_driver(config.driver)
        if driver is StoreDriver.SHARED and db is None:
            store = RedisStore.from_url(
                config.redis_url,
                namespace=config.key_prefix,
                socket_timeout=config.redis_socket_timeout,
            )
        else:
            store = create_store(driver, db, namespace=config.key_prefix)
        policy = RateLimitPolicy.from_settings(config, **policy_overrides)
        return cls(store, policy)

    @property
    def driver(self) -> str:
        if isinstance(self.store, LocalStore):
            return StoreDriver.LOCAL.value
        if isinstance(self.store, RedisStore):
            return StoreDriver.SHARED.value
        return type(self.store).__name__

    async def evaluate(self, request: Request) -> RateLimitDecision:
        """Decide whether a request is admitted.

        Order: identity (SKIP admits), blacklist, whitelist, counter.

        Returns:
            The decision descriptor; denials are returned, not raised.

        Raises:
            StoreError: If the counter store fails
        """
        policy = self.policy

        identity = await resolve_identity(policy, request)
        if identity is SKIP:
            return RateLimitDecision(outcome=Outcome.SKIPPED)

        if await matches(policy.blacklist, request, identity):
            logger.warning(
                "Request rejected by blacklist",
                extra=get_log_context(
                    identity=hash_identity(identity),
                    path=request.url.path,
                    method=request.method,
                    status_code=FORBIDDEN_STATUS,
                ),
            )
            return RateLimitDecision(
                outcome=Outcome.BLACKLISTED,
                identity=identity,
                status_code=FORBIDDEN_STATUS,
                body=FORBIDDEN_BODY,
            )

        if await matches(policy.whitelist, request, identity):
            return RateLimitDecision(outcome=Outcome.WHITELISTED, identity=identity)

        now = self._clock()
        record = await self.store.get(
            identity, policy.max_requests, policy.duration_ms, now
        )

        headers = self._rate_limit_headers(record)
        remaining = algorithm.exposed_remaining(record)
        logger.debug(
            f"remaining {remaining}/{record.total} {identity}",
            extra=get_log_context(
                identity=identity,
                driver=self.driver,
                remaining=remaining,
                limit=record.total,
            ),
        )

        if algorithm.is_admitted(record):
            return RateLimitDecision(
                outcome=Outcome.ADMITTED,
                identity=identity,
                record=record,
                headers=headers,
            )

        decision = self._limited(request, record, headers, now)
        self._fire_hook(request, decision)
        return decision

    async def check(self, request: Request) -> RateLimitDecision:
        """Evaluate a request and raise for denials in throw mode.

        Raises:
            RequestDeniedError: Denied and ``policy.throw`` is set
            StoreError: If the counter store fails
        """
        decision = await self.evaluate(request)
        if not decision.allowed and self.policy.throw:
            raise self.to_error(decision)
        return decision

    @staticmethod
    def to_error(decision: RateLimitDecision) -> RequestDeniedError:
        """Wrap a denial in the matching exception, headers included."""
        error_cls = (
            BlacklistedError if decision.outcome is Outcome.BLACKLISTED else RateLimitExceededError
        )
        return error_cls(
            status_code=decision.status_code,
            body=decision.body,
            headers=decision.headers,
            decision=decision,
        )

    def _rate_limit_headers(self, record: CounterRecord) -> dict[str, str]:
        if self.policy.disable_headers:
            return {}
        names = self.policy.headers
        return {
            names.remaining: str(algorithm.exposed_remaining(record)),
            names.reset: str(ms_to_seconds_ceil(record.reset_at)),
            names.total: str(record.total),
        }

    def _limited(
        self,
        request: Request,
        record: CounterRecord,
        headers: dict[str, str],
        now: int,
    ) -> RateLimitDecision:
        policy = self.policy
        delta_ms = algorithm.retry_after_ms(record, now)
        retry_after = ms_to_seconds_floor(delta_ms)
        headers[RETRY_AFTER_HEADER] = str(retry_after)
        body = policy.error_message or (
            f"Rate limit exceeded, retry in {format_duration(delta_ms)}."
        )

        logger.warning(
            "Rate limit exceeded",
            extra=get_log_context(
                identity=hash_identity(record.identity),
                driver=self.driver,
                path=request.url.path,
                method=request.method,
                limit=record.total,
                remaining=0,
                retry_after=retry_after,
                status_code=policy.status_code,
            ),
        )
        return RateLimitDecision(
            outcome=Outcome.LIMITED,
            identity=record.identity,
            record=record,
            headers=headers,
            status_code=policy.status_code,
            body=body,
            retry_after=retry_after,
        )

    def _fire_hook(self, request: Request, decision: RateLimitDecision) -> None:
        """Run on_limit_exceeded without delaying the response.

        Coroutine hooks are scheduled as tasks; failures are logged.
        """
        hook = self.policy.on_limit_exceeded
        if hook is None:
            return
        try:
            result = hook(request, decision)
        except Exception:
            logger.exception("on_limit_exceeded hook failed")
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._hook_tasks.add(task)
            task.add_done_callback(self._hook_done)

    def _hook_done(self, task: asyncio.Task) -> None:
        self._hook_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("on_limit_exceeded hook failed", exc_info=exc)

    async def close(self) -> None:
        """Wait for pending hooks and release the store."""
        if self._hook_tasks:
            await asyncio.gather(*self._hook_tasks, return_exceptions=True)
        await self.store.close()
