"""Rate limiting middleware.

Raw ASGI middleware so a denial raised in throw mode reaches outer
middleware unchanged, and so admitted responses can be annotated
without buffering the body.
"""

from typing import Any, Optional

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from windowlimit.core.logging import get_logger
from windowlimit.exceptions import RequestDeniedError, StoreError
from windowlimit.limiter.backends import CounterStore, create_store
from windowlimit.limiter.engine import RateLimiter
from windowlimit.limiter.policy import RateLimitPolicy
from windowlimit.limiter.responses import render_denial

logger = get_logger(__name__)


class RateLimitMiddleware:
    """ASGI middleware enforcing a per-identity fixed-window quota.

    Either pass a ready ``limiter`` or the store/policy options:

        app.add_middleware(RateLimitMiddleware, driver="shared", db=redis,
                           max_requests=100, duration_ms=60_000)

    Admitted requests continue with the rate limit headers added to the
    downstream response. Denied requests get the rendered denial, or in
    throw mode a ``RequestDeniedError`` is raised for an outer layer.
    The decision is stored on ``request.state.rate_limit``.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter: Optional[RateLimiter] = None,
        driver: Any = "local",
        db: Any = None,
        namespace: str = CounterStore.DEFAULT_NAMESPACE,
        **policy_options: Any,
    ):
        self.app = app
        if limiter is None:
            store = create_store(driver, db, namespace=namespace)
            limiter = RateLimiter(store, RateLimitPolicy(**policy_options))
        elif policy_options:
            raise TypeError("policy options cannot be combined with an explicit limiter")
        self.limiter = limiter

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        decision = await self.limiter.check(request)
        request.state.rate_limit = decision

        if not decision.allowed:
            response = render_denial(decision.status_code, decision.body, decision.headers)
            await response(scope, receive, send)
            return

        if not decision.headers:
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in decision.headers.items():
                    headers.setdefault(name, value)
            await send(message)

        await self.app(scope, receive, send_with_headers)


class RateLimitErrorMiddleware:
    """Outer error layer for limiter exceptions.

    Renders ``RequestDeniedError`` (throw mode) with the headers it
    carries, and ``StoreError`` as 503. Add it outside
    ``RateLimitMiddleware``.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        try:
            await self.app(scope, receive, send)
        except RequestDeniedError as exc:
            await exc.to_response()(scope, receive, send)
        except StoreError as exc:
            logger.error(f"Rate limit store unavailable: {exc.message}")
            response = JSONResponse(
                {"error": "rate_limit_store_unavailable", "message": "Service temporarily unavailable"},
                status_code=exc.status_code,
            )
            await response(scope, receive, send)
