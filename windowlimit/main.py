from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request

from windowlimit import __version__
from windowlimit.core.config import Settings, settings
from windowlimit.core.logging import get_logger, setup_logging
from windowlimit.limiter.engine import RateLimiter
from windowlimit.middleware.rate_limit import RateLimitErrorMiddleware, RateLimitMiddleware


def create_app(
    config: Optional[Settings] = None,
    db: Any = None,
    **policy_overrides: Any,
) -> FastAPI:
    """Create and configure a FastAPI application guarded by the limiter.

    Args:
        config: Settings to build the limiter from (defaults to the global settings)
        db: Optional store handle (Redis client or mapping)
        **policy_overrides: Policy hooks such as identity or whitelist

    Returns:
        Configured FastAPI application instance
    """
    config = config or settings
    setup_logging()
    logger = get_logger(__name__)

    limiter = RateLimiter.from_settings(config, db=db, **policy_overrides)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info(
            "Rate limiter ready",
            extra={
                "driver": limiter.driver,
                "max_requests": limiter.policy.max_requests,
                "duration_ms": limiter.policy.duration_ms,
            },
        )
        yield
        await limiter.close()
        logger.info("Rate limiter shutdown complete")

    app = FastAPI(
        title="windowlimit",
        description="Fixed-window request admission control",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.limiter = limiter

    # Order matters: last added = first executed
    app.add_middleware(RateLimitMiddleware, limiter=limiter)
    app.add_middleware(RateLimitErrorMiddleware)

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        """Health check reporting the limiter's view of this request."""
        decision = getattr(request.state, "rate_limit", None)
        return {
            "status": "ok",
            "driver": limiter.driver,
            "outcome": decision.outcome.value if decision else None,
        }

    return app
