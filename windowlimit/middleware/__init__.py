"""Middleware package for the rate limiter."""

from windowlimit.middleware.rate_limit import RateLimitErrorMiddleware, RateLimitMiddleware

__all__ = [
    "RateLimitMiddleware",
    "RateLimitErrorMiddleware",
]
