"""Core utilities for the rate limiter."""

from windowlimit.core.clock import now_ms
from windowlimit.core.config import Settings, settings
from windowlimit.core.logging import get_logger, setup_logging
from windowlimit.core.utils import format_duration

__all__ = [
    "Settings",
    "settings",
    "get_logger",
    "setup_logging",
    "now_ms",
    "format_duration",
]
