"""Core library modules for DocHub."""

from dochub.lib.clock import as_utc, utcnow
from dochub.lib.config import Settings, get_settings
from dochub.lib.logging import get_logger

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "utcnow",
    "as_utc",
]
