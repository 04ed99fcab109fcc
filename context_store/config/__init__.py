"""Settings and logging configuration."""

from .logging import JSONLogFormatter, StoreTextFormatter, setup_logging
from .settings import StoreSettings, get_settings

__all__ = [
    "StoreSettings",
    "get_settings",
    "setup_logging",
    "JSONLogFormatter",
    "StoreTextFormatter",
]
