"""
Logging infrastructure for the application.

This module provides loguru configuration and the default event sink.
"""

from .setup import InterceptHandler, setup_logging
from .event_logger import LoguruEventSink, format_runtime

__all__ = [
    "InterceptHandler",
    "setup_logging",
    "LoguruEventSink",
    "format_runtime",
]
