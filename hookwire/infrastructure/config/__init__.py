"""
Configuration management infrastructure.

This module provides configuration models and loading from files and the
environment.
"""

from .models import ApplicationConfig, LifecycleConfig, LoggingConfig, ServerConfig
from .loader import ConfigLoader

__all__ = [
    "ApplicationConfig",
    "LifecycleConfig",
    "LoggingConfig",
    "ServerConfig",
    "ConfigLoader",
]
