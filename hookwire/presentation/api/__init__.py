"""
HTTP API of the echo service.
"""

from .app import create_app
from .echo import EchoHandler, new_echo_handler

__all__ = [
    "create_app",
    "EchoHandler",
    "new_echo_handler",
]
