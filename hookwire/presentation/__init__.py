"""
Presentation layer: the HTTP echo API and the server that hosts it.
"""

from .api import EchoHandler, create_app, new_echo_handler
from .server import HTTPServer

__all__ = [
    "EchoHandler",
    "create_app",
    "new_echo_handler",
    "HTTPServer",
]
