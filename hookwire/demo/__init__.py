"""
Demonstration programs built on the container: an HTTP echo server (with the
default or a custom event sink) and a small user module.
"""

from .echo import custom_logger_echo_options, echo_options
from .users import users_options

__all__ = [
    "custom_logger_echo_options",
    "echo_options",
    "users_options",
]
