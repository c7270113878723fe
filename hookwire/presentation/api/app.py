"""
FastAPI application factory for the echo service.
"""

import logging

from fastapi import FastAPI

from .echo import EchoHandler

logger = logging.getLogger(__name__)

ECHO_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def create_app(echo: EchoHandler) -> FastAPI:
    """
    Create the FastAPI application routing ``/echo`` to the echo handler.

    Args:
        echo: Handler serving the echo route

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="hookwire echo",
        description="Echoes the request body back to the client",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.add_api_route("/echo", echo.handle, methods=ECHO_METHODS, include_in_schema=False)

    logger.debug("Echo routes registered")
    return app
