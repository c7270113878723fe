"""
Echo request handler.
"""

import logging

from fastapi import Request, Response
from starlette.requests import ClientDisconnect

logger = logging.getLogger(__name__)


class EchoHandler:
    """Write the request body back to the client unchanged."""

    async def handle(self, request: Request) -> Response:
        try:
            body = await request.body()
        except ClientDisconnect:
            logger.warning("Failed to handle request: client disconnected")
            return Response(status_code=400)

        return Response(
            content=body,
            media_type=request.headers.get("content-type", "application/octet-stream"),
        )


def new_echo_handler() -> EchoHandler:
    return EchoHandler()
