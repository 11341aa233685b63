"""
Echo Server Error Handling

Malformed control headers, bodies or Accept values answer 400 with an
``{error: message}`` body in the representation the client asked for.
"""

import logging

from fastapi import Request
from fastapi.responses import Response

from echoserver.codec import XML_MEDIA_TYPE, encode_payload
from echoserver.models import ErrorPayload


logger = logging.getLogger(__name__)


class EchoError(Exception):
    """Request the echo server refuses to reflect."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


async def echo_error_handler(request: Request, exc: EchoError) -> Response:
    """Render an EchoError as JSON, or XML when the client accepts only XML."""
    media_type = "application/json"
    if request.headers.get("accept") == XML_MEDIA_TYPE:
        media_type = XML_MEDIA_TYPE

    logger.info("Error %r for %s %s handled", exc.message, request.method, request.url.path)

    return Response(
        content=encode_payload(ErrorPayload(error=exc.message).model_dump(), media_type),
        status_code=exc.status_code,
        media_type=media_type,
    )
