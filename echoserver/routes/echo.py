"""
Echo Route

Reflects method, path, headers, query and parsed body of any request.
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import Response

from echoserver.codec import SUPPORTED_MEDIA_TYPES, encode_payload, parse_body
from echoserver.errors import EchoError
from echoserver.models import EchoPayload


logger = logging.getLogger(__name__)

router = APIRouter(tags=["echo"])

ECHO_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

# Never echoed, together with every X-* control header
SKIPPED_HEADERS = {"host", "connection", "content-length", "transfer-encoding"}


def canonical_header_name(name: str) -> str:
    """``content-type`` -> ``Content-Type``."""
    return "-".join(part.capitalize() for part in name.split("-"))


def parse_status_code(request: Request) -> int:
    raw = request.headers.get("x-status-code") or "200"
    try:
        return int(raw)
    except ValueError as e:
        raise EchoError(f"parse status code: {e}") from e


def echoed_headers(request: Request) -> dict[str, str]:
    headers: dict[str, str] = {}
    for name in request.headers.keys():
        if name in SKIPPED_HEADERS or name.startswith("x-"):
            continue
        headers.setdefault(canonical_header_name(name), request.headers.getlist(name)[0])
    return headers


@router.api_route("/{path:path}", methods=ECHO_METHODS)
async def echo(request: Request) -> Response:
    """
    Echo the request back.

    Control headers:
    - ``X-Status-Code``: status of the answer (default 200)
    - ``X-Response-Shape: array``: wrap the echoed object in a list

    The answer is JSON or XML depending on ``Accept``; any other Accept
    value is a 400.
    """
    status_code = parse_status_code(request)

    try:
        body = parse_body(request.headers.get("content-type"), await request.body())
    except ValueError as e:
        raise EchoError(str(e)) from e

    query = {key: request.query_params.getlist(key)[0] for key in request.query_params.keys()}
    payload = EchoPayload(
        method=request.method,
        path=request.url.path,
        headers=echoed_headers(request) or None,
        query=query or None,
        body=body,
    )

    data = payload.model_dump(exclude_none=True)
    if request.headers.get("x-response-shape") == "array":
        data = [data]

    accept = request.headers.get("accept", "")
    if accept not in SUPPORTED_MEDIA_TYPES:
        raise EchoError(f"unsupported accept: {accept}")

    logger.info("Handled %s %s", request.method, request.url.path)

    return Response(
        content=encode_payload(data, accept),
        status_code=status_code,
        media_type=accept,
    )
