"""
Echo Server Application

Test fixture reflecting every request back as JSON or XML.

Usage:
    uvicorn echoserver.app:app

    # Or run directly, listening on ECHOSERVER_LISTEN (default localhost:8000)
    python -m echoserver
"""

import logging
import os

from fastapi import FastAPI

from echoserver.errors import EchoError, echo_error_handler
from echoserver.routes import echo


DEFAULT_LISTEN = "localhost:8000"


def _resolve_log_level() -> int:
    """Resolve log level from ECHOSERVER_LOG_LEVEL, defaulting to INFO."""
    raw = os.getenv("ECHOSERVER_LOG_LEVEL")
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


def resolve_listen_address(value: str | None = None) -> tuple[str, int]:
    """Split ``host:port`` from the argument or ECHOSERVER_LISTEN."""
    listen = value or os.getenv("ECHOSERVER_LISTEN") or DEFAULT_LISTEN
    host, _, port = listen.rpartition(":")
    if not port.isdigit():
        raise ValueError(f"Invalid listen address: {listen!r}, expected host:port")
    return host or "0.0.0.0", int(port)


def create_app() -> FastAPI:
    """Create and configure the echo application."""

    app = FastAPI(
        title="reqchain echo server",
        description="Reflects method, path, headers, query and body of every request.",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.add_exception_handler(EchoError, echo_error_handler)

    app.include_router(echo.router)

    return app


# Create the application instance
app = create_app()


def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=_resolve_log_level(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    host, port = resolve_listen_address()
    logging.getLogger(__name__).info("Listening %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
