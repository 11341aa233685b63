"""
Test fixtures package for reqchain tests.

Organized into layers:
- models.py: Payload models exchanged with the echo server
- fakes.py: In-memory transport and raw response for unit tests
- server.py: Echo server running under uvicorn in a background thread
- text_app.py: Fixed non-ASCII text bodies with chosen Content-Type headers

Usage:
    from fixtures import EchoServerResponse, FakeRawResponse, make_fake_transport

    def test_something():
        transport = make_fake_transport(FakeRawResponse(status_code=201))
"""

from .models import (
    DEFAULT_USER_AGENT,
    EchoServerResponse,
    NameRequest,
)

from .fakes import (
    FakeRawResponse,
    make_fake_transport,
)

from .server import (
    EchoServerThread,
)

from .text_app import (
    SLOW_PARTS,
    TEXT,
    XML_NAME,
    create_text_app,
)

__all__ = [
    # Models
    "DEFAULT_USER_AGENT",
    "EchoServerResponse",
    "NameRequest",
    # Fakes
    "FakeRawResponse",
    "make_fake_transport",
    # Server
    "EchoServerThread",
    # Text bodies
    "SLOW_PARTS",
    "TEXT",
    "XML_NAME",
    "create_text_app",
]
