"""
reqchain - fluent HTTP requests with typed responses.

Build a request through chained, copy-on-write calls, execute it over
``requests`` and read the response as text, JSON, pydantic models or chunks.

Usage:
    from reqchain import create_request

    users = (
        create_request()
        .base("https://api.example.com")
        .get("/users")
        .response()
        .check_status(200)
        .objects(User)
    )
"""

from .config import ClientConfig, FormatConfig, HttpConfig
from .errors import (
    DecodingError,
    ErrorCodes,
    ReqchainException,
    SerializationError,
    StatusCodeError,
    UnsupportedFormatError,
)
from .factory import create_request
from .request import Request
from .response import Response
from .serializer import FormEncoder, JsonEncoder, Serializer, XmlEncoder
from .transport import Chunk, HttpTransport, RawResponse, RequestsResponse, RequestsTransport

__version__ = "0.1.0"

__all__ = [
    # Builder and wrapper
    "Request",
    "Response",
    "create_request",
    # Transport
    "Chunk",
    "HttpTransport",
    "RawResponse",
    "RequestsResponse",
    "RequestsTransport",
    # Serialization
    "Serializer",
    "JsonEncoder",
    "XmlEncoder",
    "FormEncoder",
    # Configuration
    "ClientConfig",
    "FormatConfig",
    "HttpConfig",
    # Errors
    "ErrorCodes",
    "ReqchainException",
    "StatusCodeError",
    "SerializationError",
    "UnsupportedFormatError",
    "DecodingError",
]
