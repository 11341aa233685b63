"""
Echo Server Models

Pydantic models for the echoed payload and error answers.
"""

from typing import Any

from pydantic import BaseModel, Field


class EchoPayload(BaseModel):
    """What the echo server reflects back for every request."""

    method: str = Field(..., description="Request method")
    path: str = Field(..., description="Request path, without the query string")
    headers: dict[str, str] | None = Field(default=None, description="First value of each echoed header")
    query: dict[str, str] | None = Field(default=None, description="First value of each query parameter")
    body: Any = Field(default=None, description="Request body parsed by content type")


class ErrorPayload(BaseModel):
    """Body of a 400 answer."""

    error: str
