"""
Response wrapper.

Adds status checking and body materialization (text, generic structure,
typed objects, chunks) on top of a transport response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, Optional, TypeVar

from reqchain.errors import StatusCodeError

if TYPE_CHECKING:
    from reqchain.request import Request
    from reqchain.serializer import Serializer
    from reqchain.transport import Chunk, HttpTransport, RawResponse

T = TypeVar("T")


@dataclass(frozen=True)
class Response:
    """
    Represents an HTTP response with status checking and content
    deserialization.

    Holds no state of its own: every accessor reads through to ``inner``,
    so transport errors can surface from any of them.
    """
    transport: "HttpTransport" = field(repr=False)
    serializer: "Serializer" = field(repr=False)
    format: str
    request: "Request"
    inner: "RawResponse"

    def check_status(self, *expected: int) -> "Response":
        """
        Validate the status code against the expected codes.

        Raises:
            StatusCodeError: If the status code is none of ``expected``
        """
        if self.status() not in expected:
            raise StatusCodeError(expected, self)
        return self

    def status(self) -> int:
        return self.inner.status_code

    def headers(self) -> dict[str, list[str]]:
        """All response headers, lower-cased name -> list of values."""
        return self.inner.headers

    def header(self, name: str) -> list[str]:
        """Values of one header (case-insensitive), empty if absent."""
        return self.headers().get(name.lower(), [])

    def content(self) -> str:
        """The raw response body."""
        return self.inner.text

    def array(self) -> Any:
        """
        The body decoded by the transport's own JSON decoder into a mapping
        or a list. Does not go through the serializer.
        """
        return self.inner.json()

    def object(
        self,
        cls: type[T],
        format: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> T:
        """
        Deserialize the body into an instance of ``cls``.

        Args:
            cls: Target type
            format: Body format, defaults to the response format
            context: Serializer context
        """
        return self.serializer.deserialize(
            self.content(),
            cls,
            format or self.format,
            context or {},
        )

    def objects(
        self,
        cls: type[T],
        format: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> list[T]:
        """Deserialize the body into a list of ``cls`` instances."""
        return self.serializer.deserialize(
            self.content(),
            list[cls],
            format or self.format,
            context or {},
        )

    def stream(self, timeout: Optional[float] = None) -> Iterator["Chunk"]:
        """
        Yield the response chunk by chunk.

        Args:
            timeout: Idle timeout before a timeout chunk is yielded
        """
        return self.transport.stream(self.inner, timeout)

    def close(self) -> None:
        """
        Stop receiving the body, for instance after leaving ``stream()``
        early. Content received so far stays readable.
        """
        self.inner.close()
