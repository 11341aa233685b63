"""
HTTP Transport

Executes requests through a ``requests.Session`` and returns responses whose
body is pulled lazily, either whole or chunk by chunk.
"""

from __future__ import annotations

import base64
import codecs
import json
import logging
import re
import threading
import time
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol, runtime_checkable
from urllib.parse import urljoin

import requests
import uritemplate

from reqchain.config.runtime import HttpConfig
from reqchain.errors import DecodingError

logger = logging.getLogger(__name__)


SUPPORTED_OPTIONS = frozenset({
    "base_uri",
    "vars",
    "headers",
    "query",
    "body",
    "auth_basic",
    "auth_bearer",
    "timeout",
    "max_redirects",
    "verify_peer",
    "proxy",
})

_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([^\"';\s]+)", re.IGNORECASE)
_JSON_CONTENT_TYPE_RE = re.compile(r"\bjson\b", re.IGNORECASE)


@dataclass(frozen=True)
class Chunk:
    """
    A fragment of a streamed response body.

    ``is_first`` and ``is_last`` chunks carry no content. A timeout chunk
    means no data arrived within the idle timeout; the stream goes on after it.
    """
    content: str = ""
    offset: int = 0
    is_first: bool = False
    is_last: bool = False
    is_timeout: bool = False


@runtime_checkable
class RawResponse(Protocol):
    """What ``Response`` needs from a transport response."""

    @property
    def status_code(self) -> int: ...

    @property
    def headers(self) -> dict[str, list[str]]: ...

    @property
    def text(self) -> str: ...

    def json(self) -> Any: ...

    def info(self, key: Optional[str] = None, default: Any = None) -> Any: ...

    def close(self) -> None: ...


@runtime_checkable
class HttpTransport(Protocol):
    """What ``Request`` and ``Response`` need from a transport."""

    def request(self, method: str, path: str, options: Mapping[str, Any]) -> RawResponse: ...

    def stream(self, response: Any, timeout: Optional[float] = None) -> Iterator[Chunk]: ...


def expand_path(path: str, variables: Mapping[str, Any]) -> str:
    """
    Expand an RFC 6570 URI template (``{id}``, ``{?q,page}``, ``{/segments*}``, ...).

    Lists and mappings follow the template's explode rules; expressions
    without a value expand to an empty string.
    """
    return uritemplate.expand(path, dict(variables))


def _iter_callback(callback: Callable[[], Any]) -> Iterator[bytes]:
    while True:
        data = callback()
        if not data:
            return
        yield data.encode("utf-8") if isinstance(data, str) else data


def _prepare_body(body: Any) -> Any:
    if body is None or isinstance(body, (bytes, bytearray)):
        return body
    if isinstance(body, Mapping):
        return dict(body)
    if isinstance(body, str):
        return body.encode("utf-8")
    if hasattr(body, "read"):
        return body
    if callable(body):
        return _iter_callback(body)
    if isinstance(body, Iterable):
        return (c.encode("utf-8") if isinstance(c, str) else c for c in body)
    raise TypeError(f"Unsupported request body of type {type(body).__name__}")


class RequestsResponse:
    """
    Response handle returned by ``RequestsTransport``.

    Status and headers are available as soon as the handle exists. The body
    is read by a background thread into a shared buffer the first time it
    is needed, so ``text`` and ``iter_chunks`` always see the same bytes.
    """

    def __init__(
        self,
        response: requests.Response,
        *,
        method: str,
        started: float,
        chunk_size: int = 8192,
    ) -> None:
        self.raw = response
        self._method = method
        self._started = started
        self._chunk_size = chunk_size
        self._chunks: list[bytes] = []
        self._complete = False
        self._closed = False
        self._error: Optional[Exception] = None
        self._reader: Optional[threading.Thread] = None
        self._condition = threading.Condition()
        self._total_time: Optional[float] = None

    @property
    def status_code(self) -> int:
        return self.raw.status_code

    @property
    def headers(self) -> dict[str, list[str]]:
        """Response headers, lower-cased name -> list of values."""
        raw_headers = getattr(self.raw.raw, "headers", None)
        if hasattr(raw_headers, "iteritems"):
            items = raw_headers.iteritems()
        else:
            items = self.raw.headers.items()

        headers: dict[str, list[str]] = {}
        for name, value in items:
            headers.setdefault(name.lower(), []).append(value)
        return headers

    @property
    def encoding(self) -> str:
        """Charset stated in Content-Type, UTF-8 when absent or unknown."""
        match = _CHARSET_RE.search(self.raw.headers.get("content-type", ""))
        if match:
            try:
                return codecs.lookup(match.group(1)).name
            except LookupError:
                logger.debug("Unknown charset %r, decoding as utf-8", match.group(1))
        return "utf-8"

    @property
    def text(self) -> str:
        """Full body, decoded with the response charset."""
        self._wait_complete()
        return b"".join(self._chunks).decode(self.encoding, errors="replace")

    def json(self) -> Any:
        """
        Decode the body as JSON into a mapping or a list.

        Raises:
            DecodingError: On an empty body, a non-JSON content type,
                invalid JSON or a scalar top-level value
        """
        content = self.text
        url = self.info("url")
        if content == "":
            raise DecodingError("Response body is empty", details={"url": url})

        content_type = self.raw.headers.get("content-type", "")
        if content_type and not _JSON_CONTENT_TYPE_RE.search(content_type):
            raise DecodingError(
                f'Response content-type is "{content_type}" while a JSON-compatible one '
                f'was expected for "{url}"',
                details={"url": url, "content_type": content_type},
            )

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DecodingError(f'{e.msg} for "{url}"', details={"url": url}) from e

        if not isinstance(data, (dict, list)):
            raise DecodingError(
                f'JSON content was expected to decode to an array, "{type(data).__name__}" '
                f'returned for "{url}"',
                details={"url": url},
            )
        return data

    def info(self, key: Optional[str] = None, default: Any = None) -> Any:
        """Metadata about the exchange; the whole mapping when ``key`` is None."""
        info = {
            "http_method": self._method,
            "url": self.raw.url,
            "status_code": self.raw.status_code,
            "response_headers": [f"{k}: {v}" for k, values in self.headers.items() for v in values],
            "redirect_count": len(self.raw.history),
            "total_time": self._total_time,
        }
        if key is None:
            return info
        return info.get(key, default)

    def iter_chunks(self, timeout: Optional[float] = None) -> Iterator[Chunk]:
        """
        Yield body chunks as they are received.

        Args:
            timeout: Seconds to wait for the next chunk before yielding a
                timeout chunk; None waits indefinitely
        """
        self._ensure_reader()
        yield Chunk(is_first=True)

        decoder = codecs.getincrementaldecoder(self.encoding)(errors="replace")
        index = 0
        offset = 0
        while True:
            with self._condition:
                ready = self._condition.wait_for(
                    lambda: index < len(self._chunks) or self._complete,
                    timeout,
                )
                blocks = self._chunks[index:]
                index = len(self._chunks)
                complete = self._complete
                error = self._error

            if not ready:
                yield Chunk(offset=offset, is_timeout=True)
                continue

            for block in blocks:
                content = decoder.decode(block)
                if content:
                    yield Chunk(content=content, offset=offset)
                offset += len(block)

            if complete:
                if error is not None:
                    raise error
                tail = decoder.decode(b"", final=True)
                if tail:
                    yield Chunk(content=tail, offset=offset)
                yield Chunk(offset=offset, is_last=True)
                return

    def close(self) -> None:
        """
        Stop reading the body and release the connection.

        Chunks already received stay readable; consumers waiting on more
        see the body end where reading stopped.
        """
        with self._condition:
            self._closed = True
            if self._reader is None:
                self._complete = True
            self._condition.notify_all()
        self.raw.close()

    def _ensure_reader(self) -> None:
        with self._condition:
            if self._reader is None and not self._closed:
                self._reader = threading.Thread(
                    target=self._read_body,
                    name="reqchain-body-reader",
                    daemon=True,
                )
                self._reader.start()

    def _read_body(self) -> None:
        try:
            for block in self.raw.iter_content(self._chunk_size):
                if self._closed:
                    break
                if block:
                    with self._condition:
                        self._chunks.append(block)
                        self._condition.notify_all()
        except Exception as e:
            # Re-raised by whichever consumer is waiting on the body. Reads
            # failing because close() dropped the connection are not errors.
            with self._condition:
                if not self._closed:
                    self._error = e
        finally:
            with self._condition:
                self._complete = True
                self._total_time = time.monotonic() - self._started
                self._condition.notify_all()
            self.raw.close()

    def _wait_complete(self) -> None:
        self._ensure_reader()
        with self._condition:
            self._condition.wait_for(lambda: self._complete)
            if self._error is not None:
                raise self._error


class RequestsTransport:
    """
    HTTP transport over ``requests``.

    Usage:
        transport = RequestsTransport(HttpConfig(timeout=10))

        response = transport.request("GET", "/users/{id}", {
            "base_uri": "https://api.example.com",
            "vars": {"id": 42},
        })
        for chunk in transport.stream(response, timeout=2.0):
            ...
    """

    def __init__(
        self,
        config: Optional[HttpConfig] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the transport.

        Args:
            config: Timeout, redirect, TLS, proxy and User-Agent defaults
            session: Optional preconfigured session (mostly for tests)
        """
        self.config = config or HttpConfig()
        self._session = session

    def _get_session(self) -> requests.Session:
        """Lazy-create the requests session."""
        if self._session is None:
            session = requests.Session()
            session.headers.clear()
            session.headers.update({
                "User-Agent": self.config.user_agent,
                "Accept-Encoding": "gzip",
            })
            session.max_redirects = self.config.max_redirects
            session.trust_env = self.config.trust_env
            self._session = session
        return self._session

    def resolve_url(
        self,
        path: str,
        base_uri: Optional[str] = None,
        variables: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Expand path placeholders and resolve the result against ``base_uri``."""
        url = expand_path(path, variables or {})
        if base_uri:
            url = urljoin(base_uri, url)
        return url

    def build_headers(self, options: Mapping[str, Any]) -> dict[str, str]:
        """Flatten header options and add the Authorization header."""
        headers: dict[str, str] = {}
        for name, value in (options.get("headers") or {}).items():
            if isinstance(value, (list, tuple)):
                value = ", ".join(str(v) for v in value)
            headers[name] = str(value)

        auth_basic = options.get("auth_basic")
        auth_bearer = options.get("auth_bearer")
        if auth_basic and auth_bearer:
            raise ValueError(
                'Define either the "auth_basic" or the "auth_bearer" option, '
                "setting both is not supported"
            )
        if auth_basic:
            credentials = auth_basic if isinstance(auth_basic, str) else ":".join(auth_basic)
            token = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
            headers["Authorization"] = f"Basic {token}"
        elif auth_bearer:
            headers["Authorization"] = f"Bearer {auth_bearer}"

        return headers

    def request(
        self,
        method: str,
        path: str,
        options: Optional[Mapping[str, Any]] = None,
    ) -> RequestsResponse:
        """
        Send a request and return once the response headers are received.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Path or URL, may contain ``{name}`` placeholders
            options: Transport options, see ``SUPPORTED_OPTIONS``

        Returns:
            RequestsResponse with the body still unread

        Raises:
            ValueError: On unsupported or conflicting options
            requests.RequestException: On network failure
        """
        options = dict(options or {})
        unsupported = sorted(set(options) - SUPPORTED_OPTIONS)
        if unsupported:
            raise ValueError(
                f'Unsupported option "{unsupported[0]}" passed to {type(self).__name__}, '
                f'did you mean one of {", ".join(sorted(SUPPORTED_OPTIONS))}?'
            )

        url = self.resolve_url(path, options.get("base_uri"), options.get("vars"))
        kwargs: dict[str, Any] = {
            "headers": self.build_headers(options),
            "params": dict(options["query"]) if options.get("query") else None,
            "data": _prepare_body(options.get("body")),
            "timeout": options.get("timeout", self.config.timeout),
            "allow_redirects": options.get("max_redirects", self.config.max_redirects) > 0,
            "verify": options.get("verify_peer", self.config.verify_peer),
            "stream": True,
        }
        proxy = options.get("proxy", self.config.proxy)
        if proxy:
            kwargs["proxies"] = {"http": proxy, "https": proxy}

        logger.debug("Sending %s %s", method, url)
        started = time.monotonic()
        response = self._get_session().request(method, url, **kwargs)
        logger.debug("Received %d for %s %s", response.status_code, method, response.url)

        return RequestsResponse(
            response,
            method=method,
            started=started,
            chunk_size=self.config.chunk_size,
        )

    def stream(self, response: RequestsResponse, timeout: Optional[float] = None) -> Iterator[Chunk]:
        """
        Yield the chunks of ``response``.

        Args:
            response: Handle returned by ``request``
            timeout: Idle timeout per chunk, defaults to the configured timeout
        """
        if timeout is None:
            timeout = self.config.timeout
        return response.iter_chunks(timeout)

    def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            self._session.close()
            self._session = None

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *args) -> None:
        self.close()
