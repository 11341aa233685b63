"""
Request builder.

Accumulates method, path and transport options through chained calls. Every
call returns a new ``Request``; a partially configured builder can be shared
and extended from several places without interference.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional

from reqchain.response import Response

if TYPE_CHECKING:
    from reqchain.serializer import Serializer
    from reqchain.transport import HttpTransport


def _freeze(options: Mapping[str, Any]) -> Mapping[str, Any]:
    """Read-only copy of the options, nested maps (headers, vars, query) included."""
    return MappingProxyType({
        key: MappingProxyType(dict(value)) if isinstance(value, Mapping) else value
        for key, value in options.items()
    })


@dataclass(frozen=True)
class Request:
    """
    Represents a configurable HTTP request.

    Usage:
        request = Request.create(transport, serializer).base("https://api.example.com")

        user = (
            request.get("/users/{id}")
            .var("id", 42)
            .bearer(token)
            .response()
            .check_status(200)
            .object(User)
        )

    ``http_options`` holds the transport options as a read-only mapping.
    ``vars`` and ``headers`` merge key by key across calls unless
    ``overwrite=True``; every other option is replaced wholesale.
    """
    transport: "HttpTransport" = field(repr=False)
    serializer: "Serializer" = field(repr=False)
    request_format: str = "json"
    response_format: str = "json"
    http_options: Mapping[str, Any] = field(default_factory=dict)
    method: Optional[str] = None
    path: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "http_options", _freeze(self.http_options))

    @classmethod
    def create(
        cls,
        transport: "HttpTransport",
        serializer: "Serializer",
        request_format: str = "json",
        response_format: str = "json",
        options: Optional[Mapping[str, Any]] = None,
    ) -> "Request":
        """
        Create a new Request.

        Args:
            transport: Transport performing the calls
            serializer: Serializer for request and response bodies
            request_format: Default format of the request body
            response_format: Default format of the response body
            options: Base transport options
        """
        return cls(
            transport=transport,
            serializer=serializer,
            request_format=request_format,
            response_format=response_format,
            http_options=dict(options or {}),
        )

    def base(self, uri: str) -> "Request":
        """Set the base URI relative paths are resolved against."""
        return self._with({"base_uri": uri})

    def get(self, path: str) -> "Request":
        return self._with(method="GET", path=path)

    def post(self, path: str) -> "Request":
        return self._with(method="POST", path=path)

    def put(self, path: str) -> "Request":
        return self._with(method="PUT", path=path)

    def patch(self, path: str) -> "Request":
        return self._with(method="PATCH", path=path)

    def delete(self, path: str) -> "Request":
        return self._with(method="DELETE", path=path)

    def options(self, path: str) -> "Request":
        return self._with(method="OPTIONS", path=path)

    def vars(self, vars: Mapping[str, Any], overwrite: bool = False) -> "Request":
        """
        Add or update path template variables.

        Args:
            vars: Variables to add or update
            overwrite: Replace all previously set variables instead of merging
        """
        return self._with({"vars": self._merged("vars", vars, overwrite)})

    def var(self, name: str, value: Any) -> "Request":
        return self.vars({name: value})

    def headers(self, headers: Mapping[str, str | list[str]], overwrite: bool = False) -> "Request":
        """
        Add or update request headers.

        Args:
            headers: Headers to add or update, a value may be a list
            overwrite: Replace all previously set headers instead of merging
        """
        return self._with({"headers": self._merged("headers", headers, overwrite)})

    def header(self, name: str, value: str | list[str]) -> "Request":
        return self.headers({name: value})

    def query(self, query: Mapping[str, Any]) -> "Request":
        """Set the query parameters, replacing any set before."""
        return self._with({"query": dict(query)})

    def body(
        self,
        body: Any,
        format: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> "Request":
        """
        Serialize ``body`` and use the result as the request body.

        Args:
            body: Value to serialize
            format: Serialization format, defaults to the request format
            context: Serializer context
        """
        data = self.serializer.serialize(body, format or self.request_format, context or {})
        return self._with({"body": data})

    def raw_body(self, body: Any) -> "Request":
        """
        Hand ``body`` to the transport unchanged: a string, bytes, a readable
        file object, a zero-argument callable returning successive pieces
        (empty when done) or an iterable of chunks.
        """
        return self._with({"body": body})

    def basic(self, user: str, password: str = "") -> "Request":
        """
        Set basic authentication credentials.

        An empty password is left out of the pair entirely, so only the
        username gets encoded.
        """
        auth = [user]
        if password != "":
            auth.append(password)
        return self._with({"auth_basic": auth})

    def bearer(self, token: str) -> "Request":
        return self._with({"auth_bearer": token})

    def response(self) -> Response:
        """
        Execute the request.

        Raises:
            RuntimeError: If no HTTP method and path were set
        """
        if self.method is None or self.path is None:
            raise RuntimeError("The HTTP method and path were not set")

        return Response(
            transport=self.transport,
            serializer=self.serializer,
            format=self.response_format,
            request=self,
            inner=self.transport.request(self.method, self.path, dict(self.http_options)),
        )

    def _merged(self, key: str, values: Mapping[str, Any], overwrite: bool) -> dict[str, Any]:
        if overwrite:
            return dict(values)
        return {**self.http_options.get(key, {}), **values}

    def _with(
        self,
        options: Optional[Mapping[str, Any]] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ) -> "Request":
        return replace(
            self,
            http_options={**self.http_options, **options} if options else self.http_options,
            method=method or self.method,
            path=path if path is not None else self.path,
        )
