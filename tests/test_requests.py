"""
End-to-end tests: Request -> RequestsTransport -> echo server -> Response.

Each test drives the full stack over a real socket against the echo server
started once per session (see conftest.py).
"""

import base64

import pytest

from reqchain import Request, StatusCodeError
from reqchain.serializer import XML_ROOT_NODE_NAME

from fixtures import DEFAULT_USER_AGENT, EchoServerResponse, NameRequest


pytestmark = pytest.mark.integration


def _content_json(path: str) -> str:
    return (
        '{"method":"GET","path":"%s","headers":{"Accept":"application/json",'
        '"Accept-Encoding":"gzip","User-Agent":"%s"}}' % (path, DEFAULT_USER_AGENT)
    )


# =============================================================================
# Methods and bodies
# =============================================================================

class TestMethodsAndBodies:

    def test_get_json_request(self, request_builder: Request):
        result = (
            request_builder
            .get("/get")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result == EchoServerResponse.of_json(method="GET", path="/get")

    def test_get_xml_request(self, request_builder: Request):
        result = (
            request_builder
            .get("/get")
            .header("Accept", "application/xml")
            .response()
            .check_status(200)
            .object(EchoServerResponse, "xml")
        )
        assert result == EchoServerResponse.of_xml(method="GET", path="/get")

    def test_post_json_request(self, request_builder: Request):
        result = (
            request_builder
            .post("/post")
            .headers({
                "Content-Type": "application/json",
                "Accept": "application/json",
            })
            .body(NameRequest(name="John Doe"))
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result == EchoServerResponse.of_json(
            method="POST",
            path="/post",
            headers={"Content-Type": "application/json"},
            body={"name": "John Doe"},
        )

    def test_post_xml_request_with_custom_root(self, request_builder: Request):
        result = (
            request_builder
            .post("/post")
            .headers({
                "Content-Type": "application/xml",
                "Accept": "application/xml",
            })
            .body(NameRequest(name="Jane Doe"), "xml", {XML_ROOT_NODE_NAME: "request"})
            .response()
            .check_status(200)
            .object(EchoServerResponse, "xml")
        )
        assert result == EchoServerResponse.of_xml(
            method="POST",
            path="/post",
            headers={"Content-Type": "application/xml"},
            body={"request": {"name": "Jane Doe"}},
        )

    def test_post_form_request(self, request_builder: Request):
        result = (
            request_builder
            .post("/post")
            .headers({
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            })
            .body(NameRequest(name="Jane Doe"), "form")
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result == EchoServerResponse.of_json(
            method="POST",
            path="/post",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            body={"name": "Jane Doe"},
        )

    @pytest.mark.parametrize("verb", ["put", "patch", "delete"])
    def test_json_body_verbs(self, request_builder: Request, verb: str):
        path = f"/{verb}"
        result = (
            getattr(request_builder, verb)(path)
            .headers({
                "Content-Type": "application/json",
                "Accept": "application/json",
            })
            .body(NameRequest(name="John Doe"))
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result == EchoServerResponse.of_json(
            method=verb.upper(),
            path=path,
            headers={"Content-Type": "application/json"},
            body={"name": "John Doe"},
        )

    def test_options_request(self, request_builder: Request):
        result = (
            request_builder
            .options("/options")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result == EchoServerResponse.of_json(method="OPTIONS", path="/options")

    def test_raw_body_chunks(self, request_builder: Request):
        result = (
            request_builder
            .post("/raw")
            .headers({
                "Content-Type": "application/json",
                "Accept": "application/json",
            })
            .raw_body(['{"name":', '"Raw Doe"}'])
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result.body == {"name": "Raw Doe"}

    def test_raw_body_callback(self, request_builder: Request):
        pieces = iter(['{"name":"', "Callback Doe", '"}'])

        result = (
            request_builder
            .post("/raw")
            .headers({
                "Content-Type": "application/json",
                "Accept": "application/json",
            })
            .raw_body(lambda: next(pieces, ""))
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result.body == {"name": "Callback Doe"}


# =============================================================================
# Query, templates and auth
# =============================================================================

class TestRequestOptions:

    def test_query_parameters(self, request_builder: Request):
        result = (
            request_builder
            .get("/query")
            .header("Accept", "application/json")
            .query({"name": "John Doe"})
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result == EchoServerResponse.of_json(
            method="GET", path="/query", query={"name": "John Doe"},
        )

    def test_uri_templates(self, request_builder: Request):
        result = (
            request_builder
            .get("/users/{userId}/{resource}/{resourceId}")
            .var("userId", 42)
            .vars({"resource": "comments", "resourceId": 42.42})
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result == EchoServerResponse.of_json(
            method="GET", path="/users/42/comments/42.42",
        )

    def test_auth_basic(self, request_builder: Request):
        result = (
            request_builder
            .basic("user", "password")
            .get("/auth/basic")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        token = base64.b64encode(b"user:password").decode()
        assert result == EchoServerResponse.of_json(
            method="GET",
            path="/auth/basic",
            headers={"Authorization": f"Basic {token}"},
        )

    def test_auth_basic_without_password(self, request_builder: Request):
        result = (
            request_builder
            .basic("user")
            .get("/auth/basic")
            .header("Accept", "application/json")
            .response()
            .object(EchoServerResponse)
        )
        token = base64.b64encode(b"user").decode()
        assert result.headers["Authorization"] == f"Basic {token}"

    def test_auth_bearer(self, request_builder: Request):
        result = (
            request_builder
            .bearer("token")
            .get("/auth/bearer")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .object(EchoServerResponse)
        )
        assert result == EchoServerResponse.of_json(
            method="GET",
            path="/auth/bearer",
            headers={"Authorization": "Bearer token"},
        )


# =============================================================================
# Response accessors
# =============================================================================

class TestResponseAccessors:

    def test_status_code(self, request_builder: Request):
        status = (
            request_builder
            .get("/status")
            .header("Accept", "application/json")
            .response()
            .status()
        )
        assert status == 200

    def test_response_headers(self, request_builder: Request):
        headers = (
            request_builder
            .get("/headers")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .headers()
        )
        filtered = {
            name: values for name, values in headers.items()
            if name not in ("date", "content-length", "server")
        }
        assert filtered == {"content-type": ["application/json"]}

    def test_response_header_is_case_insensitive(self, request_builder: Request):
        response = (
            request_builder
            .get("/headers")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
        )
        assert response.header("Content-Type") == ["application/json"]
        assert response.header("X-Missing") == []

    def test_response_as_objects(self, request_builder: Request):
        result = (
            request_builder
            .get("/objects")
            .headers({
                "Accept": "application/json",
                "X-Response-Shape": "array",
            })
            .response()
            .check_status(200)
            .objects(EchoServerResponse)
        )
        assert result == [EchoServerResponse.of_json(method="GET", path="/objects")]

    def test_response_content(self, request_builder: Request):
        content = (
            request_builder
            .get("/content")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .content()
        )
        assert content.strip() == _content_json("/content")

    def test_stream_response_content(self, request_builder: Request):
        chunks = list(
            request_builder
            .get("/stream")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .stream()
        )
        assert chunks[0].is_first
        assert chunks[-1].is_last
        assert "".join(c.content for c in chunks).strip() == _content_json("/stream")

    def test_stream_then_content_agree(self, request_builder: Request):
        response = (
            request_builder
            .get("/stream")
            .header("Accept", "application/json")
            .response()
        )
        streamed = "".join(chunk.content for chunk in response.stream(timeout=5.0))
        assert streamed == response.content()

    def test_response_as_array(self, request_builder: Request):
        result = (
            request_builder
            .get("/array")
            .header("Accept", "application/json")
            .response()
            .check_status(200)
            .array()
        )
        assert result == {
            "method": "GET",
            "path": "/array",
            "headers": {
                "Accept": "application/json",
                "Accept-Encoding": "gzip",
                "User-Agent": DEFAULT_USER_AGENT,
            },
        }


# =============================================================================
# Errors
# =============================================================================

class TestErrors:

    def test_check_response_status_code(self, request_builder: Request, echo_server):
        response = (
            request_builder
            .get("/exception")
            .headers({
                "Accept": "application/json",
                "X-Status-Code": "418",
            })
            .response()
        )

        with pytest.raises(StatusCodeError) as exc_info:
            response.check_status(200, 201)

        error = exc_info.value
        assert str(error) == f"418 returned for GET {echo_server.url}/exception, expected 200, 201"
        assert error.expected_statuses == [200, 201]
        assert error.response is response

    def test_error_body_readable_from_status_error(self, request_builder: Request):
        with pytest.raises(StatusCodeError) as exc_info:
            (
                request_builder
                .get("/exception")
                .headers({
                    "Accept": "application/json",
                    "X-Status-Code": "404",
                })
                .response()
                .check_status(200)
            )

        echoed = exc_info.value.response.object(EchoServerResponse)
        assert echoed == EchoServerResponse.of_json(method="GET", path="/exception")

    def test_unsupported_accept_is_bad_request(self, request_builder: Request):
        response = (
            request_builder
            .get("/accept")
            .header("Accept", "text/plain")
            .response()
            .check_status(400)
        )
        assert response.array() == {"error": "unsupported accept: text/plain"}

    def test_missing_http_method_call(self, request_builder: Request):
        with pytest.raises(RuntimeError, match="The HTTP method and path were not set"):
            request_builder.response()
