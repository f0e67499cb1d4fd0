"""Tests for turnpike.http.request — construction, accessors, attributes."""

import dataclasses

import pytest

from turnpike.errors import HTTPError
from turnpike.http.request import Request


class TestBuild:
    def test_defaults(self) -> None:
        request = Request.build("get", "")
        assert request.method == "GET"
        assert request.path == "/"
        assert request.body == {}
        assert request.route_params == {}
        assert request.attributes == {}
        assert request.url == "/"

    def test_inline_query_is_split(self) -> None:
        request = Request.build("GET", "/search?q=router")
        assert request.path == "/search"
        assert request.query_param("q") == "router"
        assert request.url == "/search?q=router"

    def test_inline_and_mapping_query_merge(self) -> None:
        request = Request.build("GET", "/search?q=a", query={"page": 2})
        assert request.query_param("q") == "a"
        assert request.query.get_int("page") == 2

    def test_string_query(self) -> None:
        assert Request.build("GET", "/", query="x=1").query_param("x") == "1"

    def test_json_body(self) -> None:
        request = Request.build("POST", "/", json={"name": "ada"})
        assert request.content_type == "application/json"
        assert request.input("name") == "ada"
        assert request.raw_body == b'{"name": "ada"}'

    def test_json_body_must_be_object(self) -> None:
        with pytest.raises(HTTPError):
            Request.build("POST", "/", json=None)

    def test_form_body(self) -> None:
        request = Request.build("POST", "/", data={"name": "ada", "age": 36})
        assert request.input() == {"name": "ada", "age": "36"}

    def test_raw_body_with_content_type(self) -> None:
        request = Request.build(
            "POST", "/", body=b"a=1", headers={"Content-Type": "application/x-www-form-urlencoded"}
        )
        assert request.input("a") == "1"

    def test_explicit_content_type_kept(self) -> None:
        request = Request.build(
            "POST", "/", json={"a": 1}, headers={"content-type": "application/merge-patch+json"}
        )
        assert request.content_type == "application/merge-patch+json"
        assert request.input("a") == 1

    def test_client(self) -> None:
        assert Request.build("GET", "/", client=("10.0.0.1", 5000)).client == ("10.0.0.1", 5000)


class TestFromAsgi:
    def test_scope_conversion(self) -> None:
        scope = {
            "type": "http",
            "method": "post",
            "path": "/users/1",
            "query_string": b"verbose=1",
            "headers": [(b"content-type", b"application/json"), (b"x-token", b"t")],
            "client": ["127.0.0.1", 9000],
        }
        request = Request.from_asgi(scope, b'{"a": true}')
        assert request.method == "POST"
        assert request.path == "/users/1"
        assert request.query_param("verbose") == "1"
        assert request.header("X-Token") == "t"
        assert request.input("a") is True
        assert request.client == ("127.0.0.1", 9000)

    def test_minimal_scope(self) -> None:
        request = Request.from_asgi({"type": "http", "method": "GET", "path": ""})
        assert request.path == "/"
        assert request.client is None
        assert request.body == {}


class TestAccessors:
    def test_param(self) -> None:
        request = Request.build("GET", "/")
        request.set_route_params({"id": "5"})
        assert request.param("id") == "5"
        assert request.param("missing", "dflt") == "dflt"

    def test_params_is_a_copy(self) -> None:
        request = Request.build("GET", "/")
        request.set_route_params({"id": "5"})
        request.params["id"] = "changed"
        assert request.param("id") == "5"

    def test_input_default(self) -> None:
        assert Request.build("GET", "/").input("missing", 0) == 0

    def test_header_default(self) -> None:
        assert Request.build("GET", "/").header("x-missing", "none") == "none"

    def test_attributes(self) -> None:
        request = Request.build("GET", "/")
        request.set("user", {"id": 1})
        assert request.get("user") == {"id": 1}
        assert request.user == {"id": 1}
        assert request.get("missing", "x") == "x"

    def test_metadata_is_frozen(self) -> None:
        request = Request.build("GET", "/")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.path = "/other"  # type: ignore[misc]
