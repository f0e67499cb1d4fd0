"""Tests for turnpike.http.response — immutable response transformations."""

import dataclasses

import pytest

from turnpike.http.response import Response


class TestResponse:
    def test_defaults(self) -> None:
        response = Response()
        assert response.status == 200
        assert response.body == ""
        assert response.content_type == "text/html; charset=utf-8"
        assert response.headers == ()

    def test_with_methods_return_new_objects(self) -> None:
        original = Response("hi")
        changed = original.with_status(201).with_header("X-A", "1").with_content_type("text/plain")
        assert original.status == 200
        assert original.headers == ()
        assert changed.status == 201
        assert changed.headers == (("X-A", "1"),)
        assert changed.content_type == "text/plain"

    def test_with_headers_appends(self) -> None:
        response = Response().with_header("A", "1").with_headers({"B": "2", "C": "3"})
        assert response.headers == (("A", "1"), ("B", "2"), ("C", "3"))

    def test_with_body(self) -> None:
        assert Response("a").with_body(b"b").body == b"b"

    def test_header_lookup(self) -> None:
        response = Response().with_header("X-Trace", "abc")
        assert response.header("x-trace") == "abc"
        assert response.header("missing") is None
        assert response.header("missing", "-") == "-"

    def test_body_conversions(self) -> None:
        assert Response("héllo").body_bytes == "héllo".encode()
        assert Response(b"bytes").text == "bytes"
        assert Response(b"bytes").body_bytes == b"bytes"

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            Response().status = 500  # type: ignore[misc]
