"""HTTP request as seen by routes and middleware.

Frozen metadata with two mutable extension points: ``route_params``
(written once per dispatch by the matching route) and ``attributes``
(free-form data that middleware hands down the chain).
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from turnpike._internal.asgi import Scope
from turnpike.http.body import FORM_CONTENT_TYPE, parse_body
from turnpike.http.headers import Headers
from turnpike.http.query import QueryParams

_MISSING: Any = object()


@dataclass(frozen=True, slots=True)
class Request:
    """One inbound call.

    Metadata (method, path, query, body, headers) is frozen at creation.
    The dict *contents* of ``route_params`` and ``attributes`` are mutable
    even though the field references are not.
    """

    method: str
    path: str
    query: QueryParams = field(default_factory=QueryParams)
    body: Mapping[str, Any] = field(default_factory=dict)
    headers: Headers = field(default_factory=Headers)
    route_params: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, Any] = field(default_factory=dict)
    raw_body: bytes = field(default=b"", repr=False)
    client: tuple[str, int] | None = None

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs}"
        return self.path

    @property
    def params(self) -> dict[str, str]:
        """All route parameters (a copy)."""
        return dict(self.route_params)

    @property
    def user(self) -> Any:
        """The ``"user"`` attribute, usually set by an auth middleware."""
        return self.attributes.get("user")

    # -- Accessors --

    def param(self, key: str, default: Any = None) -> Any:
        """Return a route parameter, or *default*."""
        return self.route_params.get(key, default)

    def query_param(self, key: str, default: Any = None) -> Any:
        """Return the first query string value for *key*, or *default*."""
        return self.query.get(key, default)

    def input(self, key: str | None = None, default: Any = None) -> Any:
        """Return one body value, or the whole body mapping when *key* is None."""
        if key is None:
            return dict(self.body)
        return self.body.get(key, default)

    def header(self, key: str, default: str | None = None) -> str | None:
        """Case-insensitive header lookup."""
        return self.headers.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a request attribute for later middleware and the handler."""
        self.attributes[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Return a request attribute, or *default*."""
        return self.attributes.get(key, default)

    def set_route_params(self, params: Mapping[str, str]) -> None:
        """Install the matching route's parameters, replacing any previous set."""
        self.route_params.clear()
        self.route_params.update(params)

    # -- Factories --

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        query: Mapping[str, Any] | str | None = None,
        headers: Mapping[str, str] | None = None,
        json: Any = _MISSING,
        data: Mapping[str, Any] | None = None,
        body: bytes | None = None,
        client: tuple[str, int] | None = None,
    ) -> Request:
        """Construct a request directly, without a host server.

        A ``?query`` suffix on *path* is split off and merged with *query*.
        Pass exactly one of ``json=`` (serialized as JSON), ``data=`` (a
        URL-encoded form) or ``body=`` (raw bytes parsed per Content-Type).
        """
        path, _, inline_query = path.partition("?")
        query_string = inline_query
        if isinstance(query, str):
            query_string = "&".join(part for part in (query_string, query) if part)
        elif query:
            encoded = urlencode({k: str(v) for k, v in query.items()})
            query_string = "&".join(part for part in (query_string, encoded) if part)

        header_map = {k.lower(): v for k, v in (headers or {}).items()}
        raw = body or b""
        if json is not _MISSING:
            raw = json_module.dumps(json).encode("utf-8")
            header_map.setdefault("content-type", "application/json")
        elif data is not None:
            raw = urlencode({k: str(v) for k, v in data.items()}).encode("utf-8")
            header_map.setdefault("content-type", FORM_CONTENT_TYPE)

        return cls(
            method=method.upper(),
            path=path or "/",
            query=QueryParams(query_string),
            body=parse_body(raw, header_map.get("content-type")),
            headers=Headers.from_mapping(header_map),
            raw_body=raw,
            client=client,
        )

    @classmethod
    def from_asgi(cls, scope: Scope, body: bytes = b"") -> Request:
        """Create a Request from an ASGI scope and its fully-read body."""
        headers = Headers.from_raw(scope.get("headers", ()))
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"] or "/",
            query=QueryParams(scope.get("query_string", b"")),
            body=parse_body(body, headers.get("content-type")),
            headers=headers,
            raw_body=body,
            client=tuple(client) if client else None,
        )
