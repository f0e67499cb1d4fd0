"""Route groups — prefix, namespace and middleware shared by many routes.

Group attributes are immutable values. Opening a group merges its frame
into the enclosing one and hands back a ``RouteGroup`` that registers
routes with the merged attributes; nothing is pushed onto shared state,
so attributes cannot leak past the group they belong to.

Usage::

    def admin_routes(admin: RouteGroup) -> None:
        admin.get("/dashboard", "AdminController@dashboard")
        admin.get("/users", "UserController@list")

    router.group(
        {"prefix": "/admin", "middleware": [Auth], "namespace": "app.controllers"},
        admin_routes,
    )

    # or, equivalently
    with router.group(prefix="/api") as api:
        with api.group(prefix="/v1") as v1:
            v1.get("/ping", lambda: "pong")
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from turnpike._internal.types import Handler, MiddlewareRef
from turnpike.errors import ConfigurationError
from turnpike.routing.handlers import SEPARATOR

if TYPE_CHECKING:
    from turnpike.routing.route import Route
    from turnpike.routing.router import Router

GROUP_KEYS = frozenset({"prefix", "middleware", "namespace"})


def _as_middleware_tuple(middleware: Any) -> tuple[MiddlewareRef, ...]:
    if middleware is None:
        return ()
    if isinstance(middleware, (list, tuple)):
        return tuple(middleware)
    return (middleware,)


@dataclass(frozen=True, slots=True)
class GroupAttributes:
    """One group frame, or the merge of several.

    ``prefix`` is stored as ``"/segment"`` (or ``""``), ``namespace``
    without a trailing dot, ``middleware`` outermost first.
    """

    prefix: str = ""
    namespace: str | None = None
    middleware: tuple[MiddlewareRef, ...] = ()

    @classmethod
    def coerce(
        cls,
        attributes: Mapping[str, Any] | GroupAttributes | None = None,
        *,
        prefix: str | None = None,
        middleware: Any = None,
        namespace: str | None = None,
    ) -> GroupAttributes:
        """Build a frame from a mapping and/or keyword overrides."""
        if isinstance(attributes, GroupAttributes):
            values: dict[str, Any] = {
                "prefix": attributes.prefix,
                "namespace": attributes.namespace,
                "middleware": attributes.middleware,
            }
        else:
            values = dict(attributes or {})
            unknown = set(values) - GROUP_KEYS
            if unknown:
                msg = f"Unknown group attributes {sorted(unknown)}; expected {sorted(GROUP_KEYS)}"
                raise ConfigurationError(msg)

        if prefix is not None:
            values["prefix"] = prefix
        if middleware is not None:
            values["middleware"] = middleware
        if namespace is not None:
            values["namespace"] = namespace

        raw_prefix = (values.get("prefix") or "").strip("/")
        raw_namespace = (values.get("namespace") or "").rstrip(".")
        return cls(
            prefix=f"/{raw_prefix}" if raw_prefix else "",
            namespace=raw_namespace or None,
            middleware=_as_middleware_tuple(values.get("middleware")),
        )

    def merge(self, inner: GroupAttributes) -> GroupAttributes:
        """Nest *inner* inside this frame.

        Prefixes concatenate, middleware appends, the innermost namespace wins.
        """
        return GroupAttributes(
            prefix=self.prefix + inner.prefix,
            namespace=inner.namespace or self.namespace,
            middleware=(*self.middleware, *inner.middleware),
        )

    def join_uri(self, uri: str) -> str:
        """Prefix *uri* and normalize slashes (no trailing slash except root)."""
        joined = f"{self.prefix}/{uri.lstrip('/')}"
        return "/" + joined.strip("/")

    def qualify(self, handler: Handler) -> Handler:
        """Namespace-qualify ``"Controller@method"`` strings."""
        if self.namespace and isinstance(handler, str) and SEPARATOR in handler:
            return f"{self.namespace}.{handler}"
        return handler


class Registrar:
    """Route registration API shared by ``Router`` and ``RouteGroup``."""

    __slots__ = ()

    def _owner(self) -> Router:
        raise NotImplementedError

    def _scope(self) -> GroupAttributes:
        raise NotImplementedError

    def add(self, method: str, uri: str, handler: Handler) -> Route:
        """Register *handler* for *method* and *uri* within this scope."""
        return self._owner()._add_route(method, uri, handler, self._scope())

    def get(self, uri: str, handler: Handler) -> Route:
        return self.add("GET", uri, handler)

    def post(self, uri: str, handler: Handler) -> Route:
        return self.add("POST", uri, handler)

    def put(self, uri: str, handler: Handler) -> Route:
        return self.add("PUT", uri, handler)

    def patch(self, uri: str, handler: Handler) -> Route:
        return self.add("PATCH", uri, handler)

    def delete(self, uri: str, handler: Handler) -> Route:
        return self.add("DELETE", uri, handler)

    def head(self, uri: str, handler: Handler) -> Route:
        return self.add("HEAD", uri, handler)

    def options(self, uri: str, handler: Handler) -> Route:
        return self.add("OPTIONS", uri, handler)

    def group(
        self,
        attributes: Mapping[str, Any] | GroupAttributes | None = None,
        callback: Callable[[RouteGroup], Any] | None = None,
        *,
        prefix: str | None = None,
        middleware: Any = None,
        namespace: str | None = None,
    ) -> RouteGroup:
        """Open a nested group.

        The callback, if given, runs synchronously with the new group. The
        group is returned either way and works as a context manager.
        """
        frame = GroupAttributes.coerce(
            attributes, prefix=prefix, middleware=middleware, namespace=namespace
        )
        group = RouteGroup(self._owner(), self._scope().merge(frame))
        if callback is not None:
            callback(group)
        return group


class RouteGroup(Registrar):
    """A registration scope carrying merged group attributes."""

    __slots__ = ("attributes", "router")

    def __init__(self, router: Router, attributes: GroupAttributes) -> None:
        self.router = router
        self.attributes = attributes

    def _owner(self) -> Router:
        return self.router

    def _scope(self) -> GroupAttributes:
        return self.attributes

    def __enter__(self) -> RouteGroup:
        return self

    def __exit__(self, *args: object) -> None:
        pass

    def __repr__(self) -> str:
        return f"<RouteGroup prefix={self.attributes.prefix!r}>"
