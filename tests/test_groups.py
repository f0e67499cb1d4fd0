"""Tests for turnpike.routing.group — prefixes, namespaces, group middleware."""

import pytest

from turnpike.errors import ConfigurationError
from turnpike.http.request import Request
from turnpike.routing.group import GroupAttributes, RouteGroup
from turnpike.routing.router import Router


def _tagger(tag: str):
    def middleware(request, next):
        request.set("trail", [*request.get("trail", []), tag])
        return next(request)

    return middleware


class TestGroupAttributes:
    def test_coerce_normalizes_prefix(self) -> None:
        assert GroupAttributes.coerce({"prefix": "admin/"}).prefix == "/admin"
        assert GroupAttributes.coerce({"prefix": "/"}).prefix == ""

    def test_coerce_single_middleware(self) -> None:
        mw = _tagger("a")
        assert GroupAttributes.coerce(middleware=mw).middleware == (mw,)

    def test_coerce_keywords_override_mapping(self) -> None:
        attrs = GroupAttributes.coerce({"prefix": "/a"}, prefix="/b")
        assert attrs.prefix == "/b"

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown group attributes"):
            GroupAttributes.coerce({"prefx": "/typo"})

    def test_merge(self) -> None:
        outer = GroupAttributes(prefix="/api", namespace="app", middleware=("a",))
        inner = GroupAttributes(prefix="/v1", middleware=("b",))
        merged = outer.merge(inner)
        assert merged.prefix == "/api/v1"
        assert merged.namespace == "app"
        assert merged.middleware == ("a", "b")

    def test_innermost_namespace_wins(self) -> None:
        merged = GroupAttributes(namespace="outer").merge(GroupAttributes(namespace="inner"))
        assert merged.namespace == "inner"

    def test_join_uri(self) -> None:
        attrs = GroupAttributes(prefix="/admin")
        assert attrs.join_uri("/users") == "/admin/users"
        assert attrs.join_uri("users/") == "/admin/users"
        assert attrs.join_uri("/") == "/admin"

    def test_qualify_only_touches_controller_strings(self) -> None:
        attrs = GroupAttributes(namespace="app.controllers")
        assert attrs.qualify("UserController@show") == "app.controllers.UserController@show"
        handler = _tagger("x")
        assert attrs.qualify(handler) is handler


class TestRouterGroups:
    def test_callback_style(self) -> None:
        router = Router()

        def admin_routes(admin: RouteGroup) -> None:
            admin.get("/dashboard", lambda: "dash")

        group = router.group({"prefix": "/admin"}, admin_routes)
        assert isinstance(group, RouteGroup)
        assert [r.path for r in router.routes] == ["/admin/dashboard"]

    def test_context_manager_style(self) -> None:
        router = Router()
        with router.group(prefix="/api") as api:
            api.get("/ping", lambda: "pong")
        response = router.dispatch(Request.build("GET", "/api/ping"))
        assert response.text == "pong"

    def test_nested_prefixes(self) -> None:
        router = Router()
        with router.group(prefix="/api") as api, api.group(prefix="/v1") as v1:
            v1.get("/users/{id}", lambda id: id)
        assert router.routes[0].path == "/api/v1/users/{id}"

    def test_attributes_do_not_leak_past_group(self) -> None:
        router = Router()
        with router.group(prefix="/admin", middleware=[_tagger("admin")]) as admin:
            admin.get("/inside", lambda: "in")
        outside = router.get("/outside", lambda: "out")
        assert outside.path == "/outside"
        assert outside.middlewares == ()

    def test_group_middleware_runs_before_route_middleware(self) -> None:
        router = Router()
        router.add_middleware(_tagger("global"))
        with router.group(middleware=[_tagger("outer")]) as outer:
            with outer.group(middleware=_tagger("inner")) as inner:
                inner.get("/", lambda request: ",".join(request.get("trail"))).middleware(
                    _tagger("route")
                )
        response = router.dispatch(Request.build("GET", "/"))
        assert response.text == "global,outer,inner,route"

    def test_namespace_qualifies_string_handlers(self) -> None:
        router = Router()

        @router.controller(namespace="admin")
        class UserController:
            def index(self):
                return "admin users"

        with router.group(prefix="/admin", namespace="admin") as admin:
            route = admin.get("/users", "UserController@index")

        assert route.handler == "admin.UserController@index"
        assert router.dispatch(Request.build("GET", "/admin/users")).text == "admin users"

    def test_group_routes_can_be_named(self) -> None:
        router = Router()
        with router.group(prefix="/blog") as blog:
            blog.get("/{slug}", lambda slug: slug).name("blog.show")
        assert router.url_for("blog.show", slug="hello") == "/blog/hello"

    def test_repr(self) -> None:
        router = Router()
        assert repr(router.group(prefix="/x")) == "<RouteGroup prefix='/x'>"
