"""Tests for turnpike.middleware.pipeline — onion order, short-circuit, contracts."""

import pytest

from turnpike.errors import MiddlewareContractError
from turnpike.http.request import Request
from turnpike.http.response import Response
from turnpike.middleware.pipeline import (
    MiddlewareRegistry,
    build_pipeline,
    describe,
    resolve_middleware,
)
from turnpike.middleware.protocol import Middleware
from turnpike.routing.router import Router


def _recorder(log: list[str], name: str):
    def middleware(request, next):
        log.append(f"{name}:before")
        response = next(request)
        log.append(f"{name}:after")
        return response

    return middleware


class TestBuildPipeline:
    def test_no_middleware_negotiates_endpoint(self) -> None:
        pipeline = build_pipeline([], lambda request: {"ok": True})
        response = pipeline(Request.build("GET", "/"))
        assert response.content_type == "application/json"

    def test_onion_order(self) -> None:
        log: list[str] = []

        def endpoint(request):
            log.append("handler")
            return "done"

        pipeline = build_pipeline(
            [_recorder(log, "m1"), _recorder(log, "m2"), _recorder(log, "m3")], endpoint
        )
        pipeline(Request.build("GET", "/"))
        assert log == [
            "m1:before",
            "m2:before",
            "m3:before",
            "handler",
            "m3:after",
            "m2:after",
            "m1:after",
        ]

    def test_short_circuit_skips_inner_stages(self) -> None:
        log: list[str] = []

        def deny(request, next):
            return "denied", 403

        pipeline = build_pipeline(
            [_recorder(log, "outer"), deny, _recorder(log, "inner")],
            lambda request: log.append("handler"),
        )
        response = pipeline(Request.build("GET", "/"))
        assert response.status == 403
        assert response.text == "denied"
        assert log == ["outer:before", "outer:after"]

    def test_next_always_returns_response(self) -> None:
        seen: list[object] = []

        def inspect_next(request, next):
            response = next(request)
            seen.append(response)
            return response.with_header("X-Seen", "1")

        pipeline = build_pipeline([inspect_next], lambda request: "plain")
        response = pipeline(Request.build("GET", "/"))
        assert isinstance(seen[0], Response)
        assert response.header("X-Seen") == "1"

    def test_middleware_can_replace_request_data(self) -> None:
        def attach_user(request, next):
            request.set("user", "ada")
            return next(request)

        pipeline = build_pipeline([attach_user], lambda request: request.user)
        assert pipeline(Request.build("GET", "/")).text == "ada"

    def test_pipeline_can_be_reused(self) -> None:
        pipeline = build_pipeline([_recorder([], "m")], lambda request: request.path)
        assert pipeline(Request.build("GET", "/a")).text == "/a"
        assert pipeline(Request.build("GET", "/b")).text == "/b"


class TestMiddlewareShapes:
    def test_class_is_instantiated_per_request(self) -> None:
        instances: list[object] = []

        class Counter:
            def __init__(self) -> None:
                instances.append(self)

            def handle(self, request, next):
                return next(request)

        pipeline = build_pipeline([Counter], lambda request: "ok")
        pipeline(Request.build("GET", "/"))
        pipeline(Request.build("GET", "/"))
        assert len(instances) == 2
        assert instances[0] is not instances[1]

    def test_instance_with_handle(self) -> None:
        class Tag:
            def handle(self, request, next):
                return next(request).with_header("X-Tag", "yes")

        assert isinstance(Tag(), Middleware)
        pipeline = build_pipeline([Tag()], lambda request: "ok")
        assert pipeline(Request.build("GET", "/")).header("X-Tag") == "yes"

    def test_alias(self) -> None:
        registry = MiddlewareRegistry()
        registry.register("tag", lambda request, next: next(request).with_header("X-A", "1"))
        pipeline = build_pipeline(["tag"], lambda request: "ok", registry=registry)
        assert pipeline(Request.build("GET", "/")).header("X-A") == "1"


class TestContractErrors:
    def test_object_without_handle(self) -> None:
        pipeline = build_pipeline([object()], lambda request: "ok")
        with pytest.raises(MiddlewareContractError, match="does not implement"):
            pipeline(Request.build("GET", "/"))

    def test_class_needing_arguments(self) -> None:
        class NeedsConfig:
            def __init__(self, config) -> None:
                self.config = config

            def handle(self, request, next):
                return next(request)

        with pytest.raises(MiddlewareContractError, match="cannot be instantiated"):
            resolve_middleware(NeedsConfig)

    def test_constructor_errors_propagate(self) -> None:
        class Broken:
            def __init__(self) -> None:
                raise TypeError("bad setting")

            def handle(self, request, next):
                return next(request)

        with pytest.raises(TypeError, match="bad setting"):
            resolve_middleware(Broken)

    def test_class_with_default_arguments(self) -> None:
        class Tag:
            def __init__(self, value: str = "x") -> None:
                self.value = value

            def handle(self, request, next):
                return next(request)

        assert callable(resolve_middleware(Tag))

    def test_unknown_alias(self) -> None:
        with pytest.raises(MiddlewareContractError, match="Unknown middleware alias"):
            resolve_middleware("missing", MiddlewareRegistry())

    def test_alias_without_registry(self) -> None:
        with pytest.raises(MiddlewareContractError, match="without a registry"):
            resolve_middleware("auth")

    def test_alias_to_alias_rejected(self) -> None:
        with pytest.raises(MiddlewareContractError):
            MiddlewareRegistry().register("a", "b")

    def test_contract_error_is_lazy(self) -> None:
        router = Router()
        router.get("/ok", lambda: "ok")
        router.get("/bad", lambda: "bad").middleware(42)
        assert router.dispatch(Request.build("GET", "/ok")).text == "ok"
        with pytest.raises(MiddlewareContractError):
            router.dispatch(Request.build("GET", "/bad"))


class TestRegistry:
    def test_contains_and_lookup(self) -> None:
        def mw(request, next):
            return next(request)

        registry = MiddlewareRegistry({"mw": mw})
        assert "mw" in registry
        assert registry.lookup("mw") is mw

    def test_router_alias_middleware(self) -> None:
        router = Router()
        router.alias_middleware("stamp", lambda request, next: next(request).with_status(202))
        router.get("/", lambda: "ok").middleware("stamp")
        assert router.dispatch(Request.build("GET", "/")).status == 202

    def test_describe(self) -> None:
        def my_middleware(request, next):
            return next(request)

        assert describe("auth") == "auth"
        assert describe(my_middleware).endswith("my_middleware")
        assert describe(42) == "int"
