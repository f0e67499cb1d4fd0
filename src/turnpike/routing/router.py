"""Router — route registry and request dispatcher.

Routes are registered during setup and kept in registration order; the
first route that matches a request wins. The router freezes on first
dispatch, after which the route table is read-only and safe to share
between concurrent dispatches.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from turnpike._internal.types import Endpoint, Handler, MiddlewareRef
from turnpike.config import RouterConfig
from turnpike.errors import ConfigurationError, HTTPError, URLBuildError
from turnpike.http.request import Request
from turnpike.http.response import Response
from turnpike.middleware.pipeline import MiddlewareRegistry, build_pipeline
from turnpike.negotiation import negotiate
from turnpike.routing.group import GroupAttributes, Registrar
from turnpike.routing.handlers import ControllerResolver, normalize_handler
from turnpike.routing.route import Route

logger = logging.getLogger("turnpike.routing")

_ROOT_SCOPE = GroupAttributes()


def error_response(exc: HTTPError) -> Response:
    """Map an HTTPError to a plain-text Response."""
    resp = Response(
        body=exc.detail or f"Error {exc.status}",
        status=exc.status,
        content_type="text/plain; charset=utf-8",
    )
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


class Router(Registrar):
    """The route registry and dispatcher.

    Usage::

        router = Router()
        router.add_middleware(RequestLogger())
        router.get("/users/{id}", show_user).name("users.show")

        with router.group(prefix="/admin", middleware=[Auth]) as admin:
            admin.get("/dashboard", "AdminController@dashboard")

        response = router.dispatch(Request.build("GET", "/users/42"))

    Thread safety:
        Registration is single-threaded and happens before serving. The
        freeze transition uses a Lock + double-check so exactly one
        thread performs it; afterwards the tables are only read.
    """

    __slots__ = (
        "_fallback",
        "_freeze_lock",
        "_frozen",
        "_middleware",
        "_named_routes",
        "_routes",
        "config",
        "middleware_registry",
        "resolver",
    )

    def __init__(
        self,
        config: RouterConfig | None = None,
        *,
        resolver: ControllerResolver | None = None,
        middleware_registry: MiddlewareRegistry | None = None,
    ) -> None:
        self.config: RouterConfig = config or RouterConfig()
        self.resolver: ControllerResolver = resolver or ControllerResolver()
        self.middleware_registry: MiddlewareRegistry = middleware_registry or MiddlewareRegistry()
        self._routes: list[Route] = []
        self._named_routes: dict[str, Route] = {}
        self._middleware: list[MiddlewareRef] = []
        self._fallback: Endpoint | None = None
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

    # -- Registration --

    def _owner(self) -> Router:
        return self

    def _scope(self) -> GroupAttributes:
        return _ROOT_SCOPE

    def _add_route(
        self,
        method: str,
        uri: str,
        handler: Handler,
        scope: GroupAttributes,
    ) -> Route:
        self._check_not_frozen()
        path = scope.join_uri(uri)
        route = Route(
            method,
            path,
            scope.qualify(handler),
            scope.middleware,
            resolver=self.resolver,
            registry=self.middleware_registry,
            on_name=self._index_name,
            on_change=self._check_not_frozen,
        )
        self._routes.append(route)
        logger.debug("Registered %s %s", route.method, route.path)
        return route

    def _index_name(self, route: Route, name: str) -> None:
        self._check_not_frozen()
        existing = self._named_routes.get(name)
        if existing is not None and existing is not route:
            msg = f"Route name {name!r} is already used by {existing!r}"
            raise ConfigurationError(msg)
        self._named_routes[name] = route

    def add_middleware(self, middleware: MiddlewareRef) -> None:
        """Add a global middleware. Global middleware runs before route middleware."""
        self._check_not_frozen()
        self._middleware.append(middleware)

    def alias_middleware(self, name: str, middleware: MiddlewareRef) -> None:
        """Make *middleware* available under a string alias."""
        self._check_not_frozen()
        self.middleware_registry.register(name, middleware)

    def fallback(self, handler: Handler) -> Handler:
        """Set the handler used when no route matches. Last call wins.

        Returns *handler*, so it also works as a decorator.
        """
        self._check_not_frozen()
        self._fallback = normalize_handler(handler, (), self.resolver)
        return handler

    def controller(
        self,
        cls: type | None = None,
        *,
        name: str | None = None,
        namespace: str | None = None,
    ) -> Any:
        """Register a controller class for ``"Controller@method"`` handlers.

        Works bare or as a decorator::

            router.controller(UserController)

            @router.controller(namespace="app.controllers")
            class AdminController: ...
        """
        if cls is not None:
            return self.resolver.register(cls, name, namespace=namespace)

        def decorator(target: type) -> type:
            return self.resolver.register(target, name, namespace=namespace)

        return decorator

    # -- Introspection --

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes in match order."""
        return tuple(self._routes)

    @property
    def named_routes(self) -> Mapping[str, Route]:
        """Read-only view of the name → route index."""
        return MappingProxyType(self._named_routes)

    @property
    def middleware(self) -> tuple[MiddlewareRef, ...]:
        """Global middleware, outermost first."""
        return tuple(self._middleware)

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- Reverse routing --

    def url_for(
        self,
        name: str,
        params: Mapping[str, Any] | None = None,
        /,
        **kwargs: Any,
    ) -> str | None:
        """Build the URL of a named route, or None if the name is unknown.

        Every placeholder needs a value. Values are percent-encoded unless
        ``RouterConfig.quote_url_params`` is False; keys that are not
        placeholders become the query string.

        Raises:
            URLBuildError: a placeholder has no value.
        """
        route = self._named_routes.get(name)
        if route is None:
            return None
        values = {**(params or {}), **kwargs}
        url, missing = route.compiled.build(values, quote_values=self.config.quote_url_params)
        if missing:
            raise URLBuildError(name, missing)
        return url

    # -- Dispatch --

    def find(self, request: Request) -> Route | None:
        """Return the first route matching *request*, in registration order."""
        for route in self._routes:
            if route.matches(request):
                return route
        return None

    def dispatch(self, request: Request) -> Response:
        """Route *request* and produce exactly one Response.

        ``HTTPError`` raised by middleware or handlers becomes a response
        with that status; any other exception propagates to the caller.
        """
        self._ensure_frozen()

        route = self.find(request)
        if route is None:
            return self._no_match(request)

        logger.debug("%s %s matched %r", request.method, request.path, route)

        def run_route(req: Request) -> Response:
            return route.run(req, self.middleware_registry)

        pipeline = build_pipeline(self._middleware, run_route, registry=self.middleware_registry)
        try:
            return pipeline(request)
        except HTTPError as exc:
            logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            return error_response(exc)

    def _no_match(self, request: Request) -> Response:
        if self._fallback is None:
            logger.debug("No route for %s %s", request.method, request.path)
            return Response(
                body=self.config.not_found_body,
                status=404,
                content_type="text/plain; charset=utf-8",
            )

        logger.debug("No route for %s %s, using fallback", request.method, request.path)
        try:
            return negotiate(self._fallback(request))
        except HTTPError as exc:
            return error_response(exc)

    # -- Lifecycle --

    def validate(self) -> None:
        """Eagerly check string handlers and middleware aliases.

        Raises ``ResolutionError``/``ConfigurationError`` for the first
        handler that cannot be resolved, so a bad table aborts startup.
        """
        for ref in self._middleware:
            if isinstance(ref, str) and ref not in self.middleware_registry:
                msg = f"Unknown global middleware alias {ref!r}"
                raise ConfigurationError(msg)

        for route in self._routes:
            for handler in _string_handlers(route.handler):
                self.resolver.check(handler)
            for ref in route.middlewares:
                if isinstance(ref, str) and ref not in self.middleware_registry:
                    msg = f"Unknown middleware alias {ref!r} on {route!r}"
                    raise ConfigurationError(msg)

    def freeze(self) -> None:
        """Make the route table read-only. Idempotent and thread-safe."""
        self._ensure_frozen()

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            if self.config.strict:
                self.validate()
            self._frozen = True
            logger.debug(
                "Router frozen with %d routes (%d named)",
                len(self._routes),
                len(self._named_routes),
            )

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the router after it has started dispatching requests. "
                "Register routes, middleware, and fallbacks before the first dispatch."
            )
            raise RuntimeError(msg)

    def __repr__(self) -> str:
        return f"<Router routes={len(self._routes)} named={len(self._named_routes)}>"


def _string_handlers(handler: Handler) -> tuple[str, ...]:
    if isinstance(handler, str):
        return (handler,)
    if isinstance(handler, (tuple, list)) and len(handler) == 2 and isinstance(handler[0], str):
        return (f"{handler[0]}@{handler[1]}",)
    return ()
