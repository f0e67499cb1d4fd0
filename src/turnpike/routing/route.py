"""Route — one registered (method, path template, handler) entry."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from turnpike._internal.types import Handler, MiddlewareRef
from turnpike.errors import ConfigurationError
from turnpike.http.request import Request
from turnpike.http.response import Response
from turnpike.middleware.pipeline import MiddlewareRegistry, build_pipeline
from turnpike.routing.handlers import ControllerResolver, normalize_handler
from turnpike.routing.pattern import CompiledPath, compile_path

HTTP_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "CONNECT", "TRACE"}
)


class Route:
    """A single route: method, path template, handler and route middleware.

    The path template is compiled once, at construction. After that only
    ``middleware()`` (append) and ``name()`` (set once) change the route,
    and both return the route so they chain::

        router.get("/profile/{id}", show).middleware([Auth]).name("profile.show")

    Attributes:
        method: Uppercase HTTP method.
        path: Raw path template, e.g. ``"/users/{id}"``.
        handler: The handler as registered (callable, pair, or string).
        compiled: Anchored matcher and ordered placeholder names.
    """

    __slots__ = (
        "_endpoint",
        "_middleware",
        "_name",
        "_on_change",
        "_on_name",
        "_registry",
        "compiled",
        "handler",
        "method",
        "path",
    )

    def __init__(
        self,
        method: str,
        path: str,
        handler: Handler,
        middleware: Iterable[MiddlewareRef] = (),
        *,
        resolver: ControllerResolver | None = None,
        registry: MiddlewareRegistry | None = None,
        on_name: Callable[[Route, str], None] | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self.method = method.upper()
        if self.method not in HTTP_METHODS:
            msg = f"Invalid HTTP method {method!r} for route {path!r}"
            raise ConfigurationError(msg)

        self.path = path
        self.compiled: CompiledPath = compile_path(path)
        self.handler = handler
        self._endpoint = normalize_handler(handler, self.compiled.param_names, resolver)
        self._middleware: list[MiddlewareRef] = list(middleware)
        self._name: str | None = None
        self._registry = registry
        self._on_name = on_name
        self._on_change = on_change

    # -- Builder calls --

    def middleware(self, middleware: Iterable[MiddlewareRef] | MiddlewareRef) -> Route:
        """Append route-level middleware (a single reference or an iterable of them).

        Strings, classes and callables are single references; any other
        iterable (list, tuple, generator) is expanded in order.
        """
        if self._on_change is not None:
            self._on_change()
        if isinstance(middleware, (str, type)) or callable(middleware):
            self._middleware.append(middleware)
        elif isinstance(middleware, Iterable):
            self._middleware.extend(middleware)
        else:
            self._middleware.append(middleware)
        return self

    def name(self, name: str) -> Route:
        """Name the route for reverse URL generation. Can be set once."""
        if not name:
            msg = f"Route name for {self!r} must be a non-empty string"
            raise ConfigurationError(msg)
        if self._name is not None:
            msg = f"Route {self!r} is already named {self._name!r}"
            raise ConfigurationError(msg)
        if self._on_name is not None:
            self._on_name(self, name)
        self._name = name
        return self

    # -- Introspection --

    @property
    def route_name(self) -> str | None:
        """The route's name, or None."""
        return self._name

    @property
    def middlewares(self) -> tuple[MiddlewareRef, ...]:
        """Route-level middleware, outermost first."""
        return tuple(self._middleware)

    @property
    def param_names(self) -> tuple[str, ...]:
        """Placeholder names in template order."""
        return self.compiled.param_names

    # -- Matching --

    def matches(self, request: Request) -> bool:
        """True if the method is equal and the template matches the whole path."""
        if request.method.upper() != self.method:
            return False
        return self.compiled.regex.fullmatch(request.path) is not None

    def extract_params(self, request: Request) -> None:
        """Install this route's placeholder values into ``request.route_params``.

        Only meaningful after ``matches()`` returned True for the same
        request; otherwise the request is left untouched.
        """
        params = self.compiled.match(request.path)
        if params is not None:
            request.set_route_params(params)

    # -- Execution --

    def run(self, request: Request, registry: MiddlewareRegistry | None = None) -> Response:
        """Extract params, then run route middleware around the handler."""
        self.extract_params(request)
        pipeline = build_pipeline(
            self._middleware,
            self._endpoint,
            registry=registry if registry is not None else self._registry,
        )
        return pipeline(request)

    def __repr__(self) -> str:
        name_str = f" name={self._name!r}" if self._name else ""
        return f"<Route {self.method} {self.path}{name_str}>"
