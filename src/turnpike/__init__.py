"""Turnpike — an in-process HTTP request router.

Maps a method + path to a handler, extracts path parameters, and runs
global and route middleware around the handler, onion style.

Basic usage::

    from turnpike import Request, Router

    router = Router()

    @router.fallback
    def missing():
        return "Nothing here"

    router.get("/users/{id}", lambda request, id: f"User {id}").name("users.show")

    with router.group(prefix="/admin", middleware=[RequireAdmin]) as admin:
        admin.get("/dashboard", "AdminController@dashboard")

    response = router.dispatch(Request.build("GET", "/users/42"))
    router.url_for("users.show", id=42)  # "/users/42"

Hosting under an ASGI server::

    from turnpike.server.asgi import ASGIAdapter
    app = ASGIAdapter(router)
"""

__version__ = "0.1.0"
__all__ = [
    "ASGIAdapter",
    "ConfigurationError",
    "ControllerResolver",
    "HTTPError",
    "Middleware",
    "MiddlewareContractError",
    "Next",
    "NotFound",
    "Request",
    "ResolutionError",
    "Response",
    "Route",
    "RouteGroup",
    "Router",
    "RouterConfig",
    "TurnpikeError",
    "URLBuildError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import turnpike`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from turnpike.routing.router import Router

        return Router

    if name == "Route":
        from turnpike.routing.route import Route

        return Route

    if name == "RouteGroup":
        from turnpike.routing.group import RouteGroup

        return RouteGroup

    if name == "ControllerResolver":
        from turnpike.routing.handlers import ControllerResolver

        return ControllerResolver

    if name == "RouterConfig":
        from turnpike.config import RouterConfig

        return RouterConfig

    if name == "Request":
        from turnpike.http.request import Request

        return Request

    if name == "Response":
        from turnpike.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from turnpike.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "ASGIAdapter":
        from turnpike.server.asgi import ASGIAdapter

        return ASGIAdapter

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MiddlewareContractError",
        "NotFound",
        "ResolutionError",
        "TurnpikeError",
        "URLBuildError",
    ):
        from turnpike import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
