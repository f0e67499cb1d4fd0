"""Middleware protocol and Next type alias.

A middleware is anything matching one of::

    def my_mw(request: Request, next: Next) -> Response: ...

    class MyMiddleware:
        def handle(self, request: Request, next: Next) -> Response: ...

No base class required. The router checks the shape, not the lineage.
Classes are instantiated fresh for every request; functions and
instances are shared.

``next`` always returns a ``Response``: whatever the inner stage
returned has already been negotiated, so middleware can post-process
with ``.with_header()`` / ``.with_status()``. A middleware may itself
return any value the router knows how to negotiate (``str``, ``dict``,
``Response``...).
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeAlias, runtime_checkable

from turnpike.http.request import Request
from turnpike.http.response import Response

# The next stage in the middleware chain
Next: TypeAlias = Callable[[Request], Response]


@runtime_checkable
class Middleware(Protocol):
    """Protocol for class-based turnpike middleware.

    Function middleware is accepted too::

        # Function middleware
        def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RequireToken:
            def handle(self, request: Request, next: Next) -> Any:
                if not request.header("authorization"):
                    return Response("Unauthorized", status=401)
                return next(request)
    """

    def handle(self, request: Request, next: Next) -> Any: ...
