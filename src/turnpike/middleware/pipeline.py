"""Middleware pipeline — onion composition around a terminal handler.

``build_pipeline([m1, m2, m3], endpoint)`` folds from the last middleware
to the first, so calling the result runs m1 → m2 → m3 → endpoint, and
the code after each ``next()`` call runs in reverse order on the way out.

References are resolved lazily, when their stage runs:

- a class is instantiated for every request
- a string is looked up in the ``MiddlewareRegistry``
- anything else is used as-is

The resolved object must expose ``handle(request, next)`` or be callable
as ``(request, next)``; otherwise ``MiddlewareContractError`` aborts the
dispatch.
"""

import inspect
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from turnpike._internal.types import MiddlewareRef
from turnpike.errors import MiddlewareContractError
from turnpike.http.request import Request
from turnpike.http.response import Response
from turnpike.middleware.protocol import Next
from turnpike.negotiation import negotiate


class MiddlewareRegistry:
    """Aliases for middleware references (``"auth"`` → ``AuthMiddleware``)."""

    __slots__ = ("_aliases",)

    def __init__(self, aliases: Mapping[str, MiddlewareRef] | None = None) -> None:
        self._aliases: dict[str, MiddlewareRef] = dict(aliases or {})

    def __contains__(self, name: object) -> bool:
        return name in self._aliases

    def register(self, name: str, middleware: MiddlewareRef) -> None:
        """Register *middleware* under *name*; re-registering replaces it."""
        if isinstance(middleware, str):
            msg = f"Middleware alias {name!r} must point at a middleware, not another alias"
            raise MiddlewareContractError(msg)
        self._aliases[name] = middleware

    def lookup(self, name: str) -> MiddlewareRef:
        """Return the reference registered under *name*."""
        try:
            return self._aliases[name]
        except KeyError:
            msg = f"Unknown middleware alias {name!r}"
            raise MiddlewareContractError(msg) from None


def describe(ref: MiddlewareRef) -> str:
    """Human-readable name for a middleware reference (for logs and errors)."""
    if isinstance(ref, str):
        return ref
    return getattr(ref, "__qualname__", None) or type(ref).__qualname__


def resolve_middleware(
    ref: MiddlewareRef,
    registry: MiddlewareRegistry | None = None,
) -> Callable[[Request, Next], Any]:
    """Turn a reference into a ``(request, next)`` callable for one request."""
    target = ref
    if isinstance(target, str):
        if registry is None:
            msg = f"Middleware alias {target!r} used without a registry"
            raise MiddlewareContractError(msg)
        target = registry.lookup(target)

    if isinstance(target, type):
        _check_no_arg_constructor(target, ref)
        target = target()

    handle = getattr(target, "handle", None)
    if callable(handle):
        return handle
    if callable(target):
        return target

    msg = f"Middleware {describe(ref)} does not implement handle(request, next)"
    raise MiddlewareContractError(msg)


def _check_no_arg_constructor(cls: type, ref: MiddlewareRef) -> None:
    try:
        sig = inspect.signature(cls)
    except (TypeError, ValueError):
        # No introspectable signature; let the call itself decide
        return
    try:
        sig.bind()
    except TypeError as exc:
        msg = f"Middleware class {describe(ref)} cannot be instantiated without arguments"
        raise MiddlewareContractError(msg) from exc


def build_pipeline(
    middleware: Iterable[MiddlewareRef],
    endpoint: Callable[[Request], Any],
    *,
    registry: MiddlewareRegistry | None = None,
) -> Next:
    """Wrap *endpoint* in *middleware*, first reference outermost.

    Every stage's return value is negotiated, so each ``next(request)``
    hands a ``Response`` back to the middleware that called it.
    """

    def terminal(request: Request) -> Response:
        return negotiate(endpoint(request))

    handler: Next = terminal
    for ref in reversed(list(middleware)):
        handler = _wrap(ref, handler, registry)
    return handler


def _wrap(ref: MiddlewareRef, inner: Next, registry: MiddlewareRegistry | None) -> Next:
    def stage(request: Request) -> Response:
        run = resolve_middleware(ref, registry)
        return negotiate(run(request, inner))

    return stage
