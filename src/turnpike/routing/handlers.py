"""Handler resolution — every handler shape becomes ``(request) -> result``.

Three shapes are accepted at registration:

- a callable (function, lambda, callable object)
- a ``(ControllerClass, "method")`` pair
- a ``"Controller@method"`` string, looked up in a ``ControllerResolver``

Callables are inspected once, when the route is registered. Parameters
named ``request`` (or annotated ``Request``) receive the request;
parameters named after route placeholders receive their values; any
other first parameter receives the request. Controllers are instantiated
fresh for every call.
"""

import importlib
import inspect
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from turnpike._internal.types import Endpoint, Handler
from turnpike.errors import (
    ConfigurationError,
    ControllerMethodNotFound,
    ControllerNotFound,
    InvalidHandlerFormat,
)
from turnpike.http.request import Request

SEPARATOR = "@"


class ControllerResolver:
    """Registered-handler table for ``"Controller@method"`` strings.

    Controllers are registered under an identifier (the class name by
    default, optionally qualified by a dotted namespace)::

        resolver = ControllerResolver()
        resolver.register(UserController, namespace="app.controllers")
        instance, method = resolver.resolve("app.controllers.UserController@show")

    Identifiers that are not registered but look like a dotted import path
    (``"myapp.controllers.UserController"``) are imported as a fallback.
    """

    __slots__ = ("_controllers",)

    def __init__(self, controllers: Mapping[str, type] | None = None) -> None:
        self._controllers: dict[str, type] = dict(controllers or {})

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._controllers

    def __len__(self) -> int:
        return len(self._controllers)

    @property
    def identifiers(self) -> tuple[str, ...]:
        """Registered controller identifiers, in registration order."""
        return tuple(self._controllers)

    def register(
        self,
        controller: type,
        name: str | None = None,
        *,
        namespace: str | None = None,
    ) -> type:
        """Register *controller* and return it (usable as a class decorator)."""
        if not isinstance(controller, type):
            msg = f"Controllers must be classes, got {controller!r}"
            raise ConfigurationError(msg)
        identifier = name or controller.__name__
        if namespace:
            identifier = f"{namespace.rstrip('.')}.{identifier}"
        existing = self._controllers.get(identifier)
        if existing is not None and existing is not controller:
            msg = f"Controller identifier {identifier!r} is already registered to {existing!r}"
            raise ConfigurationError(msg)
        self._controllers[identifier] = controller
        return controller

    @staticmethod
    def split(handler: str) -> tuple[str, str]:
        """Split ``"Controller@method"`` into its two halves.

        Raises ``InvalidHandlerFormat`` when the separator or either side
        is missing.
        """
        identifier, sep, method = handler.partition(SEPARATOR)
        if not sep or not identifier or not method:
            msg = f"Invalid controller handler {handler!r}, expected 'Controller@method'"
            raise InvalidHandlerFormat(msg)
        return identifier, method

    def lookup(self, identifier: str) -> type:
        """Return the controller class for *identifier*.

        Raises ``ControllerNotFound`` if it is neither registered nor importable.
        """
        controller = self._controllers.get(identifier)
        if controller is not None:
            return controller

        module_name, _, class_name = identifier.rpartition(".")
        if not module_name:
            raise ControllerNotFound(identifier)
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise ControllerNotFound(identifier) from exc
        controller = getattr(module, class_name, None)
        if not isinstance(controller, type):
            raise ControllerNotFound(identifier)
        return controller

    def check(self, handler: str) -> tuple[type, str]:
        """Validate *handler* without instantiating anything."""
        identifier, method = self.split(handler)
        controller = self.lookup(identifier)
        if not callable(getattr(controller, method, None)):
            raise ControllerMethodNotFound(identifier, method)
        return controller, method

    def resolve(self, handler: str) -> tuple[object, str]:
        """Resolve *handler* into ``(fresh instance, method name)``."""
        controller, method = self.check(handler)
        return controller(), method


# ---------------------------------------------------------------------------
# Argument planning
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _Arg:
    """One argument to pass: the request (placeholder=None) or a route param."""

    name: str
    placeholder: str | None
    positional: bool


def _signature(func: Callable[..., Any]) -> inspect.Signature | None:
    try:
        return inspect.signature(func, eval_str=True)
    except NameError:
        return inspect.signature(func)
    except (TypeError, ValueError):
        # Builtins and C callables without introspectable signatures
        return None


def _is_request_param(param: inspect.Parameter) -> bool:
    return param.name == "request" or param.annotation is Request or param.annotation == "Request"


def plan_arguments(
    func: Callable[..., Any],
    placeholders: Iterable[str] = (),
    *,
    skip_first: bool = False,
) -> tuple[_Arg, ...]:
    """Decide, once, how *func* is called for a request.

    Raises:
        ConfigurationError: a required parameter is neither the request
            nor a route placeholder.
    """
    sig = _signature(func)
    if sig is None:
        return (_Arg("request", None, positional=True),)

    names = set(placeholders)
    params = list(sig.parameters.values())
    if skip_first:
        params = params[1:]

    plan: list[_Arg] = []
    takes_varargs = False
    for index, param in enumerate(params):
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            takes_varargs = True
            continue
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            continue
        positional = param.kind is inspect.Parameter.POSITIONAL_ONLY
        if _is_request_param(param):
            plan.append(_Arg(param.name, None, positional))
        elif param.name in names:
            plan.append(_Arg(param.name, param.name, positional))
        elif index == 0:
            plan.append(_Arg(param.name, None, positional))
        elif param.default is inspect.Parameter.empty:
            qualname = getattr(func, "__qualname__", repr(func))
            msg = (
                f"Handler {qualname} requires parameter {param.name!r}, which is "
                f"neither the request nor a route placeholder {sorted(names)}"
            )
            raise ConfigurationError(msg)

    if takes_varargs and not plan:
        plan.append(_Arg("request", None, positional=True))
    return tuple(plan)


def call_with_plan(func: Callable[..., Any], plan: tuple[_Arg, ...], request: Request) -> Any:
    """Call *func* with the arguments *plan* asks for."""
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for arg in plan:
        value = request if arg.placeholder is None else request.route_params.get(arg.placeholder)
        if arg.positional:
            args.append(value)
        else:
            kwargs[arg.name] = value
    return func(*args, **kwargs)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------


def normalize_handler(
    handler: Handler,
    placeholders: Iterable[str] = (),
    resolver: ControllerResolver | None = None,
) -> Endpoint:
    """Turn any accepted handler shape into a ``(request) -> result`` callable.

    String handlers are format-checked here and resolved per call, so an
    unknown controller raises ``ResolutionError`` when the route runs.
    """
    placeholders = tuple(placeholders)
    resolver = resolver if resolver is not None else ControllerResolver()

    if isinstance(handler, str):
        resolver.split(handler)
        return _string_endpoint(handler, placeholders, resolver)

    if isinstance(handler, (tuple, list)):
        return _pair_endpoint(handler, placeholders, resolver)

    if callable(handler):
        plan = plan_arguments(handler, placeholders)

        def endpoint(request: Request) -> Any:
            return call_with_plan(handler, plan, request)

        endpoint.__wrapped__ = handler  # type: ignore[attr-defined]
        return endpoint

    msg = f"Invalid route handler {handler!r}"
    raise ConfigurationError(msg)


def _string_endpoint(
    handler: str,
    placeholders: tuple[str, ...],
    resolver: ControllerResolver,
) -> Endpoint:
    def endpoint(request: Request) -> Any:
        instance, method = resolver.resolve(handler)
        bound = getattr(instance, method)
        return call_with_plan(bound, plan_arguments(bound, placeholders), request)

    return endpoint


def _pair_endpoint(
    handler: tuple[Any, str] | list[Any],
    placeholders: tuple[str, ...],
    resolver: ControllerResolver,
) -> Endpoint:
    if len(handler) != 2 or not isinstance(handler[1], str):
        msg = f"Controller handler pairs must be (class, 'method'), got {handler!r}"
        raise ConfigurationError(msg)

    target, method = handler
    if isinstance(target, str):
        return _string_endpoint(f"{target}{SEPARATOR}{method}", placeholders, resolver)
    if not isinstance(target, type):
        msg = f"Controller handler pairs must name a class, got {target!r}"
        raise ConfigurationError(msg)

    func = getattr(target, method, None)
    if not callable(func):
        raise ControllerMethodNotFound(target.__qualname__, method)

    # Plain functions are looked up unbound; drop ``self`` from the plan
    is_instance_method = inspect.isfunction(inspect.getattr_static(target, method))
    plan = plan_arguments(func, placeholders, skip_first=is_instance_method)

    def endpoint(request: Request) -> Any:
        return call_with_plan(getattr(target(), method), plan, request)

    return endpoint
