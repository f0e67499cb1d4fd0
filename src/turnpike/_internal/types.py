"""Shared type aliases used across turnpike modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler as registered: a callable, a (class, method) pair,
# or a "Controller@method" string
Handler: TypeAlias = Callable[..., Any] | tuple[Any, str] | list[Any] | str

# Handler after normalization, always called with the request only
Endpoint: TypeAlias = Callable[[Any], Any]

# Middleware reference as registered: function, instance, class, or alias
MiddlewareRef: TypeAlias = Callable[..., Any] | type | str | object
