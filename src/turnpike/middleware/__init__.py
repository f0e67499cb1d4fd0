"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(request: Request, next: Next) -> Response

or any object (or class) with a ``handle(request, next)`` method.

Built-in middleware:
    HeaderGuard -- Reject requests without a header, store its loaded value
    RequestLogger -- One log line per request with status and timing
"""

from turnpike.middleware.builtin import HeaderGuard, HeaderGuardConfig, RequestLogger
from turnpike.middleware.pipeline import MiddlewareRegistry, build_pipeline
from turnpike.middleware.protocol import Middleware, Next

__all__ = [
    "HeaderGuard",
    "HeaderGuardConfig",
    "Middleware",
    "MiddlewareRegistry",
    "Next",
    "RequestLogger",
    "build_pipeline",
]
