"""Built-in middleware: request logging and header guards."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from turnpike.http.request import Request
from turnpike.http.response import Response
from turnpike.middleware.protocol import Next

logger = logging.getLogger("turnpike.middleware")


class RequestLogger:
    """Log one line per request once the inner stages have answered.

    Usage::

        router.add_middleware(RequestLogger())
    """

    __slots__ = ("level", "log")

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.log = log or logger
        self.level = level

    def handle(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        response = next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        self.log.log(
            self.level,
            "%s %s -> %d (%.1fms)",
            request.method,
            request.path,
            response.status,
            elapsed_ms,
        )
        return response


@dataclass(frozen=True, slots=True)
class HeaderGuardConfig:
    """Configuration for ``HeaderGuard``.

    ``attribute`` names the request attribute that receives the loaded
    value; ``load`` turns the raw header into that value (returning None
    rejects the request).
    """

    header: str = "authorization"
    attribute: str | None = None
    load: Callable[[str], Any] | None = None
    status: int = 401
    body: str = "Unauthorized"


class HeaderGuard:
    """Short-circuit requests that lack a header.

    When the header is present the (optionally loaded) value is stored as
    a request attribute and the chain continues::

        router.add_middleware(HeaderGuard(HeaderGuardConfig(
            attribute="user",
            load=lambda token: users.get(token),
        )))
    """

    __slots__ = ("config",)

    def __init__(self, config: HeaderGuardConfig | None = None) -> None:
        self.config = config or HeaderGuardConfig()

    def _reject(self) -> Response:
        return Response(body=self.config.body, status=self.config.status)

    def handle(self, request: Request, next: Next) -> Response:
        cfg = self.config
        raw = request.header(cfg.header)
        if not raw:
            return self._reject()

        value: Any = raw
        if cfg.load is not None:
            value = cfg.load(raw)
            if value is None:
                return self._reject()

        if cfg.attribute:
            request.set(cfg.attribute, value)
        return next(request)
