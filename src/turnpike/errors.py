"""Turnpike exception hierarchy.

Shared across Router, Route, the resolver, and middleware so every module
raises and catches the same types.
"""

from dataclasses import dataclass


class TurnpikeError(Exception):
    """Base for all turnpike-specific errors."""


class ConfigurationError(TurnpikeError):
    """Raised when a route table is configured incorrectly.

    Surfaces at registration time (malformed path templates, bad handler
    shapes, duplicate route names) so startup fails instead of a request.
    """


class InvalidHandlerFormat(ConfigurationError):
    """A string handler is not of the form ``"Controller@method"``."""


class ResolutionError(TurnpikeError):
    """A string-form handler could not be resolved to a callable target."""


class ControllerNotFound(ResolutionError):  # noqa: N818
    """The controller identifier is not registered and not importable."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Controller not found: {identifier!r}")


class ControllerMethodNotFound(ResolutionError):  # noqa: N818
    """The controller exists but has no callable method with that name."""

    def __init__(self, identifier: str, method: str) -> None:
        self.identifier = identifier
        self.method = method
        super().__init__(f"Controller method not defined: {identifier}@{method}")


class MiddlewareContractError(TurnpikeError):
    """A middleware reference does not implement ``(request, next)``.

    Detected lazily, when the stage is instantiated during dispatch.
    """


class URLBuildError(TurnpikeError, ValueError):
    """Reverse URL generation was missing values for placeholders."""

    def __init__(self, name: str, missing: tuple[str, ...]) -> None:
        self.name = name
        self.missing = missing
        joined = ", ".join(missing)
        super().__init__(f"Cannot build URL for route {name!r}: missing {joined}")


@dataclass(frozen=True, slots=True)
class HTTPError(TurnpikeError):
    """An error that maps directly to an HTTP status code.

    Raised by middleware or handlers. ``Router.dispatch`` catches these and
    turns them into a response with the same status, detail and headers.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — nothing handles the requested path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
