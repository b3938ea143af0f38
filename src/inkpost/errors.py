"""Inkpost exception hierarchy.

Shared across Router, App, the request pipeline, and middleware so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class InkpostError(Exception):
    """Base for all inkpost-specific errors."""


class ConfigurationError(InkpostError):
    """Raised when app configuration is invalid.

    Typically raised while loading the environment or building middleware
    at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(InkpostError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request method and path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class HandlerResolutionError(HTTPError):
    """500 — a route matched but its handler could not be resolved.

    Raised for unknown controllers, missing controller actions, and
    handlers of an unsupported shape. ``detail`` is only shown to the
    client in debug mode.
    """

    def __init__(self, detail: str = "Invalid route handler configured.") -> None:
        super().__init__(status=500, detail=detail)


# -- Data access --


class DataError(InkpostError):
    """A database gateway failure."""


class DriverNotInstalledError(DataError):
    """The URL names a driver whose package is missing."""


class ConnectionError(DataError):  # noqa: A001
    """The database could not be reached. Raised by ``Database.connect()``."""


class QueryError(DataError):
    """A statement failed. Returned inside ``Failure``; ``query()`` never raises it."""
