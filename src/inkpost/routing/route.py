"""Route, RouteMatch, and the closed set of handler variants.

A route's handler is always one of:

- ``FunctionHandler`` — a callable registered directly
- ``ControllerHandler`` — a ``(controller, action)`` pair; the controller is
  a class or a key in the app's ``ControllerRegistry``
- ``InvalidHandler`` — anything else; resolving it fails with a 500

``as_handler()`` turns whatever was passed at registration into one of
these, so the router never branches on the runtime shape of a handler.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from inkpost.errors import HandlerResolutionError

if TYPE_CHECKING:
    from inkpost.middleware.protocol import Middleware
    from inkpost.routing.controllers import ControllerRegistry

PLACEHOLDER = re.compile(r"\{([a-zA-Z0-9_]+)\}")


@dataclass(frozen=True, slots=True)
class FunctionHandler:
    """A plain function (or any callable) handler."""

    func: Callable[..., Any]

    def resolve(self, controllers: ControllerRegistry) -> Callable[..., Any]:
        return self.func

    def describe(self) -> str:
        return getattr(self.func, "__qualname__", repr(self.func))


@dataclass(frozen=True, slots=True)
class ControllerHandler:
    """A controller action: instantiate *controller*, call *action*.

    The controller is default-constructed for every dispatch.
    """

    controller: type | str
    action: str

    def resolve(self, controllers: ControllerRegistry) -> Callable[..., Any]:
        if isinstance(self.controller, str):
            instance = controllers.create(self.controller)
            name = self.controller
        else:
            instance = self.controller()
            name = self.controller.__name__

        method = getattr(instance, self.action, None)
        if method is None or not callable(method):
            msg = f"Method {self.action} not found in controller {name}."
            raise HandlerResolutionError(msg)
        return method

    def describe(self) -> str:
        name = self.controller if isinstance(self.controller, str) else self.controller.__name__
        return f"{name}.{self.action}"


@dataclass(frozen=True, slots=True)
class InvalidHandler:
    """A handler value of an unsupported shape, kept so dispatch can report it."""

    value: Any

    def resolve(self, controllers: ControllerRegistry) -> Callable[..., Any]:
        raise HandlerResolutionError("Invalid route handler configured.")

    def describe(self) -> str:
        return f"<invalid {self.value!r}>"


type Handler = FunctionHandler | ControllerHandler | InvalidHandler


def as_handler(value: Any) -> Handler:
    """Normalize a registration-time handler value into a handler variant."""
    if isinstance(value, FunctionHandler | ControllerHandler | InvalidHandler):
        return value
    if callable(value) and not isinstance(value, type):
        return FunctionHandler(value)
    if (
        isinstance(value, Sequence)
        and not isinstance(value, str)
        and len(value) == 2
        and isinstance(value[0], type | str)
        and isinstance(value[1], str)
    ):
        return ControllerHandler(value[0], value[1])
    return InvalidHandler(value)


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``pattern`` is already normalized (one leading slash, no trailing
    slash). ``regex`` and ``param_names`` are derived from it once, at
    registration.
    """

    method: str
    pattern: str
    handler: Handler
    regex: re.Pattern[str]
    param_names: tuple[str, ...] = ()
    middleware: tuple[Middleware, ...] = ()

    @classmethod
    def create(
        cls,
        method: str,
        pattern: str,
        handler: Any,
        middleware: Sequence[Middleware] = (),
    ) -> Route:
        """Build a route, normalizing the pattern and compiling its regex."""
        pattern = normalize_path(pattern)
        return cls(
            method=method.upper(),
            pattern=pattern,
            handler=as_handler(handler),
            middleware=tuple(middleware),
            regex=compile_pattern(pattern),
            param_names=tuple(PLACEHOLDER.findall(pattern)),
        )


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``params`` preserves the order placeholders appear in the pattern.
    """

    route: Route
    params: dict[str, str]


def normalize_path(path: str) -> str:
    """Return *path* with exactly one leading slash and no trailing slash.

    Examples::

        "posts/{slug}/"  -> "/posts/{slug}"
        ""               -> "/"
    """
    return "/" + path.strip("/")


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a route pattern into an anchored regex.

    ``{name}`` becomes a group matching one or more non-slash characters;
    literal text is escaped. Example::

        "/users/{id}" -> ^/users/([^/]+)$
    """
    parts: list[str] = []
    pos = 0
    for m in PLACEHOLDER.finditer(pattern):
        parts.append(re.escape(pattern[pos : m.start()]))
        parts.append("([^/]+)")
        pos = m.end()
    parts.append(re.escape(pattern[pos:]))
    return re.compile("^" + "".join(parts) + "$")
