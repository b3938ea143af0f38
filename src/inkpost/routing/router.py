"""Regex router with insertion-ordered matching.

Routes live in a per-method table keyed by normalized pattern. Matching
walks the table in registration order, so when two patterns match the
same path (``/posts/new`` and ``/posts/{slug}``) the one declared first
wins.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from inkpost._internal.invoke import invoke
from inkpost.context import request_var
from inkpost.errors import NotFound
from inkpost.http.request import Request
from inkpost.http.response import Response
from inkpost.middleware.protocol import chain
from inkpost.routing.controllers import ControllerRegistry
from inkpost.routing.route import Route, RouteMatch, normalize_path

if TYPE_CHECKING:
    from inkpost.middleware.protocol import Middleware

logger = logging.getLogger("inkpost.routing")


class Router:
    """Method + path-pattern router.

    Usage::

        router = Router()
        router.get("/user/{id}", show_user)
        router.get("/posts/{slug}", ("PostController", "show"))

        match = router.match("GET", "/user/42")
        response = await router.dispatch("GET", "/user/42?tab=posts")
    """

    __slots__ = ("_controllers", "_routes")

    def __init__(self, controllers: ControllerRegistry | None = None) -> None:
        self._routes: dict[str, dict[str, Route]] = {}
        self._controllers = controllers if controllers is not None else ControllerRegistry()

    @property
    def controllers(self) -> ControllerRegistry:
        return self._controllers

    # -- Registration --

    def add_route(
        self,
        method: str,
        pattern: str,
        handler: Any,
        middleware: Sequence[Middleware] = (),
    ) -> Route:
        """Register *handler* for *method* and *pattern*.

        Re-registering the same method and pattern replaces the earlier
        route without error.
        """
        route = Route.create(method, pattern, handler, middleware)
        self._routes.setdefault(route.method, {})[route.pattern] = route
        return route

    def get(self, pattern: str, handler: Any, middleware: Sequence[Middleware] = ()) -> Route:
        return self.add_route("GET", pattern, handler, middleware)

    def post(self, pattern: str, handler: Any, middleware: Sequence[Middleware] = ()) -> Route:
        return self.add_route("POST", pattern, handler, middleware)

    def put(self, pattern: str, handler: Any, middleware: Sequence[Middleware] = ()) -> Route:
        return self.add_route("PUT", pattern, handler, middleware)

    def patch(self, pattern: str, handler: Any, middleware: Sequence[Middleware] = ()) -> Route:
        return self.add_route("PATCH", pattern, handler, middleware)

    def delete(self, pattern: str, handler: Any, middleware: Sequence[Middleware] = ()) -> Route:
        return self.add_route("DELETE", pattern, handler, middleware)

    @property
    def routes(self) -> list[Route]:
        """All registered routes, grouped by method in registration order."""
        return [route for table in self._routes.values() for route in table.values()]

    # -- Matching --

    def match(self, method: str, uri: str) -> RouteMatch | None:
        """Find the first route for *method* whose pattern matches *uri*.

        Returns ``None`` when the method has no routes or nothing matches.
        """
        table = self._routes.get(method.upper())
        if not table:
            return None

        path = normalize_path(uri)
        for route in table.values():
            m = route.regex.match(path)
            if m is not None:
                return RouteMatch(route=route, params=dict(zip(route.param_names, m.groups())))
        return None

    # -- Dispatch --

    async def dispatch(self, method: str, uri: str, request: Request | None = None) -> Response:
        """Match *uri* and run the route's middleware and handler.

        The query string is ignored for matching. Path parameters are
        passed to the handler positionally, in the order they appear in
        the pattern.

        Raises ``NotFound`` if no route matches and
        ``HandlerResolutionError`` if the matched handler can't be resolved.
        """
        path = uri.split("?", 1)[0].rstrip("/") or "/"

        match = self.match(method, path)
        if match is None:
            msg = f"No route matches {method.upper()} {path!r}"
            raise NotFound(msg)

        if request is None:
            request = Request.build(method, uri)
        request = request.with_path_params(match.params)

        route = match.route
        args = tuple(match.params.values())
        logger.debug("%s %s -> %s", method.upper(), path, route.handler.describe())

        async def endpoint(req: Request) -> Response:
            token = request_var.set(req)
            try:
                func = route.handler.resolve(self._controllers)
                return to_response(await invoke(func, *args))
            finally:
                request_var.reset(token)

        handler = chain(route.middleware, endpoint) if route.middleware else endpoint
        return await handler(request)


def to_response(result: Any) -> Response:
    """Convert a handler return value into a ``Response``."""
    if isinstance(result, Response):
        return result
    if result is None:
        return Response()
    if isinstance(result, str | bytes):
        return Response(body=result)
    msg = f"Handler returned unsupported type {type(result).__name__}"
    raise TypeError(msg)


def describe_routes(router: Router) -> list[tuple[str, str, str]]:
    """``(method, pattern, handler)`` rows for route listings."""
    return [(r.method, r.pattern, r.handler.describe()) for r in router.routes]


