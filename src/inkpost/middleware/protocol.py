"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The same shape is used for app-wide middleware
(``app.add_middleware``) and for per-route middleware
(``app.get(path, middleware=[...])``). A middleware rejects a request by
returning a response without calling ``next``.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from inkpost.http.request import Request
from inkpost.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for inkpost middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware
        class RequireHeader:
            async def __call__(self, request: Request, next: Next) -> Response:
                if "x-api-key" not in request.headers:
                    return Response("Forbidden", status=403)
                return await next(request)
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...


def chain(middleware: tuple[Middleware, ...], endpoint: Next) -> Next:
    """Wrap *endpoint* so *middleware* run in order, outermost first."""
    handler = endpoint
    for mw in reversed(middleware):
        outer = handler

        async def make_next(req: Request, _mw: Middleware = mw, _next: Next = outer) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler
