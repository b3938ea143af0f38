"""Error pages.

``HTTPError`` (404s, handler resolution failures, anything a handler or
middleware raises on purpose) and unexpected exceptions are both turned
into a ``Response`` here. Handlers registered with ``App.error`` win over
the built-in pages; they are looked up by exception type first, then by
status code.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from inkpost._internal.invoke import invoke
from inkpost.errors import HTTPError
from inkpost.http.request import Request
from inkpost.http.response import Response
from inkpost.routing.router import to_response

logger = logging.getLogger("inkpost.server")

NOT_FOUND_BODY = "<h1>404 Not Found</h1><p>The page you requested could not be found.</p>"
SERVER_ERROR_BODY = (
    "<h1>500 Internal Server Error</h1>"
    "<p>We are experiencing technical difficulties. Please try again later.</p>"
)

type ErrorHandlers = dict[int | type, Callable[..., Any]]


def server_error_body(detail: str, debug: bool) -> str:
    if not debug:
        return SERVER_ERROR_BODY
    return f"<h1>500 Internal Server Error</h1><p>{html.escape(detail)}</p>"


def _lookup(handlers: ErrorHandlers, exc: Exception, status: int) -> Callable[..., Any] | None:
    keys: list[int | type] = [*type(exc).__mro__, status]
    return next((handlers[key] for key in keys if key in handlers), None)


async def _run_user_handler(
    handler: Callable[..., Any], request: Request, exc: Exception, status: int
) -> Response:
    # Handlers take (), (request) or (request, exc).
    arity = len(inspect.signature(handler).parameters)
    response = to_response(await invoke(handler, *(request, exc)[: min(arity, 2)]))
    return response.with_status(status) if response.status == 200 else response


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    level = logging.ERROR if exc.status >= 500 else logging.DEBUG
    logger.log(level, "%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = _lookup(error_handlers, exc, exc.status)
    if handler is not None:
        return await _run_user_handler(handler, request, exc, exc.status)

    if exc.status == 404:
        body = NOT_FOUND_BODY
    elif exc.status >= 500:
        body = server_error_body(exc.detail or "Internal Server Error", debug)
    else:
        body = html.escape(exc.detail or f"Error {exc.status}")
    return Response(body=body, status=exc.status, headers=exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Unexpected exception: always logged with its traceback, shown only in debug."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = _lookup(error_handlers, exc, 500)
    if handler is not None:
        return await _run_user_handler(handler, request, exc, 500)

    detail = "".join(traceback.format_exception(exc)) if debug else ""
    return Response(body=server_error_body(detail, debug), status=500)
