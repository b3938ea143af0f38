"""Per-request pipeline between the ASGI server and the router.

Builds the ``Request``, publishes it (and the database) through context
variables, runs the app middleware around ``Router.dispatch``, turns
errors into pages, and writes the ``Response`` back to the server.
"""

from inkpost._internal.asgi import Receive, Scope, Send
from inkpost.context import request_var
from inkpost.data.database import Database, _db_var
from inkpost.errors import HTTPError
from inkpost.http.request import Request
from inkpost.http.response import Response
from inkpost.middleware.protocol import Middleware, chain
from inkpost.routing.router import Router
from inkpost.server.errors import ErrorHandlers, handle_http_error, handle_internal_error

# Informational, 204 and 304 responses never carry a body.
_EMPTY_STATUSES = frozenset({204, 304})


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Middleware, ...],
    error_handlers: ErrorHandlers,
    debug: bool,
    db: Database | None = None,
) -> None:
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    request_token = request_var.set(request)
    db_token = _db_var.set(db) if db is not None else None

    async def dispatch(req: Request) -> Response:
        return await router.dispatch(req.method, req.path, req)

    try:
        response = await chain(middleware, dispatch)(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        if db_token is not None:
            _db_var.reset(db_token)
        request_var.reset(request_token)

    await send_response(response, send)


async def send_response(response: Response, send: Send) -> None:
    """Write *response* as one ``http.response.start`` and one body message."""
    silent = response.status < 200 or response.status in _EMPTY_STATUSES
    body = b"" if silent else response.encode()

    headers = [
        (b"content-type", response.content_type.encode("latin-1")),
        (b"content-length", str(len(body)).encode("latin-1")),
    ]
    headers += [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in response.headers]
    headers += [(b"set-cookie", str(cookie).encode("latin-1")) for cookie in response.cookies]

    await send({"type": "http.response.start", "status": response.status, "headers": headers})
    await send({"type": "http.response.body", "body": body})
