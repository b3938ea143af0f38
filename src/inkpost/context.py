"""Request-scoped context via ContextVar.

``request_var`` holds the current ``Request`` for this task. The pipeline
sets it before dispatch and the router re-binds it with the matched path
parameters while the handler runs. Handlers receive path parameters
positionally, so this is how they reach headers, cookies, or the body.
"""

from contextvars import ContextVar

from inkpost.http.request import Request

request_var: ContextVar[Request] = ContextVar("inkpost_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()
