"""The request object handed to middleware, handlers and error handlers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl

from inkpost._internal.asgi import Receive
from inkpost.http.cookies import parse_cookies


async def _no_body() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


def decode_headers(raw: Iterable[tuple[bytes, bytes]]) -> dict[str, str]:
    """Lower-case header names and fold repeated headers into one value.

    Repeats are joined with ``", "``, except ``Cookie`` which uses ``"; "``.
    """
    headers: dict[str, str] = {}
    for name, value in raw:
        key = name.decode("latin-1").lower()
        text = value.decode("latin-1")
        if key in headers:
            text = headers[key] + ("; " if key == "cookie" else ", ") + text
        headers[key] = text
    return headers


def parse_query(query_string: str | bytes) -> dict[str, str]:
    """Parse a query string; the last value wins for repeated keys."""
    if isinstance(query_string, bytes):
        query_string = query_string.decode("utf-8", errors="replace")
    return dict(parse_qsl(query_string, keep_blank_values=True))


@dataclass(frozen=True, slots=True)
class Request:
    """An HTTP request as seen by the application.

    ``path`` has the ``APP_URL`` base path removed; the removed prefix is
    kept in ``root_path``. ``path_params`` is filled in once a route has
    matched.
    """

    method: str
    path: str
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    path_params: dict[str, str] = field(default_factory=dict)
    root_path: str = ""
    _receive: Receive = _no_body
    _body: list[bytes] = field(default_factory=list, repr=False, compare=False)

    async def body(self) -> bytes:
        """Read the whole body. The ASGI channel is drained only once."""
        if not self._body:
            chunks = []
            more = True
            while more:
                message = await self._receive()
                chunks.append(message.get("body", b""))
                more = message.get("more_body", False)
            self._body.append(b"".join(chunks))
        return self._body[0]

    async def form(self) -> dict[str, str]:
        """Decode an ``application/x-www-form-urlencoded`` body."""
        return parse_query(await self.body())

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        return replace(self, path_params=path_params)

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        headers = decode_headers(scope.get("headers", ()))
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            query=parse_query(scope.get("query_string", b"")),
            headers=headers,
            cookies=parse_cookies(headers.get("cookie", "")),
            root_path=scope.get("root_path", ""),
            _receive=receive,
        )

    @classmethod
    def build(cls, method: str, uri: str, *, headers: Mapping[str, str] | None = None) -> Request:
        """A body-less request for driving the router without a server."""
        path, _, query_string = uri.partition("?")
        lowered = {name.lower(): value for name, value in (headers or {}).items()}
        return cls(
            method=method.upper(),
            path=path or "/",
            query=parse_query(query_string),
            headers=lowered,
            cookies=parse_cookies(lowered.get("cookie", "")),
        )
