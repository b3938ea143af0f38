"""In-process client that drives an ``App`` through its ASGI callable."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from inkpost.app import App
from inkpost.http.cookies import parse_cookies
from inkpost.http.response import Response


class TestClient:
    """Sends requests straight into ``app(scope, receive, send)``.

    Responses come back as ``Response`` objects; every header the app sent,
    ``Set-Cookie`` included, is in ``response.headers``. Cookies are
    remembered in ``client.cookies`` and replayed on later requests.

    ::

        async with TestClient(create_app()) as client:
            home = await client.get("/")
            assert "Welcome" in home.text
    """

    __test__ = False
    __slots__ = ("app", "cookies")

    def __init__(self, app: App) -> None:
        self.app = app
        self.cookies: dict[str, str] = {}

    async def __aenter__(self) -> TestClient:
        await self.app.startup()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.app.shutdown()

    async def get(self, path: str, **kwargs: Any) -> Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Response:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Response:
        return await self.request("DELETE", path, **kwargs)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        form: dict[str, str] | None = None,
    ) -> Response:
        """Run one request/response cycle. *form* is sent URL-encoded."""
        sent = {name.lower(): value for name, value in (headers or {}).items()}
        if form is not None:
            body = urlencode(form).encode("utf-8")
            sent.setdefault("content-type", "application/x-www-form-urlencoded")
        if self.cookies:
            sent.setdefault("cookie", "; ".join(f"{k}={v}" for k, v in self.cookies.items()))

        route, _, query = path.partition("?")
        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "scheme": "http",
            "path": route,
            "raw_path": route.encode("utf-8"),
            "query_string": query.encode("utf-8"),
            "root_path": "",
            "headers": [(k.encode("latin-1"), v.encode("latin-1")) for k, v in sent.items()],
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }
        inbox = [{"type": "http.request", "body": body, "more_body": False}]
        outbox: list[dict[str, Any]] = []

        async def receive() -> dict[str, Any]:
            return inbox.pop(0) if inbox else {"type": "http.disconnect"}

        async def send(message: dict[str, Any]) -> None:
            outbox.append(message)

        await self.app(scope, receive, send)
        return self._collect(outbox)

    def _collect(self, messages: list[dict[str, Any]]) -> Response:
        start = next(m for m in messages if m["type"] == "http.response.start")
        body = b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")

        content_type = "text/html; charset=utf-8"
        headers: list[tuple[str, str]] = []
        for raw_name, raw_value in start.get("headers", []):
            name, value = raw_name.decode("latin-1"), raw_value.decode("latin-1")
            if name == "content-type":
                content_type = value
            elif name != "content-length":
                headers.append((name, value))
                if name == "set-cookie":
                    self._remember(value)
        return Response(
            body=body, status=start["status"], content_type=content_type, headers=tuple(headers)
        )

    def _remember(self, set_cookie: str) -> None:
        # "name=value; Path=/; Max-Age=0" -- a zero Max-Age deletes.
        pair, _, attributes = set_cookie.partition(";")
        name, _, value = pair.strip().partition("=")
        max_age = {k.lower(): v for k, v in parse_cookies(attributes).items()}.get("max-age")
        if max_age == "0":
            self.cookies.pop(name, None)
        else:
            self.cookies[name] = value
