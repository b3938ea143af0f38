"""Responses returned by handlers, middleware and error handlers."""

from __future__ import annotations

from dataclasses import dataclass, replace

from inkpost.http.cookies import SetCookie


@dataclass(frozen=True, slots=True)
class Response:
    """An HTML response by default.

    Frozen; the ``with_*`` methods return modified copies so middleware
    can decorate whatever the handler produced.
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()
    cookies: tuple[SetCookie, ...] = ()

    @classmethod
    def redirect(cls, location: str, status: int = 302) -> Response:
        return cls(status=status, headers=(("Location", location),))

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return replace(self, headers=(*self.headers, (name, value)))

    def with_cookie(self, cookie: SetCookie) -> Response:
        return replace(self, cookies=(*self.cookies, cookie))

    def header(self, name: str) -> str | None:
        """Case-insensitive lookup of the first header called *name*."""
        wanted = name.lower()
        return next((value for key, value in self.headers if key.lower() == wanted), None)

    def encode(self) -> bytes:
        return self.body.encode("utf-8") if isinstance(self.body, str) else self.body

    @property
    def text(self) -> str:
        return self.body if isinstance(self.body, str) else self.body.decode("utf-8")
