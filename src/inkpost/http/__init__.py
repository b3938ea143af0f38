"""Request and response types shared by the router, middleware and server."""

from inkpost.http.cookies import SetCookie, parse_cookies
from inkpost.http.request import Request
from inkpost.http.response import Response

__all__ = ["Request", "Response", "SetCookie", "parse_cookies"]
