"""Middleware — app-wide and per-route request interceptors."""

from inkpost.middleware.protocol import Middleware, Next
from inkpost.middleware.sessions import (
    Session,
    SessionConfig,
    SessionMiddleware,
    get_session,
)

__all__ = [
    "Middleware",
    "Next",
    "Session",
    "SessionConfig",
    "SessionMiddleware",
    "get_session",
]
