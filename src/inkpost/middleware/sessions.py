"""Session middleware — server-side sessions behind a signed id cookie.

The cookie carries only a random session id, signed with ``itsdangerous``.
Session data lives in a ``SessionBackend`` (in-process memory by default).
The per-request ``Session`` is stored in a ContextVar, accessible via
``get_session()`` from any handler or middleware.
"""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from contextvars import ContextVar
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from itsdangerous import BadSignature, SignatureExpired, TimestampSigner

from inkpost.errors import ConfigurationError
from inkpost.http.cookies import SetCookie
from inkpost.http.request import Request
from inkpost.http.response import Response
from inkpost.middleware.protocol import Next
from inkpost.middleware.session_backends import MemorySessionBackend, SessionBackend

if TYPE_CHECKING:
    from inkpost.config import AppConfig

logger = logging.getLogger("inkpost.sessions")

FLASH_PREFIX = "_flash_"
REGENERATED_AT_KEY = "_session_last_regenerated"

# -- Session ContextVar --

_session_var: ContextVar[Session | None] = ContextVar("inkpost_session", default=None)


def get_session() -> Session:
    """Return the current request's session.

    Raises ``LookupError`` if called outside a request with
    ``SessionMiddleware`` active.
    """
    session = _session_var.get()
    if session is None:
        msg = (
            "No active session. Ensure SessionMiddleware is added "
            "to the app before accessing the session."
        )
        raise LookupError(msg)
    return session


# -- Configuration --


@dataclass(frozen=True, slots=True)
class SessionCookie:
    """Cookie attributes for the session id. ``lifetime=0`` means browser session."""

    lifetime: int = 0
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "Lax"


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` signs the session id cookie. A session unused for
    ``idle_timeout`` seconds expires: its cookie signature is too old to
    verify and its backend record is purged.
    """

    secret_key: str
    cookie_name: str = "inkpost_session"
    lifetime: int = 0
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "Lax"
    regenerate_interval: int = 1800
    idle_timeout: int = 7200
    auto_start: bool = True

    @property
    def cookie(self) -> SessionCookie:
        return SessionCookie(
            lifetime=self.lifetime,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )

    @classmethod
    def from_app_config(cls, config: AppConfig, **overrides: Any) -> SessionConfig:
        """Derive session settings from the app config.

        The cookie domain comes from ``APP_COOKIE_DOMAIN``; cookies are
        marked ``Secure`` when ``APP_ENV`` is ``production``.
        """
        values: dict[str, Any] = {
            "secret_key": config.secret_key,
            "domain": config.cookie_domain,
            "secure": config.is_production,
        }
        values.update(overrides)
        return cls(**values)


# -- Session --


class Session:
    """One visitor's session for the current request.

    Every accessor starts the session on first use. Flash entries are
    regular entries whose key carries ``FLASH_PREFIX``; ``get_flash``
    removes the entry it returns.
    """

    __slots__ = (
        "_active",
        "_backend",
        "_clock",
        "_config",
        "_cookie",
        "_data",
        "_destroyed",
        "_id",
        "_incoming_id",
    )

    def __init__(
        self,
        backend: SessionBackend,
        config: SessionConfig,
        session_id: str | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._config = config
        self._cookie = config.cookie
        self._incoming_id = session_id
        self._id: str | None = None
        self._data: dict[str, Any] = {}
        self._active = False
        self._destroyed = False
        self._clock = clock

    # -- State --

    @property
    def id(self) -> str | None:
        """The session id, or ``None`` before ``start()``."""
        return self._id

    @property
    def active(self) -> bool:
        return self._active

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def cookie(self) -> SessionCookie:
        """Cookie attributes in effect (config defaults plus ``start()`` overrides)."""
        return self._cookie

    def data(self) -> dict[str, Any]:
        """A copy of the current entries."""
        self._ensure_started()
        return dict(self._data)

    # -- Lifecycle --

    def start(self, **options: Any) -> bool:
        """Start the session, or resume the one named by the cookie.

        Idempotent: returns ``True`` immediately if already active.
        *options* override cookie attributes (``lifetime``, ``path``,
        ``domain``, ``secure``, ``httponly``, ``samesite``).

        Rotates the session id when more than ``regenerate_interval``
        seconds have passed since the last rotation.
        """
        if self._active:
            return True

        if options:
            self._cookie = replace(self._cookie, **options)

        data = None
        if self._incoming_id is not None:
            data = self._backend.load(self._incoming_id)
        if data is None:
            self._id = _new_session_id()
            self._data = {}
        else:
            self._id = self._incoming_id
            self._data = data
        self._active = True
        self._destroyed = False

        now = self._clock()
        last = self._data.get(REGENERATED_AT_KEY)
        if last is None:
            self._data[REGENERATED_AT_KEY] = now
        elif now - float(last) > self._config.regenerate_interval:
            self.regenerate()
            self._data[REGENERATED_AT_KEY] = now
        return True

    def regenerate(self, delete_old: bool = True) -> None:
        """Give the active session a fresh id, keeping its data.

        Prevents session fixation. With *delete_old*, the record stored
        under the previous id is removed from the backend.
        """
        if not self._active:
            return
        old_id = self._id
        self._id = _new_session_id()
        if delete_old and old_id is not None:
            self._backend.delete(old_id)
        logger.debug("Session id regenerated")

    def destroy(self) -> None:
        """Remove all entries, the backend record, and the cookie."""
        self._ensure_started()
        self._data.clear()
        if self._id is not None:
            self._backend.delete(self._id)
        self._active = False
        self._destroyed = True
        self._incoming_id = None

    # -- Entries --

    def get(self, key: str, default: Any = None) -> Any:
        self._ensure_started()
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._ensure_started()
        self._data[key] = value

    def has(self, key: str) -> bool:
        self._ensure_started()
        return key in self._data

    def unset(self, key: str) -> None:
        self._ensure_started()
        self._data.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    # -- Flash messages --

    def set_flash(self, key: str, message: Any) -> None:
        """Store a message that the next ``get_flash(key)`` consumes."""
        self.set(FLASH_PREFIX + key, message)

    def get_flash(self, key: str, default: Any = None) -> Any:
        """Return the flash message for *key* and remove it."""
        self._ensure_started()
        return self._data.pop(FLASH_PREFIX + key, default)

    def has_flash(self, key: str) -> bool:
        return self.has(FLASH_PREFIX + key)

    # -- Internal --

    def _ensure_started(self) -> None:
        if not self._active:
            self.start()

    def _persist(self) -> None:
        if self._active and self._id is not None:
            self._backend.save(self._id, self._data)


def _new_session_id() -> str:
    return secrets.token_urlsafe(32)


# -- Middleware --


class SessionMiddleware:
    """Loads the visitor's session before the handler and stores it after.

    The cookie holds the session id signed with a timestamp; the signature
    is refreshed on every response, so it only goes stale when the visitor
    has been away longer than ``idle_timeout``. If the handler raises,
    nothing is saved.

    Usage::

        app.add_middleware(SessionMiddleware(SessionConfig(secret_key="...")))

        @app.get("/")
        def index():
            get_session().set_flash("success", "Welcome back!")
            return "<h1>Home</h1>"
    """

    __slots__ = ("_backend", "_config", "_signer")

    def __init__(self, config: SessionConfig, backend: SessionBackend | None = None) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        if config.idle_timeout <= 0:
            msg = "SessionConfig.idle_timeout must be a positive number of seconds."
            raise ConfigurationError(msg)

        self._config = config
        self._backend: SessionBackend = (
            backend if backend is not None else MemorySessionBackend(ttl=config.idle_timeout)
        )
        self._signer = TimestampSigner(config.secret_key, salt="inkpost.session")

    @property
    def backend(self) -> SessionBackend:
        return self._backend

    def _session_id(self, request: Request) -> str | None:
        signed = request.cookies.get(self._config.cookie_name)
        if not signed:
            return None
        try:
            raw = self._signer.unsign(signed, max_age=self._config.idle_timeout)
        except SignatureExpired:
            logger.debug("Session cookie expired")
            return None
        except BadSignature:
            logger.debug("Session cookie failed signature check")
            return None
        return raw.decode("utf-8")

    def _session_cookie(self, session: Session) -> SetCookie | None:
        attrs = session.cookie
        if session.destroyed:
            return SetCookie(
                self._config.cookie_name, "", max_age=0, path=attrs.path, domain=attrs.domain
            )
        if not session.active or session.id is None:
            return None
        session._persist()
        return SetCookie(
            self._config.cookie_name,
            self._signer.sign(session.id).decode("utf-8"),
            max_age=attrs.lifetime or None,
            path=attrs.path,
            domain=attrs.domain,
            secure=attrs.secure,
            httponly=attrs.httponly,
            samesite=attrs.samesite,
        )

    async def __call__(self, request: Request, next: Next) -> Response:
        session = Session(self._backend, self._config, self._session_id(request))
        if self._config.auto_start:
            session.start()

        token = _session_var.set(session)
        try:
            response = await next(request)
        finally:
            _session_var.reset(token)

        cookie = self._session_cookie(session)
        return response if cookie is None else response.with_cookie(cookie)
