"""The ``App``: route table, middleware, error pages and lifecycle in one ASGI callable."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any

from inkpost._internal.asgi import Receive, Scope, Send
from inkpost._internal.invoke import invoke
from inkpost.config import AppConfig
from inkpost.data.database import Database, _db_var
from inkpost.middleware.protocol import Middleware
from inkpost.routing.controllers import ControllerRegistry
from inkpost.routing.route import Route
from inkpost.routing.router import Router
from inkpost.server.errors import ErrorHandlers
from inkpost.server.handler import handle_request

logger = logging.getLogger("inkpost.app")

type Handler = Callable[..., Any]


class App:
    """An inkpost application.

    Everything is registered up front: routes, controllers, middleware,
    error handlers and hooks. The first request (or lifespan startup, or
    ``run()``) locks the configuration; registering anything afterwards
    raises ``RuntimeError``.

    ::

        app = App(load_config(), db=Database("sqlite:///blog.db"))

        @app.get("/user/{id}")
        def show_user(id: str) -> str:
            return f"<h1>User {html.escape(id)}</h1>"

        @app.controller("PostController")
        class PostController:
            def show(self, slug: str) -> str: ...

        app.add_route("GET", "/posts/{slug}", ("PostController", "show"))
    """

    __slots__ = (
        "_db",
        "_error_handlers",
        "_hooks",
        "_lock",
        "_locked",
        "_middleware",
        "_router",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: Database | str | None = None,
        controllers: ControllerRegistry | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._router = Router(controllers)
        self._middleware: list[Middleware] = []
        self._error_handlers: ErrorHandlers = {}
        self._hooks: dict[str, list[Callable[..., Any]]] = {"startup": [], "shutdown": []}
        self._locked = False
        self._lock = threading.Lock()
        if isinstance(db, str):
            db = Database(db, echo=self.config.debug, debug=self.config.debug)
        self._db: Database | None = db

    # -- Registration --

    def add_route(
        self,
        method: str,
        path: str,
        handler: Any,
        middleware: Sequence[Middleware] = (),
    ) -> Route:
        """Register *handler*: a callable or a ``(controller, action)`` pair."""
        self._check_open()
        return self._router.add_route(method, path, handler, middleware)

    def route(
        self,
        path: str,
        *,
        methods: Sequence[str] = ("GET",),
        middleware: Sequence[Middleware] = (),
    ) -> Callable[[Handler], Handler]:
        """Decorator form of ``add_route`` for one or more methods."""

        def register(func: Handler) -> Handler:
            for method in methods:
                self.add_route(method, path, func, middleware)
            return func

        return register

    def get(
        self, path: str, *, middleware: Sequence[Middleware] = ()
    ) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("GET",), middleware=middleware)

    def post(
        self, path: str, *, middleware: Sequence[Middleware] = ()
    ) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("POST",), middleware=middleware)

    def put(
        self, path: str, *, middleware: Sequence[Middleware] = ()
    ) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("PUT",), middleware=middleware)

    def patch(
        self, path: str, *, middleware: Sequence[Middleware] = ()
    ) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("PATCH",), middleware=middleware)

    def delete(
        self, path: str, *, middleware: Sequence[Middleware] = ()
    ) -> Callable[[Handler], Handler]:
        return self.route(path, methods=("DELETE",), middleware=middleware)

    def controller[T: type](self, key: str | None = None) -> Callable[[T], T]:
        """Register a controller class under *key* (default: the class name)."""
        self._check_open()
        return self._router.controllers.controller(key)

    def error(self, key: int | type[Exception]) -> Callable[[Handler], Handler]:
        """Register an error page for a status code or exception type.

        The handler may take ``()``, ``(request)`` or ``(request, exc)``.
        """

        def register(func: Handler) -> Handler:
            self._check_open()
            self._error_handlers[key] = func
            return func

        return register

    def add_middleware(self, middleware: Middleware) -> None:
        """Wrap every request. The first middleware added is the outermost."""
        self._check_open()
        self._middleware.append(middleware)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        self._check_open()
        self._hooks["startup"].append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Shutdown hooks run before the database connection is closed."""
        self._check_open()
        self._hooks["shutdown"].append(func)
        return func

    # -- Accessors --

    @property
    def router(self) -> Router:
        return self._router

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        return tuple(self._middleware)

    @property
    def db(self) -> Database:
        if self._db is None:
            msg = "No database configured on this App; pass db= to App()."
            raise RuntimeError(msg)
        return self._db

    # -- Lifecycle --

    async def startup(self) -> None:
        """Lock registration and run the startup hooks, with ``get_db()`` available."""
        self._lock_registration()
        token = _db_var.set(self._db) if self._db is not None else None
        try:
            for hook in self._hooks["startup"]:
                await invoke(hook)
        finally:
            if token is not None:
                _db_var.reset(token)

    async def shutdown(self) -> None:
        for hook in self._hooks["shutdown"]:
            await invoke(hook)
        if self._db is not None:
            await self._db.disconnect()

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve with uvicorn; *host*/*port* override ``HOST``/``PORT``."""
        import uvicorn

        self._lock_registration()
        host = host or self.config.host
        port = port or self.config.port
        logger.info("Serving %s on http://%s:%d", self.config.app_name, host, port)
        uvicorn.run(self, host=host, port=port, log_level=self.config.log_level)

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return

        self._lock_registration()
        base = self.config.base_path
        if scope["type"] == "http" and base:
            scope = {
                **scope,
                "path": strip_base_path(scope["path"], base),
                "root_path": scope.get("root_path", "") + base,
            }
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=tuple(self._middleware),
            error_handlers=self._error_handlers,
            debug=self.config.debug,
            db=self._db,
        )

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        message = await receive()
        if message["type"] == "lifespan.startup":
            try:
                await self.startup()
            except Exception as exc:
                logger.exception("Startup failed")
                await send({"type": "lifespan.startup.failed", "message": str(exc)})
                return
            await send({"type": "lifespan.startup.complete"})
            message = await receive()

        if message["type"] == "lifespan.shutdown":
            await self.shutdown()
            await send({"type": "lifespan.shutdown.complete"})

    # -- Registration lock --

    def _lock_registration(self) -> None:
        if self._locked:
            return
        with self._lock:
            if not self._locked:
                self._locked = True
                logger.debug(
                    "Registration closed: %d routes, %d middleware",
                    len(self._router.routes),
                    len(self._middleware),
                )

    def _check_open(self) -> None:
        if self._locked:
            msg = "Cannot modify the app after it has started serving requests."
            raise RuntimeError(msg)


def strip_base_path(path: str, base: str) -> str:
    """Remove the ``APP_URL`` path prefix from a request path.

    Only whole segments are stripped: with base ``/blog``, ``/blog`` and
    ``/blog/`` become ``/`` and ``/blog/x`` becomes ``/x``, but
    ``/blogger`` is left alone.
    """
    if not base:
        return path
    if path in (base, f"{base}/"):
        return "/"
    if path.startswith(f"{base}/"):
        return path[len(base) :]
    return path
