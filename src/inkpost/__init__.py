"""Inkpost — a multi-user blog application.

An ASGI app with a regex router, server-side sessions, a single-connection
database gateway, and environment-driven configuration.

Basic usage::

    from inkpost import App, load_config

    app = App(load_config())

    @app.get("/posts/{slug}")
    def show_post(slug):
        return f"<h1>{slug}</h1>"

    app.run()

The full site (session middleware and demo pages)::

    from inkpost.site import create_app
    app = create_app()
"""

import importlib

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "Database",
    "HTTPError",
    "HandlerResolutionError",
    "InkpostError",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "get_db",
    "get_request",
    "get_session",
    "load_config",
]

_EXPORTS = {
    "App": "inkpost.app",
    "AppConfig": "inkpost.config",
    "load_config": "inkpost.config",
    "Request": "inkpost.http",
    "Response": "inkpost.http",
    "InkpostError": "inkpost.errors",
    "ConfigurationError": "inkpost.errors",
    "HTTPError": "inkpost.errors",
    "NotFound": "inkpost.errors",
    "HandlerResolutionError": "inkpost.errors",
    "Middleware": "inkpost.middleware",
    "Next": "inkpost.middleware",
    "get_session": "inkpost.middleware",
    "Database": "inkpost.data",
    "get_db": "inkpost.data",
    "get_request": "inkpost.context",
}


def __getattr__(name: str) -> object:
    # Submodules are imported on first attribute access.
    module = _EXPORTS.get(name)
    if module is None:
        msg = f"module 'inkpost' has no attribute {name!r}"
        raise AttributeError(msg)
    return getattr(importlib.import_module(module), name)
