"""Turn a ``module:attr`` string from the command line into an ``App``."""

import importlib
import sys

from inkpost.app import App


def resolve_app(target: str) -> App:
    """Import *target* and return the ``App`` it names.

    ``"pkg.mod:attr"`` picks ``attr``; a bare ``"pkg.mod"`` means
    ``pkg.mod:app``. When the attribute is a zero-argument factory (such
    as ``inkpost.site:create_app``) it is called.
    """
    module_name, _, attr = target.partition(":")
    obj = getattr(importlib.import_module(module_name), attr or "app")

    if not isinstance(obj, App) and callable(obj):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"calling {target!r} failed: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, App):
        msg = f"{target!r} is a {type(obj).__name__}, expected an inkpost App or a factory"
        raise TypeError(msg)
    return obj


def load_app(target: str) -> App:
    """``resolve_app`` for commands: report the problem and exit 1 on failure."""
    try:
        return resolve_app(target)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
