"""Routing — regex route table matched in declaration order."""

from inkpost.routing.controllers import ControllerRegistry
from inkpost.routing.route import (
    ControllerHandler,
    FunctionHandler,
    Handler,
    InvalidHandler,
    Route,
    RouteMatch,
    as_handler,
    normalize_path,
)
from inkpost.routing.router import Router

__all__ = [
    "ControllerHandler",
    "ControllerRegistry",
    "FunctionHandler",
    "Handler",
    "InvalidHandler",
    "Route",
    "RouteMatch",
    "Router",
    "as_handler",
    "normalize_path",
]
