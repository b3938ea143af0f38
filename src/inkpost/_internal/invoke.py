"""Calling user code that may be ``def`` or ``async def``."""

import inspect
from typing import Any


async def invoke(func: Any, /, *args: Any, **kwargs: Any) -> Any:
    """Call *func*; await the result when it is awaitable.

    Used for handlers, controller actions, error handlers and lifecycle hooks.
    """
    outcome = func(*args, **kwargs)
    return await outcome if inspect.isawaitable(outcome) else outcome
