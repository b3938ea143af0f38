"""Controller registry — stable keys mapped to factories.

Routes reference controllers as ``("PostController", "show")``. The key is
looked up here instead of being resolved as a class name at dispatch.
"""

from collections.abc import Callable
from typing import Any

from inkpost.errors import HandlerResolutionError


class ControllerRegistry:
    """Maps controller keys to zero-argument factories.

    Usage::

        registry = ControllerRegistry()

        @registry.controller("PostController")
        class PostController:
            def show(self, slug: str) -> str: ...

        registry.register("Pages", lambda: PageController(store))
    """

    __slots__ = ("_factories",)

    def __init__(self) -> None:
        self._factories: dict[str, Callable[[], Any]] = {}

    def register(self, key: str, factory: Callable[[], Any]) -> None:
        """Register *factory* under *key*. Re-registering replaces it."""
        self._factories[key] = factory

    def controller[T: type](self, key: str | None = None) -> Callable[[T], T]:
        """Class decorator registering a default-constructed controller."""

        def decorator(cls: T) -> T:
            self.register(key or cls.__name__, cls)
            return cls

        return decorator

    def create(self, key: str) -> Any:
        """Instantiate the controller registered under *key*."""
        factory = self._factories.get(key)
        if factory is None:
            msg = f"Controller class {key} not found."
            raise HandlerResolutionError(msg)
        return factory()

    def __contains__(self, key: object) -> bool:
        return key in self._factories

    def __len__(self) -> int:
        return len(self._factories)
