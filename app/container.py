"""
Dependency registry: token -> value store shared by the bootstrap pipeline and feature modules.
One Container per application (and per test); there is no global instance.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable

from app.errors import InvalidTokenError, MissingFactoryError, UnregisteredDependencyError

logger = logging.getLogger(__name__)


class Container:
    """
    Key/value registry with lazy, memoized construction via resolve().
    Not thread-safe; registration happens during single-threaded startup.
    """

    def __init__(self) -> None:
        self._registry: dict[str, Any] = {}

    def set(self, token: str, value: Any) -> Any:
        """Store value under token (last writer wins). Returns value."""
        if not token:
            raise InvalidTokenError()
        if token in self._registry:
            logger.debug("Overwriting registry token %s", token)
        self._registry[token] = value
        return value

    def has(self, token: str) -> bool:
        return token in self._registry

    def get(self, token: str) -> Any:
        if token not in self._registry:
            raise UnregisteredDependencyError(token)
        return self._registry[token]

    def resolve(
        self, token: str, factory: Callable[[Container], Any] | None = None
    ) -> Any:
        """
        Return the value for token, building it with factory(container) on first access.

        Raises:
            MissingFactoryError: token absent and no factory given
        """
        if token in self._registry:
            return self._registry[token]
        if not callable(factory):
            raise MissingFactoryError(token)
        value = factory(self)
        return self.set(token, value)

    def tokens(self) -> list[str]:
        """Registered tokens in registration order."""
        return list(self._registry)

    def __contains__(self, token: object) -> bool:
        return token in self._registry

    def __len__(self) -> int:
        return len(self._registry)


def register_if_missing(container: Container, token: str, value: Any) -> Any:
    """
    Store value under token only if the token is absent; return the registered value.
    A function or method is treated as a zero-argument factory and invoked; classes and
    other objects are stored as-is.
    """
    if not container.has(token):
        if inspect.isroutine(value):
            value = value()
        container.set(token, value)
    return container.get(token)
