"""
core/registry.py -- Check registry: identifier -> factory.

Checks are registered once at startup and resolved per request. Every
resolve() calls the factory again, so a check instance never outlives the
verify() call that asked for it.

Usage:
    registry = CheckRegistry()
    registry.register("api_key", ApiKeyCheck)

    @registry.register("ip_allowlist")
    class IpAllowlistCheck(AbstractCheck): ...

    check = registry.resolve("api_key", request)
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Any, Optional

from core.contracts import RequestDescriptor
from core.exceptions import CheckNotRegisteredError

CheckFactory = Callable[[Optional[RequestDescriptor]], Any]


class CheckRegistry:
    def __init__(self) -> None:
        self._factories: dict[Hashable, CheckFactory] = {}

    def register(self, identifier: Hashable, factory: Optional[CheckFactory] = None):
        """Register factory under identifier, replacing any previous entry.

        Called without a factory it returns a decorator, so a check class can
        register itself at definition time.
        """
        if factory is None:

            def decorator(cls: CheckFactory) -> CheckFactory:
                self._factories[identifier] = cls
                return cls

            return decorator

        self._factories[identifier] = factory
        return factory

    def unregister(self, identifier: Hashable) -> None:
        self._factories.pop(identifier, None)

    def resolve(self, identifier: Hashable, request: Optional[RequestDescriptor] = None) -> Any:
        """Build a fresh object for identifier. The result is NOT validated here."""
        try:
            factory = self._factories[identifier]
        except (KeyError, TypeError):
            raise CheckNotRegisteredError(identifier) from None
        return factory(request)

    def identifiers(self) -> list[Hashable]:
        return list(self._factories)

    def __contains__(self, identifier: object) -> bool:
        try:
            return identifier in self._factories
        except TypeError:
            return False

    def __len__(self) -> int:
        return len(self._factories)


# Process-wide registry used when create_app() is not handed one. Applications
# register their checks here at import time.
default_registry = CheckRegistry()
