"""
core/contracts.py -- Shapes the gate relies on from its collaborators.

RequestDescriptor: read-only view of the inbound request (URI + method).
    The web layer adapts its own request type (see api/request.py); tests use
    a plain dataclass. Anything with get_uri()/get_method() qualifies.

SecurityCheck: the only capability the gate needs from a check unit --
    a callable execute() returning a bool. AbstractCheck is an optional base
    class that stores the request the check was resolved for.

Layer rule: core/ is the kernel. This module may not import from api/.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class RequestDescriptor(Protocol):
    def get_uri(self) -> str: ...

    def get_method(self) -> str: ...


@runtime_checkable
class SecurityCheck(Protocol):
    def execute(self) -> bool: ...


class AbstractCheck(ABC):
    """Convenience base for check units.

    Registering the subclass itself as the factory works because the registry
    calls factory(request):

        registry.register("api_key", ApiKeyCheck)
    """

    def __init__(self, request: Optional[RequestDescriptor] = None) -> None:
        self.request = request

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def execute(self) -> bool:
        """Return True to let the request through, False to reject it."""


def is_security_check(obj: Any) -> bool:
    """True if obj satisfies the SecurityCheck contract.

    isinstance() against a runtime_checkable Protocol only tests that the
    attribute exists, so callability is checked separately.
    """
    return isinstance(obj, SecurityCheck) and callable(getattr(obj, "execute", None))
