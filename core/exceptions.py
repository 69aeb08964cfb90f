"""
core/exceptions.py -- Error taxonomy for the security gate.

Hierarchy:
    SecurityError (base)
    |-- InvalidURLError            request URI has no parseable path (fail closed)
    |-- InvalidConfigurationError  regex skip route without /^ ... $/ anchors
    |-- InvalidCheckObjectError    resolved check does not expose execute()
    |   `-- CheckNotRegisteredError  identifier unknown to the registry
    `-- SecurityCheckFailedError   a check rejected the request

The core raises these and never logs them. Mapping to HTTP statuses
(400 / 500 / 403) and telemetry belong to the caller -- see api/main.py.

Layer rule: core/ is the kernel. This module may not import from api/.
"""

from __future__ import annotations

from typing import Any


class SecurityError(Exception):
    """Base class for every failure raised by the security gate."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidURLError(SecurityError):
    """The request URI could not be parsed into a path component."""

    def __init__(self, uri: Any) -> None:
        self.uri = uri
        super().__init__("Security check failed - invalid URL provided.")


class InvalidConfigurationError(SecurityError):
    """A regex skip route is not anchored (or not compilable)."""

    def __init__(self, pattern: Any, reason: str = "") -> None:
        self.pattern = pattern
        message = f"Both string anchors have to be provided in the route regex: {pattern}"
        if reason:
            message = f"Invalid route regex {pattern}: {reason}"
        super().__init__(message)


class InvalidCheckObjectError(SecurityError):
    """A check identifier resolved to something that cannot be executed."""

    def __init__(self, check_id: Any, obj: Any = None, message: str = "") -> None:
        self.check_id = check_id
        self.check_type = type(obj).__name__ if obj is not None else None
        super().__init__(message or f"Invalid security check object for {check_id!r} ({self.check_type}).")


class CheckNotRegisteredError(InvalidCheckObjectError):
    """No factory is registered for the requested check identifier."""

    def __init__(self, check_id: Any) -> None:
        super().__init__(check_id, message=f"No security check registered as {check_id!r}.")


class SecurityCheckFailedError(SecurityError):
    """A check ran and rejected the request.

    check_id is the configured identifier; check_type the class name of the
    resolved check. Both are for diagnostics, not for the end user.
    """

    def __init__(self, check_id: Any, check_type: str) -> None:
        self.check_id = check_id
        self.check_type = check_type
        super().__init__(f"Security check failed ({check_type}).")
