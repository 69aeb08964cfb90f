from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

# Method-spec wildcard. As a skip_routes key it bypasses every route.
WILDCARD = "*"

# Delimiters every skip_regex_routes key must carry, e.g. "/^/api/.*$/".
REGEX_ROUTE_PREFIX = "/^"
REGEX_ROUTE_SUFFIX = "$/"


class SecurityConfig(BaseModel):
    """The `security` section of the application config.

    Every key is optional. Values of the wrong shape (a string where a list is
    expected, a list where a mapping is expected) are treated as absent rather
    than rejected, so a half-written section degrades to "no restriction" for
    that key. Mapping insertion order is preserved; skip_regex_routes relies
    on it.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    checks: list[Any] = Field(default_factory=list)
    skip_routes: dict[str, Any] = Field(default_factory=dict)
    skip_regex_routes: dict[str, Any] = Field(default_factory=dict)

    @field_validator("checks", mode="before")
    @classmethod
    def _checks_must_be_list(cls, value: Any) -> list[Any]:
        if isinstance(value, (list, tuple)):
            return list(value)
        return []

    @field_validator("skip_routes", "skip_regex_routes", mode="before")
    @classmethod
    def _routes_must_be_mapping(cls, value: Any) -> dict[str, Any]:
        if isinstance(value, Mapping):
            return dict(value)
        return {}

    @property
    def has_policy(self) -> bool:
        """True when at least one check is configured."""
        return bool(self.checks)

    @classmethod
    def from_app_config(cls, app_config: Any) -> Optional["SecurityConfig"]:
        """Build a SecurityConfig from the `security` key of a larger config.

        Returns None when the config or its `security` section is missing or
        is not a mapping -- callers treat that as "no security policy".
        """
        if not isinstance(app_config, Mapping):
            return None
        section = app_config.get("security")
        if not isinstance(section, Mapping):
            return None
        return cls.model_validate(dict(section))
