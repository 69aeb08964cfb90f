"""
core/skip.py -- Route/method skip rules.

Decides whether a request bypasses every configured check. Evaluation order:

  1. No request context              -> never skip.
  2. skip_routes has the key "*"     -> skip everything.
  3. skip_routes has the exact path  -> skip if method-spec is "*" or equals
                                        the request method.
  4. skip_regex_routes, in order     -> the FIRST pattern matching the path
                                        decides: skip if its method-spec
                                        matches, otherwise stop looking.
  5. Nothing matched                 -> don't skip.

Step 4 stops at the first path match even when the method does not match, so
a later pattern covering the same path is never consulted. Operators relying
on two patterns for one path family must order them accordingly.

Fail closed: an unparseable URI raises InvalidURLError and a malformed regex
key raises InvalidConfigurationError -- neither is treated as "skip".
"""

from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import urlsplit

from core.contracts import RequestDescriptor
from core.exceptions import InvalidConfigurationError, InvalidURLError
from core.models import REGEX_ROUTE_PREFIX, REGEX_ROUTE_SUFFIX, WILDCARD, SecurityConfig


def extract_path(uri: Any) -> str:
    """Return the path component of uri, or raise InvalidURLError.

    A URI with no path at all ("http://example.com") yields "".
    """
    if not isinstance(uri, str):
        raise InvalidURLError(uri)
    try:
        parts = urlsplit(uri)
        # Accessing .port validates it; a non-numeric or out-of-range port
        # raises ValueError just like a broken IPv6 literal does in urlsplit.
        _ = parts.port
    except ValueError:
        raise InvalidURLError(uri) from None
    return parts.path


def compile_regex_route(pattern: Any) -> re.Pattern[str]:
    """Validate a delimited route regex ("/^...$/") and compile its body."""
    if not isinstance(pattern, str) or not (
        pattern.startswith(REGEX_ROUTE_PREFIX) and pattern.endswith(REGEX_ROUTE_SUFFIX)
    ):
        raise InvalidConfigurationError(pattern)
    try:
        return re.compile(pattern[1:-1])
    except re.error as exc:
        raise InvalidConfigurationError(pattern, reason=str(exc)) from None


def method_matches(method_spec: Any, method: Any) -> bool:
    """True when method_spec (trimmed) is the wildcard or equals method exactly."""
    if not isinstance(method_spec, str):
        return False
    spec = method_spec.strip()
    return spec == WILDCARD or spec == method


class RouteSkipEvaluator:
    """Stateless; one instance can serve every request."""

    def should_skip(self, config: SecurityConfig, request: Optional[RequestDescriptor]) -> bool:
        if request is None:
            return False

        path = extract_path(request.get_uri())
        method = request.get_method()

        skip_routes = config.skip_routes
        if WILDCARD in skip_routes:
            return True
        if path in skip_routes and method_matches(skip_routes[path], method):
            return True

        for pattern, method_spec in config.skip_regex_routes.items():
            regex = compile_regex_route(pattern)
            if regex.search(path):
                if method_matches(method_spec, method):
                    return True
                break

        return False
