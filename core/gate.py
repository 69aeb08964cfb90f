"""
core/gate.py -- SecurityGate: runs the configured checks for one request.

No logging, no retries, no side effects of its own. The only side effects are
whatever the checks do inside execute(). Designed to be called by the web
layer (api/dependencies.py) and by the CLI dry run (main.py).

Guarantees:
  - checks run strictly in config order, one at a time;
  - every check up to and including the first failing one runs exactly once;
  - nothing after a failure is resolved or executed.
"""

from __future__ import annotations

from typing import Optional

from core.contracts import RequestDescriptor, is_security_check
from core.exceptions import InvalidCheckObjectError, SecurityCheckFailedError
from core.models import SecurityConfig
from core.registry import CheckRegistry
from core.skip import RouteSkipEvaluator


class SecurityGate:
    def __init__(self, registry: CheckRegistry, skip_evaluator: Optional[RouteSkipEvaluator] = None) -> None:
        self.registry = registry
        self.skip_evaluator = skip_evaluator or RouteSkipEvaluator()

    def verify(self, config: Optional[SecurityConfig], request: Optional[RequestDescriptor]) -> None:
        """Return None when the request may proceed; raise a SecurityError otherwise.

        Raises:
            InvalidURLError:           request URI has no parseable path.
            InvalidConfigurationError: a regex skip route is malformed.
            InvalidCheckObjectError:   a check resolved to a non-check object
                                       (or to nothing -- CheckNotRegisteredError).
            SecurityCheckFailedError:  a check returned False.
        """
        if config is None or not config.has_policy:
            return
        if self.skip_evaluator.should_skip(config, request):
            return

        for check_id in config.checks:
            check = self.registry.resolve(check_id, request)
            if not is_security_check(check):
                raise InvalidCheckObjectError(check_id, check)
            if not check.execute():
                raise SecurityCheckFailedError(check_id, type(check).__name__)

    def planned_checks(self, config: Optional[SecurityConfig], request: Optional[RequestDescriptor]) -> list:
        """Return the identifiers verify() would run, without running them.

        Empty when there is no policy or the request is skipped. Raises the
        same skip-evaluation errors as verify().
        """
        if config is None or not config.has_policy:
            return []
        if self.skip_evaluator.should_skip(config, request):
            return []
        return list(config.checks)
