"""
api/main.py -- FastAPI application factory for the request gate.

Run with:  uvicorn asgi:app --reload

Every routed request passes through enforce_security() (app-wide dependency)
before its handler runs. The gate raises; the exception handlers below map
the error taxonomy onto HTTP:

  SecurityCheckFailedError   -> 403 security_check_failed
  InvalidURLError            -> 400 invalid_url
  InvalidConfigurationError  -> 500 security_misconfigured
  InvalidCheckObjectError    -> 500 security_misconfigured

The core never logs -- this module does. Rejections are WARNING (expected,
user-triggered), misconfiguration is ERROR (an operator has to fix config).

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. log_requests          -- method, path, status, latency for every request
"""

from __future__ import annotations

import importlib
import logging
import time
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from api.dependencies import enforce_security
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from core.config import Settings, get_settings
from core.exceptions import (
    InvalidCheckObjectError,
    InvalidConfigurationError,
    InvalidURLError,
    SecurityCheckFailedError,
)
from core.gate import SecurityGate
from core.registry import CheckRegistry, default_registry

__version__ = "0.1.0"

logger = logging.getLogger("requestgate.api")


def _error_response(status_code: int, code: str, message: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


async def security_check_failed_handler(request: Request, exc: SecurityCheckFailedError) -> JSONResponse:
    """403 -- a check legitimately rejected the request.

    The failing check's identity is logged but not returned: telling a client
    which rule it tripped helps it route around the rule.
    """
    logger.warning(
        "Security check %r (%s) rejected %s %s",
        exc.check_id,
        exc.check_type,
        request.method,
        request.url.path,
    )
    return _error_response(403, "security_check_failed", "Request rejected by security policy.")


async def invalid_url_handler(request: Request, exc: InvalidURLError) -> JSONResponse:
    """400 -- the request URI has no parseable path; fail closed."""
    logger.warning("Rejected request with unparseable URL %r", exc.uri)
    return _error_response(400, "invalid_url", "Invalid URL provided.")


async def security_misconfigured_handler(request: Request, exc: Exception) -> JSONResponse:
    """500 -- malformed skip regex or a check identifier that is not a check.

    The exception message names config internals (regex keys, check ids), so
    it goes to the log only.
    """
    logger.error("Security gate misconfigured on %s %s: %s", request.method, request.url.path, exc)
    return _error_response(500, "security_misconfigured", "An unexpected error occurred.")


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or query params fail validation."""
    return _error_response(422, "validation_error", "Request validation failed.", str(exc.errors()))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    When detail is already a structured dict, use it directly as the error
    field rather than stringifying it -- str(dict) produces a Python repr.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is logged, never written to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(settings: Optional[Settings] = None, registry: Optional[CheckRegistry] = None) -> FastAPI:
    """Build the FastAPI app with the security gate wired in.

    Args:
        settings: Resolved Settings. Defaults to the get_settings() singleton.
        registry: Check registry the gate resolves identifiers from. Defaults
                  to core.registry.default_registry.
    """
    settings = settings if settings is not None else get_settings()
    registry = registry if registry is not None else default_registry

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    app = FastAPI(
        title="Request Gate",
        description="Runs configured security checks before every request is handled.",
        version=__version__,
        debug=settings.debug,
        dependencies=[Depends(enforce_security)],
    )

    for module_name in settings.check_modules:
        importlib.import_module(module_name)
        logger.info("Loaded check module %s", module_name)

    app.state.settings = settings
    app.state.security_config = settings.security
    app.state.check_registry = registry
    app.state.security_gate = SecurityGate(registry)

    if settings.security is None or not settings.security.has_policy:
        logger.warning("No security checks configured -- every request will be let through")
    else:
        missing = [check_id for check_id in settings.security.checks if check_id not in registry]
        if missing:
            # Requests that reach these get a 500 from CheckNotRegisteredError.
            logger.error(
                "Configured security checks not registered: %s (registered: %s)",
                missing,
                registry.identifiers(),
            )
        logger.info(
            "Security gate initialized (checks=%s, registered=%d, skip_routes=%d, skip_regex_routes=%d)",
            settings.security.checks,
            len(registry),
            len(settings.security.skip_routes),
            len(settings.security.skip_regex_routes),
        )

    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    # -----------------------------------------------------------------------
    # Request logging middleware
    # -----------------------------------------------------------------------

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            request.client.host if request.client else "unknown",
        )
        return response

    app.add_exception_handler(SecurityCheckFailedError, security_check_failed_handler)
    app.add_exception_handler(InvalidURLError, invalid_url_handler)
    app.add_exception_handler(InvalidConfigurationError, security_misconfigured_handler)
    app.add_exception_handler(InvalidCheckObjectError, security_misconfigured_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    # -----------------------------------------------------------------------
    # Health endpoint
    #
    # Gated like every other route. Add "/api/v1/health": "GET" to
    # skip_routes so load balancers can reach it without credentials.
    # -----------------------------------------------------------------------

    @app.get("/api/v1/health", tags=["Health"])
    async def health(request: Request) -> HealthResponse:
        """Return API liveness, version and the number of configured checks."""
        config = request.app.state.security_config
        return HealthResponse(version=__version__, checks_configured=len(config.checks) if config else 0)

    return app
