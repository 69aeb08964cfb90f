"""
api/dependencies.py -- FastAPI Depends() helper that runs the security gate.

enforce_security() is attached app-wide in api/main.py:

    app = FastAPI(dependencies=[Depends(enforce_security)])

so every routed request passes through SecurityGate.verify() before the route
handler runs. The gate, registry and resolved SecurityConfig are read from
app.state (wired by create_app), never from module globals, so tests can build
isolated apps side by side.

enforce_security() is sync: FastAPI runs sync dependencies in its thread
pool, so a check may block.

Errors raised by the gate propagate unchanged; the exception handlers in
api/main.py translate them into 403 / 400 / 500 responses and do the logging.
"""

from __future__ import annotations

from fastapi import Request

from api.request import StarletteRequestDescriptor
from core.gate import SecurityGate
from core.models import SecurityConfig


def get_security_gate(request: Request) -> SecurityGate:
    return request.app.state.security_gate


def get_security_config(request: Request) -> SecurityConfig | None:
    return request.app.state.security_config


def enforce_security(request: Request) -> None:
    """Run every configured check for this request. Raises SecurityError on rejection."""
    gate = get_security_gate(request)
    gate.verify(get_security_config(request), StarletteRequestDescriptor(request))
