"""
tests/conftest.py -- Shared test doubles and fixtures.

This module provides:
  - FakeRequest: minimal RequestDescriptor (uri + method)
  - RecordingCheck / make_check(): check doubles that record every execute()
  - registry: a fresh CheckRegistry per test
  - make_client(): builds an isolated FastAPI app + TestClient from a config

Every app is created with its own Settings and CheckRegistry, so tests never
share gate state through core.registry.default_registry or get_settings().
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from dataclasses import dataclass, field
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from core.config import Settings
from core.contracts import AbstractCheck
from core.models import SecurityConfig
from core.registry import CheckRegistry

# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


@dataclass
class FakeRequest:
    uri: str
    method: str = "GET"

    def get_uri(self) -> str:
        return self.uri

    def get_method(self) -> str:
        return self.method


@dataclass
class CallLog:
    """Records check executions across the fresh instances a registry builds."""

    calls: list[str] = field(default_factory=list)

    def count(self, name: str) -> int:
        return self.calls.count(name)


class RecordingCheck(AbstractCheck):
    result: bool = True
    log: Optional[CallLog] = None
    label: str = ""

    def execute(self) -> bool:
        if self.log is not None:
            self.log.calls.append(self.label)
        return self.result


def make_check(label: str, result: bool, log: CallLog) -> type[RecordingCheck]:
    """Return a RecordingCheck subclass usable directly as a registry factory."""
    class_name = f"{label.title().replace('_', '')}Check"
    return type(class_name, (RecordingCheck,), {"result": result, "log": log, "label": label})


class NotACheck:
    """Resolves fine but has no execute()."""

    def __init__(self, request: Any = None) -> None:
        self.request = request


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()


@pytest.fixture
def registry() -> CheckRegistry:
    return CheckRegistry()


@pytest.fixture
def make_client() -> Generator[Callable[..., TestClient], None, None]:
    """Yield a builder: make_client(security_dict, registry) -> TestClient.

    allowed_hosts defaults to TestClient's default host so TrustedHostMiddleware
    lets requests through. Pass ["*"] to send arbitrary Host headers.
    """
    clients: list[TestClient] = []

    def _build(
        security: Optional[dict], registry: CheckRegistry, allowed_hosts: Optional[list[str]] = None
    ) -> TestClient:
        settings = Settings(
            allowed_hosts=allowed_hosts if allowed_hosts is not None else ["testserver"],
            security=SecurityConfig.model_validate(security) if security is not None else None,
            security_config_file="",
            check_modules=[],
        )
        app = create_app(settings=settings, registry=registry)

        @app.get("/api/v1/widgets")
        async def list_widgets() -> list[str]:
            return ["sprocket"]

        @app.post("/api/v1/widgets")
        async def create_widget() -> dict:
            return {"created": True}

        client = TestClient(app, raise_server_exceptions=True)
        clients.append(client)
        return client

    yield _build

    for client in clients:
        client.close()
