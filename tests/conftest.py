"""Shared pytest configuration and fixtures for CCS Router tests."""

import json
import textwrap
from pathlib import Path

import pytest

from ccs_router.core.health import (
    AuthStatus,
    HealthCache,
    HealthMonitor,
    ProcessInfo,
)
from ccs_router.core.provider import ProviderResolver
from ccs_router.core.routing_config import RoutingConfigEditor, RoutingConfigLoader

# Import HTTP mocking fixtures from fixtures module
pytest_plugins = ["tests.fixtures.mock_http"]


class FakeClock:
    """Manually advanced clock returning epoch-like seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeAuthStatus:
    """Auth-status collaborator backed by a set of authenticated providers."""

    def __init__(self, authenticated: set[str] | None = None) -> None:
        self.authenticated = set(authenticated or ())
        self.calls: list[str] = []

    def get_auth_status(self, provider: str) -> AuthStatus:
        self.calls.append(provider)
        return AuthStatus(authenticated=provider in self.authenticated)


class FakePortInspector:
    """Port collaborator that reports a configurable listener and counts port checks."""

    def __init__(self, process: ProcessInfo | None = None) -> None:
        self.process = process
        self.port_checks = 0

    def get_process_on_port(self, port: int) -> ProcessInfo | None:
        self.port_checks += 1
        return self.process

    def is_expected_process(self, info: ProcessInfo) -> bool:
        return "cli-proxy-api" in info.name


CLIPROXY_PROCESS = ProcessInfo(pid=4242, name="cli-proxy-api", cmdline=("cli-proxy-api",))


@pytest.fixture
def ccs_home(tmp_path: Path) -> Path:
    home = tmp_path / ".ccs"
    home.mkdir()
    return home


@pytest.fixture
def config_path(ccs_home: Path) -> Path:
    return ccs_home / "config.yaml"


@pytest.fixture
def write_config(config_path: Path):
    """Write a (dedented) routing document and return its path."""

    def _write(text: str) -> Path:
        config_path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return config_path

    return _write


@pytest.fixture
def write_settings(ccs_home: Path):
    """Write a credential-profile settings file and return its path."""

    def _write(name: str, env: dict | None = None, raw: str | None = None) -> Path:
        path = ccs_home / f"{name}.settings.json"
        content = raw if raw is not None else json.dumps({"env": env or {}})
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def loader(config_path: Path) -> RoutingConfigLoader:
    return RoutingConfigLoader(config_path)


@pytest.fixture
def resolver(loader: RoutingConfigLoader) -> ProviderResolver:
    return ProviderResolver(loader, environ={})


@pytest.fixture
def editor(config_path: Path) -> RoutingConfigEditor:
    return RoutingConfigEditor(config_path)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_status() -> FakeAuthStatus:
    return FakeAuthStatus()


@pytest.fixture
def port_inspector() -> FakePortInspector:
    return FakePortInspector(CLIPROXY_PROCESS)


@pytest.fixture
def health_monitor(auth_status, port_inspector, clock) -> HealthMonitor:
    return HealthMonitor(
        auth_status,
        port_inspector,
        cache=HealthCache(ttl=30),
        clock=clock,
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, no external deps)")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires services)"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        if "tests/unit/" in str(item.fspath) or "tests/api/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
