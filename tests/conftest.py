"""Shared pytest fixtures/helpers for codeshare tests.

This file is auto-loaded by pytest for the whole `tests/` folder. It
centralizes the in-memory channel, language catalogs that run on the
current interpreter, and the wired-up services so each test file can stay
focused on behavior.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from threading import Lock

import pytest

from codeshare.app import create_app
from codeshare.execution.catalog import LanguageCatalog, default_languages
from codeshare.execution.models import ExecutionMode, LanguageSpec
from codeshare.execution.orchestrator import ExecutionOrchestrator
from codeshare.execution.service import CodeRunService
from codeshare.realtime.gateway import BroadcastGateway
from codeshare.realtime.service import RealtimeService
from codeshare.workspace.registry import RoomRegistry


class RecordingChannel:
    """Channel that records every delivery instead of sending it."""

    def __init__(self):
        self.sent: list[tuple[str, str, object]] = []
        self._lock = Lock()

    def send(self, connection_id, event, payload):
        with self._lock:
            self.sent.append((connection_id, event, payload))

    def events_for(self, connection_id: str) -> list[tuple[str, object]]:
        with self._lock:
            return [(event, payload) for cid, event, payload in self.sent if cid == connection_id]

    def names_for(self, connection_id: str) -> list[str]:
        return [event for event, _payload in self.events_for(connection_id)]

    def payloads(self, connection_id: str, event: str) -> list[object]:
        return [payload for name, payload in self.events_for(connection_id) if name == event]

    def clear(self):
        with self._lock:
            self.sent.clear()


def python_spec(**overrides) -> LanguageSpec:
    """Interpreted Python on the interpreter running the tests."""
    spec = LanguageSpec(
        id="python",
        display_name="Python",
        extensions=(".py",),
        mode=ExecutionMode.INTERPRET,
        run_command=(sys.executable, "{source}"),
        timeout_s=10,
    )
    return replace(spec, **overrides)


def compiled_python_spec(**overrides) -> LanguageSpec:
    """Two-phase language: py_compile as the compiler, the interpreter as the runtime."""
    spec = LanguageSpec(
        id="compiled-python",
        display_name="Compiled Python",
        extensions=(".py",),
        mode=ExecutionMode.COMPILE_THEN_RUN,
        compile_command=(sys.executable, "-m", "py_compile", "{source}"),
        run_command=(sys.executable, "{source}"),
        timeout_s=10,
    )
    return replace(spec, **overrides)


def local_catalog() -> LanguageCatalog:
    """Default catalog with Python pointed at the current interpreter."""
    specs = [
        replace(spec, run_command=(sys.executable, "{source}")) if spec.id == "python" else spec
        for spec in default_languages()
    ]
    return LanguageCatalog(specs)


@pytest.fixture
def registry():
    return RoomRegistry()


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def gateway(registry, channel):
    return BroadcastGateway(registry, channel)


@pytest.fixture
def realtime(registry, gateway):
    return RealtimeService(registry, gateway)


@pytest.fixture
def orchestrator(tmp_path):
    return ExecutionOrchestrator(local_catalog(), temp_dir=str(tmp_path))


@pytest.fixture
def run_service(registry, gateway, orchestrator):
    return CodeRunService(registry, orchestrator.catalog, orchestrator, gateway)


@pytest.fixture
def app(tmp_path):
    return create_app({
        "TESTING": True,
        "LANGUAGE_CATALOG": local_catalog(),
        "EXECUTION_TEMP_DIR": str(tmp_path),
    })


@pytest.fixture
def http_client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def make_python_spec():
    return python_spec


@pytest.fixture
def make_compiled_spec():
    return compiled_python_spec
