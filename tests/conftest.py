from __future__ import annotations

import io
import json
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from receiver.config import Settings  # noqa: E402
from receiver.main import create_app  # noqa: E402
from receiver.utils.logging import build_logger  # noqa: E402

_CONFIG_ENV = (
    "HOST",
    "PORT",
    "WEBHOOK_VALIDATE_JSON",
    "HEALTH_ENABLED",
    "READ_TIMEOUT",
    "WRITE_TIMEOUT",
    "IDLE_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in _CONFIG_ENV:
        monkeypatch.delenv(key, raising=False)
    yield


class LogCapture:
    def __init__(self) -> None:
        self.stream = io.StringIO()
        self.logger = build_logger("DEBUG", self.stream)

    def records(self) -> list[dict]:
        return [json.loads(line) for line in self.stream.getvalue().splitlines() if line]


@pytest.fixture
def log_capture() -> LogCapture:
    return LogCapture()


@dataclass
class ReceiverTestEnv:
    client: TestClient
    logs: LogCapture


def _make_env(settings: Settings, logs: LogCapture):
    client = TestClient(create_app(settings, logs.logger))
    try:
        yield ReceiverTestEnv(client=client, logs=logs)
    finally:
        client.close()


@pytest.fixture
def receiver(log_capture):
    yield from _make_env(Settings(), log_capture)


@pytest.fixture
def opaque_receiver(log_capture):
    yield from _make_env(Settings(validate_json=False), log_capture)
