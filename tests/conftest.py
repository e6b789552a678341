"""
Pytest fixtures for perimeter proxy tests
"""

from typing import Any, Dict, List

import jwt
import pytest

from core.config import Config

TEST_KEY = "perimeter-test-signing-key-0123456789"


class RecordingLogger:
    """RequestLogger that keeps calls in memory"""

    def __init__(self):
        self.forwarded: List[Dict[str, Any]] = []
        self.rejected: List[tuple] = []
        self.errors: List[tuple] = []

    def log_forward(self, identity, body, headers, *, path):
        self.forwarded.append(
            {"identity": identity, "body": body, "headers": headers, "path": path}
        )

    def log_rejected(self, path, status, message):
        self.rejected.append((path, status, message))

    def log_error(self, route, status, message):
        self.errors.append((route, status, message))


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Keep JSON and CLI logs out of the working directory"""
    log_root = tmp_path / "logs"
    monkeypatch.setattr("ui.log_utils.LOG_ROOT", log_root)
    monkeypatch.setattr("ui.log_utils.CLI_LOG_FILE", log_root / "proxy.log")
    return log_root


@pytest.fixture
def config() -> Config:
    """Default config pointing at a fake destination"""
    return Config.model_validate(
        {"destination": {"url": "http://destination.test/anything", "timeout": 2.0}}
    )


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def make_token():
    """Mint a signed JWT for the given claims"""

    def _make(claims: Dict[str, Any], key: str = TEST_KEY) -> str:
        return jwt.encode(claims, key, algorithm="HS256")

    return _make


@pytest.fixture
def signing_key() -> str:
    return TEST_KEY
