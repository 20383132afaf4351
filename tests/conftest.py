"""
Test fixtures for the Chat Session API.

Tests exercise the real SQLAlchemy store against in-memory SQLite and
replace the completion provider with a deterministic fake. No network
calls are made.

Architecture:
    TestClient --> FastAPI app --> routers --> use cases --> SQLite store
    Fakes: completion gateway, controllable clock.
"""

import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

# ---------------------------------------------------------------------------
# Environment setup (must precede backend imports)
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api.deps import get_completion_gateway
from application.errors import GatewayError
from application.ports.completion_gateway import CompletionConfig, CompletionResult
from backend.main import create_app
from backend.settings import Settings
from infrastructure.db.chat_session_repository import SqlChatSessionRepository
from infrastructure.db.database import Database


# ============================================================================
# Fakes
# ============================================================================


class FakeCompletionGateway:
    """Deterministic completion provider.

    - Set .reply / .total_tokens for the next responses
    - Set .error to make every call raise it
    - Inspect .calls for the (messages, config) pairs received
    """

    def __init__(self) -> None:
        self.reply = "Hello from the assistant"
        self.total_tokens = 42
        self.error: Optional[GatewayError] = None
        self.calls: List[tuple] = []

    def complete(
        self, messages: List[Dict[str, str]], config: CompletionConfig
    ) -> CompletionResult:
        self.calls.append((list(messages), config))
        if self.error is not None:
            raise self.error
        return CompletionResult(
            text=self.reply, total_tokens=self.total_tokens, model=config.model
        )


class FakeClock:
    """Strictly increasing timestamps; .rewind() simulates clock skew."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(seconds=1)
        return self.now

    def rewind(self, seconds: int) -> None:
        self.now = self.now - timedelta(seconds=seconds)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        database_url="sqlite://",
        groq_api_key=None,
        static_dir="__no_static_dir__",
        _env_file=None,
    )


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.open()
    yield db
    db.close()


@pytest.fixture
def clock(monkeypatch) -> FakeClock:
    fake = FakeClock()
    monkeypatch.setattr("infrastructure.db.chat_session_repository.utcnow", fake)
    return fake


@pytest.fixture
def session_repo(database) -> SqlChatSessionRepository:
    return SqlChatSessionRepository(database)


@pytest.fixture
def gateway() -> FakeCompletionGateway:
    return FakeCompletionGateway()


@pytest.fixture
def chat_app(settings):
    return create_app(settings=settings)


@pytest.fixture
def client(chat_app, gateway):
    chat_app.dependency_overrides[get_completion_gateway] = lambda: gateway
    # Context manager runs startup/shutdown, which opens the store.
    with TestClient(chat_app) as test_client:
        yield test_client
    chat_app.dependency_overrides.clear()
