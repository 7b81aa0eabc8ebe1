"""Test configuration for repo-root tests."""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from todo_backend.config import Settings  # noqa: E402
from todo_backend.main import create_app  # noqa: E402
from todo_backend.repositories.memory import InMemoryTodoRepository  # noqa: E402


@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated in-memory app without the sample todo."""
    return Settings(storage_backend="memory", seed_sample=False)


@pytest.fixture
def repository() -> InMemoryTodoRepository:
    return InMemoryTodoRepository(seed_sample=False)


@pytest.fixture
def client(settings: Settings, repository: InMemoryTodoRepository):
    """Provide a TestClient with lifespan events running."""
    app = create_app(settings, repository=repository)
    with TestClient(app) as test_client:
        yield test_client
