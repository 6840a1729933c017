"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import AsyncMock, MagicMock

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("LOG_FORMAT", "text")

from src.models.agent import Agent  # noqa: E402
from src.models.task import Task  # noqa: E402
from src.utils.config import UploadConfig  # noqa: E402


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client whose query builder methods chain."""
    client = MagicMock()
    query = MagicMock()
    for method in ("select", "insert", "update", "eq", "order"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=[])
    client.table.return_value = query
    client.query = query
    return client


@pytest.fixture
def agents():
    """Three agents in directory order."""
    return [
        Agent(id="agent-a", name="Alice", email="alice@example.com"),
        Agent(id="agent-b", name="Bob", email="bob@example.com"),
        Agent(id="agent-c", name="Carol", email="carol@example.com"),
    ]


@pytest.fixture
def fake_create_task():
    """AsyncMock standing in for the single-row insert; echoes a stored task."""
    counter = {"next": 0}

    async def _create(task_data):
        counter["next"] += 1
        return Task(
            id=f"task-{counter['next']:03d}",
            created_at="2024-12-09T12:00:00+00:00",
            updated_at="2024-12-09T12:00:00+00:00",
            **task_data
        )

    return AsyncMock(side_effect=_create)


@pytest.fixture
def upload_tmp_dir(tmp_path, monkeypatch):
    """Stage uploads in an isolated directory so cleanup can be asserted."""
    staging = tmp_path / "uploads"
    staging.mkdir()
    monkeypatch.setattr(UploadConfig, "UPLOAD_TMP_DIR", str(staging))
    return staging
