"""Supabase client wrapper with async context manager support."""

import os
from datetime import datetime, timezone
from typing import Any, Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from ulid import ULID

from src.models.agent import Agent
from src.models.task import Task
from src.utils.config import AuthConfig
from src.utils.errors import PersistenceError
from src.utils.logging import get_structured_logger, timed

logger = get_structured_logger(__name__)

USERS_TABLE = "users"
TASKS_TABLE = "tasks"
AGENT_COLUMNS = "id, name, email, mobile_number, country_code, created_at"

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise PersistenceError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", url=url)

    return _client


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                error=str(exc_val),
                error_type=exc_type.__name__
            )
        return False


def generate_task_id() -> str:
    """Generate a text-based task ID (ULID format)."""
    return str(ULID())


def build_task_record(task_data: dict[str, Any]) -> dict[str, Any]:
    """Attach a fresh ID to a snake_case task row ready for insert."""
    return {"id": generate_task_id(), **task_data}


# Users table operations (agent directory)
@timed("supabase.find_agents")
async def find_agents() -> list[Agent]:
    """Get all agent accounts, oldest first."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(USERS_TABLE)
                .select(AGENT_COLUMNS)
                .eq("role", AuthConfig.AGENT_ROLE)
                .order("created_at")
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to get agents: {e}") from e
    return [Agent(**row) for row in result.data or []]


# Tasks table operations
async def create_task(task_data: dict[str, Any]) -> Task:
    """Insert a single task row and return the stored task."""
    async with SupabaseClient() as client:
        try:
            result = client.table(TASKS_TABLE).insert(build_task_record(task_data)).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to create task: {e}") from e
    if not result.data:
        raise PersistenceError("Failed to create task: no data returned")
    return Task(**result.data[0])


async def create_tasks(tasks_data: list[dict[str, Any]]) -> list[Task]:
    """Insert many task rows in one statement; all rows commit or none do."""
    records = [build_task_record(task_data) for task_data in tasks_data]
    async with SupabaseClient() as client:
        try:
            result = client.table(TASKS_TABLE).insert(records).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to create tasks: {e}") from e
    if not result.data or len(result.data) != len(records):
        raise PersistenceError("Failed to create tasks: unexpected insert result")
    # PostgREST does not promise to return rows in insert order
    by_id = {row["id"]: row for row in result.data}
    return [Task(**by_id[record["id"]]) for record in records]


async def list_tasks(agent_id: Optional[str] = None) -> list[Task]:
    """Get tasks newest first, optionally only those assigned to one agent."""
    async with SupabaseClient() as client:
        try:
            query = client.table(TASKS_TABLE).select("*")
            if agent_id:
                query = query.eq("assigned_to", agent_id)
            result = query.order("created_at", desc=True).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to list tasks: {e}") from e
    return [Task(**row) for row in result.data or []]


async def get_task(task_id: str) -> Optional[Task]:
    """Get a task by ID."""
    async with SupabaseClient() as client:
        try:
            result = client.table(TASKS_TABLE).select("*").eq("id", task_id).execute()
        except Exception as e:
            raise PersistenceError(f"Failed to get task: {e}") from e
    return Task(**result.data[0]) if result.data else None


async def update_task(task_id: str, updates: dict[str, Any]) -> Task:
    """Update a task's mutable fields."""
    async with SupabaseClient() as client:
        try:
            result = (
                client.table(TASKS_TABLE)
                .update({**updates, "updated_at": datetime.now(timezone.utc).isoformat()})
                .eq("id", task_id)
                .execute()
            )
        except Exception as e:
            raise PersistenceError(f"Failed to update task: {e}") from e
    if not result.data:
        raise PersistenceError(f"Failed to update task: {task_id}")
    return Task(**result.data[0])
