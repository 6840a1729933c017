"""Task listing and post-distribution updates."""

from typing import Any, Optional

from pydantic import ValidationError

from src.models.task import Task, TaskUpdate
from src.services.auth import AuthenticatedUser
from src.services.supabase_client import get_task, list_tasks, update_task
from src.utils.errors import AuthorizationError, InvalidUpdateError, TaskNotFoundError
from src.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)

ALLOWED_UPDATES = ("status", "notes")


async def get_tasks(agent_id: Optional[str] = None) -> list[Task]:
    return await list_tasks(agent_id)


def parse_task_update(body: Any) -> TaskUpdate:
    """Accept only ``status`` and ``notes``; anything else is an invalid update."""
    if not isinstance(body, dict) or not all(key in ALLOWED_UPDATES for key in body):
        raise InvalidUpdateError()
    try:
        return TaskUpdate(**body)
    except ValidationError as e:
        raise InvalidUpdateError(f"Invalid updates! {e.errors()[0]['msg']}") from e


async def apply_task_update(task_id: str, body: Any, user: AuthenticatedUser) -> Task:
    """
    Update a task's status and/or notes.

    Admins may update any task; agents only the tasks assigned to them.
    """
    update = parse_task_update(body)

    task = await get_task(task_id)
    if task is None:
        raise TaskNotFoundError()

    if not user.is_admin and task.assigned_to != user.id:
        logger.warning(
            "Task update denied",
            task_id=task_id,
            user_id=mask_user_id(user.id)
        )
        raise AuthorizationError("Not authorized to update this task")

    changes = update.model_dump(mode="json", exclude_none=True)
    if not changes:
        return task
    updated = await update_task(task_id, changes)
    logger.info("Task updated", task_id=task_id, fields=sorted(changes))
    return updated
