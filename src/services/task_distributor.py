"""Task distribution - split canonical tasks across agents and persist them.

Assignment is block-based: with ``n`` tasks and ``k`` agents every agent
gets a contiguous run of ``ceil(n / k)`` tasks in agent order, and the last
agents may get fewer or none. The index formula keeps a ``% k`` so stored
distributions made with it stay reproducible; since ``ceil(n / k) * k >= n``
the wrap never fires for a non-empty agent list.
"""

import math
from typing import Any, Sequence

from src.models.agent import Agent
from src.models.task import CanonicalTask, Task
from src.services.supabase_client import create_task, create_tasks
from src.utils.logging import get_structured_logger, mask_phone

logger = get_structured_logger(__name__)


def tasks_per_agent(task_count: int, agent_count: int) -> int:
    return math.ceil(task_count / agent_count)


def agent_index(position: int, per_agent: int, agent_count: int) -> int:
    return (position // per_agent) % agent_count


def plan_assignments(
    tasks: Sequence[CanonicalTask],
    agents: Sequence[Agent]
) -> list[tuple[CanonicalTask, Agent]]:
    """Pair every task with its agent without touching the database.

    ``agents`` must be non-empty; callers check this before distributing.
    """
    if not tasks:
        return []
    per_agent = tasks_per_agent(len(tasks), len(agents))
    return [
        (task, agents[agent_index(position, per_agent, len(agents))])
        for position, task in enumerate(tasks)
    ]


def task_record(task: CanonicalTask, agent: Agent) -> dict[str, Any]:
    return {**task.model_dump(), "assigned_to": agent.id}


async def distribute_tasks(
    tasks: Sequence[CanonicalTask],
    agents: Sequence[Agent],
    transactional: bool = False
) -> list[Task]:
    """
    Assign tasks to agents and persist them in input order.

    By default each task is written on its own and awaited before the next
    one starts. A failed write raises PersistenceError and leaves the tasks
    written before it committed. With ``transactional`` all rows go out in a
    single insert, so a failure commits nothing.
    """
    assignments = plan_assignments(tasks, agents)
    if not assignments:
        return []

    logger.info(
        "Distributing tasks",
        task_count=len(assignments),
        agent_count=len(agents),
        tasks_per_agent=tasks_per_agent(len(assignments), len(agents)),
        transactional=transactional
    )

    if transactional:
        return await create_tasks([task_record(task, agent) for task, agent in assignments])

    distributed: list[Task] = []
    for position, (task, agent) in enumerate(assignments):
        try:
            stored = await create_task(task_record(task, agent))
        except Exception:
            logger.error(
                "Distribution stopped by failed write",
                position=position,
                committed=len(distributed),
                remaining=len(assignments) - position,
                phone=mask_phone(task.phone)
            )
            raise
        distributed.append(stored)
    return distributed
