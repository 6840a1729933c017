"""Distribution summary - per-agent task counts for an upload."""

from typing import Sequence

from src.models.agent import Agent
from src.models.task import Task
from src.models.upload import AgentTaskCount, RowStats, UploadSummary
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def summarize_distribution(tasks: Sequence[Task], agents: Sequence[Agent]) -> list[AgentTaskCount]:
    """
    Count tasks per assigned agent.

    Entries follow the order in which each agent first appears in ``tasks``;
    agents that received nothing are left out.
    """
    counts: dict[str, int] = {}
    for task in tasks:
        counts[task.assigned_to] = counts.get(task.assigned_to, 0) + 1

    names = {agent.id: agent.name for agent in agents}
    distribution = []
    for agent_id, count in counts.items():
        name = names.get(agent_id)
        if name is None:
            logger.warning("Assigned agent missing from snapshot", agent_id=agent_id)
            name = agent_id
        distribution.append(AgentTaskCount(agent_name=name, task_count=count))
    return distribution


def build_upload_summary(
    tasks: Sequence[Task],
    agents: Sequence[Agent],
    stats: RowStats
) -> UploadSummary:
    return UploadSummary(
        total_tasks=len(tasks),
        total_rows=stats.total,
        invalid_rows=stats.invalid,
        distribution=summarize_distribution(tasks, agents),
    )
