"""Tests for task distribution across agents."""

from collections import Counter

import pytest
from unittest.mock import AsyncMock, patch

from src.models.agent import Agent
from src.models.task import CanonicalTask, Task
from src.services.task_distributor import (
    agent_index,
    distribute_tasks,
    plan_assignments,
    tasks_per_agent,
)
from src.utils.errors import PersistenceError


def make_tasks(count: int) -> list[CanonicalTask]:
    return [CanonicalTask(first_name=f"Contact{i}", phone=f"{i:010d}") for i in range(count)]


def make_agents(count: int) -> list[Agent]:
    return [Agent(id=f"agent-{i}", name=f"Agent {i}") for i in range(count)]


@pytest.mark.unit
def test_ten_tasks_three_agents_split_four_four_two():
    assignments = plan_assignments(make_tasks(10), make_agents(3))

    assert tasks_per_agent(10, 3) == 4
    assert [agent.id for _, agent in assignments] == (
        ["agent-0"] * 4 + ["agent-1"] * 4 + ["agent-2"] * 2
    )


@pytest.mark.unit
def test_seven_tasks_three_agents_split_three_three_one():
    counts = Counter(agent.id for _, agent in plan_assignments(make_tasks(7), make_agents(3)))

    assert counts == {"agent-0": 3, "agent-1": 3, "agent-2": 1}


@pytest.mark.unit
def test_trailing_agents_can_receive_nothing():
    # ceil(4 / 3) = 2, so the third agent is never reached
    counts = Counter(agent.id for _, agent in plan_assignments(make_tasks(4), make_agents(3)))

    assert counts == {"agent-0": 2, "agent-1": 2}


@pytest.mark.unit
def test_more_agents_than_tasks():
    assignments = plan_assignments(make_tasks(2), make_agents(5))

    assert [agent.id for _, agent in assignments] == ["agent-0", "agent-1"]


@pytest.mark.unit
def test_index_formula_wraps_modulo_agent_count():
    # Only reachable with a block size smaller than ceil(n / k)
    assert [agent_index(i, 2, 3) for i in range(8)] == [0, 0, 1, 1, 2, 2, 0, 0]


@pytest.mark.unit
@pytest.mark.parametrize("n", range(1, 26))
@pytest.mark.parametrize("k", range(1, 8))
def test_every_task_assigned_exactly_once(n, k):
    tasks = make_tasks(n)
    agents = make_agents(k)

    assignments = plan_assignments(tasks, agents)

    assert [task for task, _ in assignments] == tasks
    per_agent = tasks_per_agent(n, k)
    for position, (_, agent) in enumerate(assignments):
        index = agents.index(agent)
        assert 0 <= index < k
        # The wrap never fires for a non-empty agent list
        assert index == position // per_agent
    assert sum(Counter(agent.id for _, agent in assignments).values()) == n


@pytest.mark.unit
def test_assignment_is_deterministic():
    tasks, agents = make_tasks(17), make_agents(4)

    first = [agent.id for _, agent in plan_assignments(tasks, agents)]
    second = [agent.id for _, agent in plan_assignments(list(tasks), list(agents))]

    assert first == second


@pytest.mark.unit
def test_no_tasks_plans_nothing():
    assert plan_assignments([], make_agents(3)) == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_distribute_persists_sequentially_in_input_order(fake_create_task):
    tasks, agents = make_tasks(10), make_agents(3)

    with patch("src.services.task_distributor.create_task", fake_create_task):
        distributed = await distribute_tasks(tasks, agents)

    assert fake_create_task.await_count == 10
    written = [call.args[0] for call in fake_create_task.await_args_list]
    assert [record["phone"] for record in written] == [task.phone for task in tasks]
    assert written[0] == {
        "first_name": "Contact0",
        "phone": "0000000000",
        "notes": "",
        "assigned_to": "agent-0",
    }
    assert [task.assigned_to for task in distributed] == (
        ["agent-0"] * 4 + ["agent-1"] * 4 + ["agent-2"] * 2
    )
    assert all(isinstance(task, Task) for task in distributed)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_distribute_waits_for_each_write_before_the_next():
    in_flight = []
    max_in_flight = []

    async def _create(task_data):
        in_flight.append(task_data)
        max_in_flight.append(len(in_flight))
        stored = Task(id=f"t{len(max_in_flight)}", **task_data)
        in_flight.pop()
        return stored

    with patch("src.services.task_distributor.create_task", AsyncMock(side_effect=_create)):
        await distribute_tasks(make_tasks(6), make_agents(2))

    assert max(max_in_flight) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_write_stops_distribution_and_keeps_earlier_writes(fake_create_task):
    committed = []

    async def _create(task_data):
        if len(committed) == 3:
            raise PersistenceError("Failed to create task: connection reset")
        stored = await fake_create_task(task_data)
        committed.append(stored)
        return stored

    create = AsyncMock(side_effect=_create)
    with patch("src.services.task_distributor.create_task", create):
        with pytest.raises(PersistenceError):
            await distribute_tasks(make_tasks(10), make_agents(3))

    # No rollback: the three earlier rows stay written, nothing after the failure is attempted
    assert len(committed) == 3
    assert create.await_count == 4


@pytest.mark.unit
@pytest.mark.asyncio
async def test_transactional_mode_uses_single_insert():
    tasks, agents = make_tasks(5), make_agents(2)

    async def _create_many(records):
        return [Task(id=f"t{i}", **record) for i, record in enumerate(records)]

    create_many = AsyncMock(side_effect=_create_many)
    create_one = AsyncMock()
    with patch("src.services.task_distributor.create_tasks", create_many), \
            patch("src.services.task_distributor.create_task", create_one):
        distributed = await distribute_tasks(tasks, agents, transactional=True)

    create_many.assert_awaited_once()
    create_one.assert_not_awaited()
    assert [task.assigned_to for task in distributed] == ["agent-0"] * 3 + ["agent-1"] * 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_distribute_nothing_touches_no_storage(fake_create_task):
    with patch("src.services.task_distributor.create_task", fake_create_task):
        assert await distribute_tasks([], make_agents(2)) == []

    fake_create_task.assert_not_awaited()
