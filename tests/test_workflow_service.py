"""Tests for applying status transitions."""

import asyncio
from dataclasses import replace

import pytest

from practice_desk.api import PracticeAPIError
from practice_desk.cache import TASKS_KEY, QueryCache, task_key
from practice_desk.workflow.service import TaskWorkflowService
from practice_desk.workflow.transitions import (
    ConfigurationError,
    IllegalTransitionError,
    TransitionInProgressError,
)


@pytest.fixture
def service(mock_api, statuses, task):
    mock_api.list_task_statuses.return_value = statuses
    mock_api.get_task.return_value = task
    return TaskWorkflowService(mock_api, QueryCache())


class TestApplyTransition:
    """Tests for TaskWorkflowService.apply_transition."""

    @pytest.mark.asyncio
    async def test_applies_reachable_transition(self, service, mock_api, task):
        mock_api.update_task_status.return_value = replace(task, status_id=2)

        updated = await service.apply_transition(task.id, 2)

        assert updated.status_id == 2
        mock_api.update_task_status.assert_awaited_once_with(task.id, 2)

    @pytest.mark.asyncio
    async def test_invalidates_collection_and_task_caches(self, service, mock_api, task):
        service.cache.set(TASKS_KEY, [task])
        mock_api.update_task_status.return_value = replace(task, status_id=2)

        await service.apply_transition(task.id, 2)

        assert TASKS_KEY not in service.cache
        assert task_key(task.id) not in service.cache

    @pytest.mark.asyncio
    async def test_same_status_is_a_noop(self, service, mock_api, task):
        first = await service.apply_transition(task.id, task.status_id)
        second = await service.apply_transition(task.id, task.status_id)

        assert first.status_id == second.status_id == task.status_id
        mock_api.update_task_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rejects_unreachable_status(self, service, mock_api, task):
        in_progress = replace(task, status_id=2)
        mock_api.get_task.return_value = in_progress

        with pytest.raises(IllegalTransitionError) as exc_info:
            # Drafting (2.1) cannot go back to New
            await service.apply_transition(task.id, 1)

        assert exc_info.value.target_id == 1
        mock_api.update_task_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_completed_task_cannot_move(self, service, mock_api, task):
        mock_api.get_task.return_value = replace(task, status_id=4)

        with pytest.raises(IllegalTransitionError):
            await service.apply_transition(task.id, 3)

    @pytest.mark.asyncio
    async def test_backend_rejection_keeps_cache(self, service, mock_api, task):
        service.cache.set(TASKS_KEY, [task])
        mock_api.update_task_status.side_effect = PracticeAPIError(
            "API error: 403", status_code=403
        )

        with pytest.raises(PracticeAPIError):
            await service.apply_transition(task.id, 2)

        assert service.cache.get(TASKS_KEY) == [task]
        assert service.cache.get(task_key(task.id)).status_id == task.status_id
        assert not service.is_in_flight(task.id)

    @pytest.mark.asyncio
    async def test_second_transition_while_in_flight(self, service, mock_api, task):
        release = asyncio.Event()

        async def slow_update(task_id, status_id):
            await release.wait()
            return replace(task, status_id=status_id)

        mock_api.update_task_status.side_effect = slow_update

        first = asyncio.create_task(service.apply_transition(task.id, 2))
        await asyncio.sleep(0)
        assert service.is_in_flight(task.id)

        with pytest.raises(TransitionInProgressError):
            await service.apply_transition(task.id, 3)

        release.set()
        updated = await first
        assert updated.status_id == 2
        assert not service.is_in_flight(task.id)


class TestCompleteTask:
    """Tests for TaskWorkflowService.complete_task."""

    @pytest.mark.asyncio
    async def test_moves_to_completed(self, service, mock_api, task):
        mock_api.update_task_status.return_value = replace(task, status_id=4)

        updated = await service.complete_task(task.id)

        assert updated.status_id == 4
        mock_api.update_task_status.assert_awaited_once_with(task.id, 4)

    @pytest.mark.asyncio
    async def test_missing_completed_status_sends_nothing(
        self, service, mock_api, statuses, task
    ):
        mock_api.list_task_statuses.return_value = statuses[:3]

        with pytest.raises(ConfigurationError):
            await service.complete_task(task.id)

        mock_api.update_task_status.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_statuses_fetched_once(self, service, mock_api, task):
        await service.transitions_for(task.id)
        await service.transitions_for(task.id)

        mock_api.list_task_statuses.assert_awaited_once()
