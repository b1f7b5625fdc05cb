"""
Tests for the interval aggregation scheduler.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from core.validation import MAX_INTERVAL_SECONDS
from services.aggregation_scheduler import ALREADY_RUNNING_MESSAGE, AggregationScheduler
from services.batch_processor import BatchProcessResult


@pytest.fixture
def batch_processor() -> MagicMock:
    processor = MagicMock()
    processor.process_batch_aggregation = AsyncMock(
        return_value=BatchProcessResult(success=True, processed_groups=2, processing_time=1.5)
    )
    return processor


@pytest.fixture
async def scheduler(batch_processor):
    aggregation_scheduler = AggregationScheduler(batch_processor)
    yield aggregation_scheduler
    aggregation_scheduler.shutdown()


@pytest.mark.unit
class TestSchedulerStart:
    @pytest.mark.parametrize("interval", [0, -1, "60", None, True, 1e30, float("inf"), float("nan")])
    async def test_invalid_interval_does_not_start(self, scheduler, interval) -> None:
        result = scheduler.start(interval)

        assert result.success is False
        assert result.error
        assert scheduler.is_running() is False

    async def test_start_reports_interval(self, scheduler) -> None:
        result = scheduler.start(30)

        assert result.success is True
        assert result.interval == 30
        assert scheduler.is_running() is True

        status = scheduler.get_status()
        assert status.interval == 30
        assert status.next_execution is not None

    async def test_second_start_fails(self, scheduler) -> None:
        scheduler.start(30)
        result = scheduler.start(10)

        assert result.success is False
        assert result.error == ALREADY_RUNNING_MESSAGE
        assert scheduler.get_status().interval == 30

    async def test_runs_immediately(self, scheduler, batch_processor) -> None:
        scheduler.start(60)
        await asyncio.sleep(0.05)

        batch_processor.process_batch_aggregation.assert_awaited_once()
        assert scheduler.get_status().execution_history[0].processed_groups == 2

    async def test_failing_tick_does_not_stop_later_ticks(self, scheduler, batch_processor) -> None:
        ok = BatchProcessResult(success=True, processed_groups=1, processing_time=1.0)
        calls = 0

        async def flaky() -> BatchProcessResult:
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("first tick failed")
            return ok

        batch_processor.process_batch_aggregation = flaky

        scheduler.start(0.1)
        await asyncio.sleep(0.35)
        scheduler.stop()

        assert calls >= 3
        history = scheduler.get_status().execution_history
        assert history[-1].success is False
        assert history[-1].error == "first tick failed"
        assert history[0].success is True


@pytest.mark.unit
class TestSchedulerStop:
    async def test_stop_clears_state(self, scheduler) -> None:
        scheduler.start(30)
        result = scheduler.stop()

        assert result.success is True
        status = scheduler.get_status()
        assert status.is_running is False
        assert status.interval is None
        assert status.next_execution is None

    async def test_stop_is_idempotent(self, scheduler) -> None:
        assert scheduler.stop().success is True
        assert scheduler.stop().success is True

    async def test_stopped_scheduler_can_start_again(self, scheduler) -> None:
        scheduler.start(30)
        scheduler.stop()
        assert scheduler.start(15).success is True
        assert scheduler.get_status().interval == 15

    async def test_restart_reports_intervals(self, scheduler) -> None:
        scheduler.start(30)

        result = scheduler.restart(10)

        assert result.success is True
        assert result.previous_interval == 30
        assert result.new_interval == 10
        assert scheduler.get_status().interval == 10

    @pytest.mark.parametrize("interval", [0, 1e30])
    async def test_restart_with_invalid_interval_keeps_current_job(self, scheduler, interval) -> None:
        scheduler.start(30)

        result = scheduler.restart(interval)

        assert result.success is False
        assert result.error
        assert scheduler.is_running() is True
        assert scheduler.get_status().interval == 30

    async def test_restart_when_stopped_with_invalid_interval(self, scheduler) -> None:
        result = scheduler.restart(1e30)

        assert result.success is False
        assert scheduler.is_running() is False

    async def test_longest_allowed_interval_starts(self, scheduler) -> None:
        result = scheduler.start(MAX_INTERVAL_SECONDS)

        assert result.success is True
        assert scheduler.get_status().next_execution is not None


@pytest.mark.unit
class TestExecuteTask:
    async def test_history_is_capped_at_fifty(self, batch_processor) -> None:
        scheduler = AggregationScheduler(batch_processor)
        for _ in range(55):
            await scheduler.execute_task()

        assert len(scheduler.get_status().execution_history) == 50

    async def test_skipped_run_is_recorded(self, batch_processor) -> None:
        batch_processor.process_batch_aggregation.return_value = BatchProcessResult(
            success=False, skipped=True, error="Batch aggregation is already running"
        )
        scheduler = AggregationScheduler(batch_processor)

        await scheduler.execute_task()

        entry = scheduler.get_status().execution_history[0]
        assert entry.success is False
        assert entry.error == "Batch aggregation is already running"

    async def test_clear_history(self, batch_processor) -> None:
        scheduler = AggregationScheduler(batch_processor)
        await scheduler.execute_task()

        scheduler.clear_history()

        assert scheduler.get_status().execution_history == []

    async def test_status_history_is_a_copy(self, batch_processor) -> None:
        scheduler = AggregationScheduler(batch_processor)
        await scheduler.execute_task()

        scheduler.get_status().execution_history.clear()

        assert len(scheduler.get_status().execution_history) == 1
