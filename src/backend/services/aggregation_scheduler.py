"""
Aggregation Scheduler

Runs the batch processor on a fixed interval using APScheduler:
- one run immediately on start
- then one run every ``interval`` seconds until stopped

A failing run is recorded in the execution history and never cancels
later runs. This runs in-process with the FastAPI application.
"""

import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from core.validation import MAX_INTERVAL_SECONDS, is_valid_interval
from services.batch_processor import BatchProcessor

logger = logging.getLogger(__name__)

JOB_ID = "batch_aggregation"
DEFAULT_INTERVAL_SECONDS = 60
DEFAULT_HISTORY_LIMIT = 50
ALREADY_RUNNING_MESSAGE = "Scheduler is already running"


@dataclass
class SchedulerResult:
    success: bool
    interval: Optional[float] = None
    previous_interval: Optional[float] = None
    new_interval: Optional[float] = None
    error: Optional[str] = None


@dataclass
class ExecutionHistoryEntry:
    timestamp: datetime
    success: bool
    processed_groups: Optional[int] = None
    processing_time: Optional[float] = None
    error: Optional[str] = None


@dataclass
class SchedulerStatus:
    is_running: bool
    interval: Optional[float]
    next_execution: Optional[datetime]
    execution_history: list[ExecutionHistoryEntry]


def _invalid_interval(interval_seconds: object) -> SchedulerResult:
    return SchedulerResult(
        success=False,
        error=(
            f"Interval must be a positive number of seconds up to {MAX_INTERVAL_SECONDS}, "
            f"got {interval_seconds!r}"
        ),
    )


class AggregationScheduler:
    """
    Stopped <-> Running state machine around one interval job.

    ``is_running`` is exactly "the job handle is set". The underlying
    APScheduler instance is created on first start, inside the running
    event loop, and lives until ``shutdown``.
    """

    def __init__(self, batch_processor: BatchProcessor, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.batch_processor = batch_processor
        self._scheduler: AsyncIOScheduler | None = None
        self._job: Job | None = None
        self._interval: Optional[float] = None
        self._next_execution: Optional[datetime] = None
        self._history: deque[ExecutionHistoryEntry] = deque(maxlen=history_limit)

    def get_scheduler(self) -> AsyncIOScheduler:
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        if not self._scheduler.running:
            self._scheduler.start()
        return self._scheduler

    def is_running(self) -> bool:
        return self._job is not None

    def start(self, interval_seconds: float = DEFAULT_INTERVAL_SECONDS) -> SchedulerResult:
        """Run the batch once now, then every ``interval_seconds``."""
        if self.is_running():
            logger.info("Aggregation scheduler already running")
            return SchedulerResult(success=False, error=ALREADY_RUNNING_MESSAGE)

        if not is_valid_interval(interval_seconds):
            return _invalid_interval(interval_seconds)

        now = datetime.now(timezone.utc)
        self._job = self.get_scheduler().add_job(
            self.execute_task,
            trigger=IntervalTrigger(seconds=interval_seconds, timezone=timezone.utc),
            id=JOB_ID,
            name="Batch Aggregation",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=None,
            next_run_time=now,
        )
        self._interval = interval_seconds
        self._next_execution = now + timedelta(seconds=interval_seconds)

        logger.info(f"Aggregation scheduler started (every {interval_seconds}s)")
        return SchedulerResult(success=True, interval=interval_seconds)

    def stop(self) -> SchedulerResult:
        """Remove the interval job. Calling it while stopped is a no-op."""
        if self._job is not None:
            try:
                self._job.remove()
            except JobLookupError:
                logger.debug("Aggregation job already removed")
            logger.info("Aggregation scheduler stopped")

        self._job = None
        self._interval = None
        self._next_execution = None
        return SchedulerResult(success=True)

    def restart(self, interval_seconds: float = DEFAULT_INTERVAL_SECONDS) -> SchedulerResult:
        """Swap to a new interval. An invalid interval leaves the current job running."""
        if not is_valid_interval(interval_seconds):
            return _invalid_interval(interval_seconds)

        previous_interval = self._interval
        self.stop()

        started = self.start(interval_seconds)
        if not started.success:
            return started

        return SchedulerResult(
            success=True,
            interval=interval_seconds,
            previous_interval=previous_interval,
            new_interval=interval_seconds,
        )

    async def execute_task(self) -> None:
        """
        One scheduled tick.

        Every tick lands in the history, whatever the outcome.
        """
        try:
            result = await self.batch_processor.process_batch_aggregation()
            entry = ExecutionHistoryEntry(
                timestamp=datetime.now(timezone.utc),
                success=result.success,
                processed_groups=result.processed_groups,
                processing_time=result.processing_time,
                error=result.error,
            )
        except Exception as e:
            logger.error(f"Scheduled aggregation failed: {e}", exc_info=True)
            entry = ExecutionHistoryEntry(
                timestamp=datetime.now(timezone.utc),
                success=False,
                error=str(e),
            )

        self._history.appendleft(entry)
        if self._interval is not None:
            self._next_execution = datetime.now(timezone.utc) + timedelta(seconds=self._interval)

    def get_status(self) -> SchedulerStatus:
        return SchedulerStatus(
            is_running=self.is_running(),
            interval=self._interval,
            next_execution=self._next_execution,
            execution_history=list(self._history),
        )

    def clear_history(self) -> None:
        self._history.clear()

    def shutdown(self) -> None:
        """Stop the job and shut APScheduler down (application shutdown)."""
        self.stop()
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Aggregation scheduler shut down")
        self._scheduler = None
