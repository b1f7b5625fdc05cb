"""
Batch Processor

Runs one aggregate -> rank -> cache cycle at a time per process and keeps a
short log of recent runs.

The single-flight guard is local to this process. It is not a distributed
lock: schedulers in two processes can still race on the result cache.
"""

import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from models.documents import utcnow
from services.aggregation_service import AggregationService
from services.config_service import ConfigService
from services.result_service import ResultService

logger = structlog.get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 10
ALREADY_RUNNING_MESSAGE = "Batch aggregation is already running"


class SingleFlightGuard:
    """Capacity-one guard with a non-blocking try-acquire."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        self._lock.release()

    @property
    def is_held(self) -> bool:
        return self._lock.locked()


@dataclass
class BatchProcessResult:
    success: bool
    processed_groups: Optional[int] = None
    processing_time: Optional[float] = None  # milliseconds
    error: Optional[str] = None
    skipped: bool = False


@dataclass
class ProcessingHistoryEntry:
    timestamp: datetime
    success: bool
    processed_groups: Optional[int] = None
    processing_time: Optional[float] = None
    error: Optional[str] = None


@dataclass
class ProcessingStatus:
    is_processing: bool
    last_processed: Optional[datetime]


class BatchProcessor:
    """
    Owns the single-flight guard and the run history.

    One instance lives in the application context; tests build their own.
    """

    def __init__(
        self,
        aggregation_service: AggregationService,
        result_service: ResultService,
        config_service: ConfigService,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        self.aggregation_service = aggregation_service
        self.result_service = result_service
        self.config_service = config_service
        self._guard = SingleFlightGuard()
        self._history: deque[ProcessingHistoryEntry] = deque(maxlen=history_limit)

    async def process_batch_aggregation(self) -> BatchProcessResult:
        """
        Run the pipeline unless a run is already in flight.

        A call that finds the guard held returns ``skipped=True`` at once
        and leaves the history untouched.
        """
        if not self._guard.try_acquire():
            logger.info("batch_aggregation_skipped")
            return BatchProcessResult(success=False, skipped=True, error=ALREADY_RUNNING_MESSAGE)

        started = time.perf_counter()
        try:
            try:
                ranked = await self.aggregation_service.batch_aggregate()
            except Exception as e:
                elapsed = (time.perf_counter() - started) * 1000
                logger.error("batch_aggregation_failed", error=str(e), processing_time=elapsed)
                self._history.appendleft(
                    ProcessingHistoryEntry(
                        timestamp=utcnow(),
                        success=False,
                        processing_time=elapsed,
                        error=str(e),
                    )
                )
                return BatchProcessResult(success=False, processing_time=elapsed, error=str(e))

            elapsed = (time.perf_counter() - started) * 1000
            self._history.appendleft(
                ProcessingHistoryEntry(
                    timestamp=utcnow(),
                    success=True,
                    processed_groups=len(ranked),
                    processing_time=elapsed,
                )
            )
            logger.info("batch_aggregation_completed", processed_groups=len(ranked), processing_time=elapsed)
            return BatchProcessResult(success=True, processed_groups=len(ranked), processing_time=elapsed)
        finally:
            self._guard.release()

    async def is_processing_enabled(self) -> bool:
        """Config.aggregation_enabled; False when the settings can't be read."""
        try:
            config = await self.config_service.get_config()
        except Exception as e:
            logger.warning("processing_enabled_check_failed", error=str(e))
            return False
        return config.aggregation_enabled

    async def get_processing_status(self) -> ProcessingStatus:
        try:
            last_processed = await self.result_service.get_latest_update_time()
        except Exception as e:
            logger.warning("processing_status_failed", error=str(e))
            last_processed = None
        return ProcessingStatus(is_processing=self._guard.is_held, last_processed=last_processed)

    def get_processing_history(self) -> list[ProcessingHistoryEntry]:
        return list(self._history)
