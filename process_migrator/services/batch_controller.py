"""Migration batch lifecycle: submit, poll, classify."""

import logging
import threading
import time
from typing import Callable, Optional

from ..exceptions import BatchTimeoutError, MigrationCancelledError
from ..gateway.base import EngineGateway
from ..models.engine import BatchStatistics
from ..models.migration import BatchOutcome

logger = logging.getLogger(__name__)


def wait_or_cancel(
    cancel_event: threading.Event,
    seconds: float,
    batch_id: Optional[str] = None
) -> None:
    """Sleep for the given time, raising if the run is cancelled meanwhile."""
    if cancel_event.is_set() or cancel_event.wait(max(seconds, 0.0)):
        raise MigrationCancelledError(batch_id)


class BatchLifecycleController:
    """
    Drives one migration batch through its lifecycle.

    Handles:
    - Plan generation and asynchronous submission
    - Completion polling with capped backoff and a wait ceiling
    - Success/failure classification of the finished batch
    """

    MIN_POLL_INTERVAL = 0.1  # seconds

    def __init__(
        self,
        gateway: EngineGateway,
        poll_interval: float = 5.0,
        backoff_factor: float = 1.5,
        max_interval: float = 60.0,
        max_wait: float = 3600.0,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize the controller.

        Args:
            gateway: Engine gateway
            poll_interval: First delay between statistics reads, in seconds (at least MIN_POLL_INTERVAL)
            backoff_factor: Growth of the delay after each unfinished read
            max_interval: Upper bound for the delay
            max_wait: Give up after this many seconds (<= 0 waits forever)
            cancel_event: Set to abort waiting
            clock: Monotonic time source
            log: Logger to report through
        """
        self.gateway = gateway
        self.poll_interval = max(poll_interval, self.MIN_POLL_INTERVAL)
        self.backoff_factor = max(backoff_factor, 1.0)
        self.max_interval = max(max_interval, self.poll_interval)
        self.max_wait = max_wait
        self.cancel_event = cancel_event or threading.Event()
        self.clock = clock
        self.log = log or logger

    def execute(self, source_id: str, target_id: str) -> Optional[BatchOutcome]:
        """
        Migrate every running instance of source_id to target_id.

        Returns:
            BatchOutcome, or None when no batch could be started

        Raises:
            BatchTimeoutError: The batch did not finish within max_wait
            MigrationCancelledError: The cancel event was set while waiting
        """
        if not source_id or not target_id:
            self.log.warning(
                "Execute process instances migration: source and / or target id is not defined"
            )
            return None

        self.log.debug(f"Start to execute process instances migration from {source_id} to {target_id}")

        plan_result = self.gateway.generate_plan(source_id, target_id)
        if not plan_result.ok:
            self.log.warning(f"No migration plan for {source_id} -> {target_id}, skipping")
            return None

        batch_result = self.gateway.submit_migration(plan_result.value)
        if not batch_result.ok:
            self.log.warning(f"Migration batch for {source_id} -> {target_id} was not started, skipping")
            return None

        batch = batch_result.value
        self.log.info(f"Migration batch {batch.id} started with {batch.total_jobs} jobs")

        self.wait_for_completion(batch.id)
        succeeded, statistics = self.check_result(batch.id)

        return BatchOutcome(batch=batch, succeeded=succeeded, statistics=statistics)

    def check_completion(self, batch_id: str) -> bool:
        """
        Check whether a batch has stopped making progress.

        A missing statistics record means the engine purged the finished
        batch. A failed read counts as not completed.
        """
        if not batch_id:
            self.log.warning("Check batch completion: batchId is not defined")
            return False

        result = self.gateway.get_batch_statistics(batch_id)
        if not result.ok:
            self.log.warning(f"Could not read statistics of batch {batch_id}, will retry")
            return False

        statistics = result.value[0] if result.value else None
        if statistics is None:
            return True

        self.log.debug(
            f"Batch {batch_id}: {statistics.completed_jobs}/{statistics.total_jobs} completed, "
            f"{statistics.remaining_jobs} remaining, {statistics.failed_jobs} failed"
        )
        return statistics.is_finished

    def wait_for_completion(self, batch_id: str) -> None:
        """Poll the batch until it completes, backing off between reads."""
        self.log.debug(f"Start to wait batch execution completion for {batch_id}")

        started = self.clock()
        interval = self.poll_interval

        while not self.check_completion(batch_id):
            waited = self.clock() - started
            if self.max_wait > 0 and waited >= self.max_wait:
                raise BatchTimeoutError(batch_id, waited)

            delay = interval
            if self.max_wait > 0:
                delay = min(delay, self.max_wait - waited)
            wait_or_cancel(self.cancel_event, delay, batch_id)

            interval = min(interval * self.backoff_factor, self.max_interval)

    def check_result(self, batch_id: str):
        """
        Classify a finished batch.

        Statistics are read again after the poll loop; a purged batch or one
        with no failed and no remaining jobs succeeded.

        Returns:
            Tuple of (succeeded, last statistics or None)
        """
        if not batch_id:
            self.log.warning("Check batch execution result: batchId is not defined")
            return False, None

        result = self.gateway.get_batch_statistics(batch_id)
        if not result.ok:
            self.log.error(f"Could not read final statistics of batch {batch_id}")
            return False, None

        statistics: Optional[BatchStatistics] = result.value[0] if result.value else None
        if statistics is None:
            return True, None

        return statistics.is_clean, statistics
