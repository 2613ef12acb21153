"""Migration orchestrator - drives every requested definition through migration and cleanup."""

import logging
import threading
from datetime import datetime
from typing import List, Optional

from .config import MigratorConfig
from .exceptions import BatchTimeoutError
from .gateway.base import EngineGateway
from .models.migration import (
    MigrationRequest,
    MigrationRun,
    MigrationStep,
    StepStatus,
)
from .services.batch_controller import BatchLifecycleController
from .services.cleanup import CleanupHandler
from .services.version_resolver import VersionResolver

logger = logging.getLogger(__name__)


class MigrationOrchestrator:
    """
    Orchestrates the migration of running process instances.

    Handles:
    - Expansion of the "ALL" request into one request per deployed key
    - Version resolution per request
    - Direct deployment deletion for versions without running instances
    - Batch migration, then deployment deletion or failed batch cleanup

    Definitions and their source versions are processed strictly one after
    another. A pair that cannot be resolved, planned or submitted is skipped
    without stopping the run; errors raised by cleanup abort it.
    """

    def __init__(
        self,
        gateway: EngineGateway,
        resolver: Optional[VersionResolver] = None,
        controller: Optional[BatchLifecycleController] = None,
        cleanup: Optional[CleanupHandler] = None,
        dry_run: bool = False,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            gateway: Engine gateway used for every engine call
            resolver: Version resolver (built on the gateway if omitted)
            controller: Batch lifecycle controller (built on the gateway if omitted)
            cleanup: Cleanup handler (built on the gateway if omitted)
            dry_run: If True, report what would happen without mutating the engine
            log: Logger to report through
        """
        self.gateway = gateway
        self.log = log or logger
        self.resolver = resolver or VersionResolver(gateway, log=self.log)
        self.controller = controller or BatchLifecycleController(gateway, log=self.log)
        self.cleanup = cleanup or CleanupHandler(gateway, log=self.log)
        self.dry_run = dry_run

    @classmethod
    def from_config(
        cls,
        config: MigratorConfig,
        gateway: EngineGateway,
        cancel_event: Optional[threading.Event] = None,
        log: Optional[logging.Logger] = None
    ) -> "MigrationOrchestrator":
        """Wire the orchestrator and its services from a configuration."""
        log = log or logger
        cancel_event = cancel_event or threading.Event()
        return cls(
            gateway,
            resolver=VersionResolver(gateway, log=log),
            controller=BatchLifecycleController(
                gateway,
                poll_interval=config.check_batch_completion_timeout,
                backoff_factor=config.poll_backoff_factor,
                max_interval=config.poll_max_interval,
                max_wait=config.batch_completion_max_wait,
                cancel_event=cancel_event,
                log=log,
            ),
            cleanup=CleanupHandler(
                gateway,
                settle_interval=config.delete_camunda_entity_timeout,
                cancel_event=cancel_event,
                log=log,
            ),
            dry_run=config.dry_run,
            log=log,
        )

    def run(self, requests: List[MigrationRequest]) -> MigrationRun:
        """
        Migrate every requested process definition.

        Args:
            requests: Migration requests; a single "ALL" request expands to every key

        Returns:
            MigrationRun report
        """
        report = MigrationRun(requests=list(requests), dry_run=self.dry_run)
        report.started_at = datetime.utcnow()

        expanded = self.expand_requests(requests)
        if not expanded:
            self.log.warning("Migrate process instances: there are no process definitions to migrate")
            report.completed_at = datetime.utcnow()
            return report

        for request in expanded:
            self._migrate_definition(request, report)

        report.completed_at = datetime.utcnow()
        self.log.info(
            f"Migration run finished: {report.succeeded} succeeded, {report.failed} failed, "
            f"{report.skipped} skipped of {report.total_pairs} pairs"
        )
        return report

    def expand_requests(self, requests: List[MigrationRequest]) -> List[MigrationRequest]:
        """Replace a single "ALL" request with one request per latest-version key."""
        if len(requests) != 1 or not requests[0].is_all:
            return list(requests)

        result = self.gateway.list_definitions({"latestVersion": True})
        if not result.ok:
            self.log.error(f"Could not list latest process definitions: {result.error}")
            return []

        expanded: List[MigrationRequest] = []
        seen = set()
        for definition in result.value or []:
            if definition.key in seen:
                continue
            seen.add(definition.key)
            expanded.append(MigrationRequest(name=definition.key))

        self.log.info(f"Expanded ALL into {len(expanded)} process definitions")
        return expanded

    def _migrate_definition(self, request: MigrationRequest, report: MigrationRun) -> None:
        resolution = self.resolver.resolve(request)

        if not resolution.is_actionable:
            self.log.warning(
                f"Process definition {request.name} skipped: "
                f"sources={resolution.source_ids} target={resolution.target_id}"
            )
            report.unresolved.append(request.name)
            return

        pending = resolution.pending_source_ids()
        if not pending:
            self.log.info(f"Process definition {request.name} is already on its target version")
            return

        for source_id in pending:
            step = report.add_step(request.name, source_id, resolution.target_id)
            step.start()
            self._migrate_source(step)

    def _migrate_source(self, step: MigrationStep) -> None:
        instances_result = self.gateway.list_instances(step.source_id)
        if not instances_result.ok:
            # Unknown instance state must never lead to a deployment deletion
            self.log.error(
                f"Could not list running instances of {step.source_id}, skipping: {instances_result.error}"
            )
            step.finish(StepStatus.SKIPPED, instances_result.error)
            return

        instances = instances_result.value or []
        step.instance_count = len(instances)

        if not instances:
            self.log.warning(f"Process definition {step.source_id} has no running instances")
            if self.dry_run:
                step.planned_action = "delete deployment"
                step.finish(StepStatus.DRY_RUN)
                return
            self._delete_deployment(step)
            step.finish(StepStatus.DELETED if step.deployment_deleted else StepStatus.FAILED)
            return

        if self.dry_run:
            step.planned_action = f"migrate {len(instances)} instances to {step.target_id}"
            self.log.info(f"[dry run] would migrate {len(instances)} instances of {step.source_id} to {step.target_id}")
            step.finish(StepStatus.DRY_RUN)
            return

        try:
            outcome = self.controller.execute(step.source_id, step.target_id)
        except BatchTimeoutError as e:
            self.log.error(f"Migration of {step.source_id} timed out: {e}")
            step.batch_id = e.batch_id
            step.batch_deleted = self.cleanup.cleanup_failure(e.batch_id)
            step.finish(StepStatus.TIMED_OUT, str(e))
            return

        if outcome is None:
            step.finish(StepStatus.SKIPPED, "migration batch was not started")
            return

        step.batch_id = outcome.batch.id
        self.log.info(
            f"Migration from {step.source_id} to {step.target_id} has "
            f"{'succeeded' if outcome.succeeded else 'failed'}"
        )

        if outcome.succeeded:
            self._delete_deployment(step)
            step.finish(StepStatus.MIGRATED)
        else:
            step.batch_deleted = self.cleanup.cleanup_failure(outcome.batch.id)
            step.finish(StepStatus.FAILED, self._failure_detail(outcome))

    def _delete_deployment(self, step: MigrationStep) -> None:
        step.deployment_id = self.cleanup.cleanup_success(step.source_id)
        step.deployment_deleted = step.deployment_id is not None

    @staticmethod
    def _failure_detail(outcome) -> str:
        statistics = outcome.statistics
        if statistics is None:
            return "batch statistics unavailable"
        return (
            f"{statistics.failed_jobs} failed, {statistics.remaining_jobs} remaining "
            f"of {statistics.total_jobs} jobs"
        )
