"""
Shared pytest fixtures for the process migrator tests.

Provides an in-memory engine gateway that records every call, so services
and the orchestrator can be exercised without a running engine.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from process_migrator.gateway.base import EngineGateway
from process_migrator.models.engine import (
    Batch,
    BatchStatistics,
    MigrationPlan,
    ProcessDefinition,
    ProcessInstance,
)
from process_migrator.models.result import ErrorKind, GatewayResult


def stats(batch_id: str, total: int, completed: int, remaining: int, failed: int) -> BatchStatistics:
    return BatchStatistics(
        id=batch_id,
        total_jobs=total,
        completed_jobs=completed,
        remaining_jobs=remaining,
        failed_jobs=failed,
    )


class FakeEngineGateway(EngineGateway):
    """
    In-memory engine.

    Definitions are registered with add_definition, running instances with
    add_instances. Batch statistics are served from a per-batch script: each
    read pops the next entry, the last entry repeats. A None entry means the
    batch was purged.
    """

    def __init__(self):
        self.definitions: List[ProcessDefinition] = []
        self.instances: Dict[str, List[ProcessInstance]] = {}
        self.statistics_script: Dict[str, List[Optional[BatchStatistics]]] = {}
        self.default_script: List[Optional[BatchStatistics]] = [None]
        self.failing: Dict[str, GatewayResult] = {}
        self.calls: List[Tuple[str, Any]] = []
        self._batch_counter = 0

    # Test setup helpers

    def add_definition(self, key: str, version: int, deployment_id: Optional[str] = None) -> ProcessDefinition:
        definition = ProcessDefinition(
            id=f"{key}:{version}:id",
            key=key,
            version=version,
            deployment_id=deployment_id or f"deployment-{key}-{version}",
        )
        self.definitions.append(definition)
        return definition

    def add_instances(self, definition_id: str, count: int) -> None:
        self.instances[definition_id] = [
            ProcessInstance(id=f"{definition_id}-instance-{i}", definition_id=definition_id)
            for i in range(count)
        ]

    def fail(self, operation: str, error_kind: ErrorKind = ErrorKind.ENGINE, status_code: int = 500) -> None:
        self.failing[operation] = GatewayResult.failure(error_kind, f"{operation} failed", status_code)

    def script_statistics(self, batch_id: str, *entries: Optional[BatchStatistics]) -> None:
        self.statistics_script[batch_id] = list(entries)

    def called(self, operation: str) -> List[Any]:
        return [args for name, args in self.calls if name == operation]

    @property
    def operations(self) -> List[str]:
        return [name for name, _ in self.calls]

    def _record(self, operation: str, args: Any) -> Optional[GatewayResult]:
        self.calls.append((operation, args))
        return self.failing.get(operation)

    # EngineGateway

    def list_instances(self, definition_id):
        failure = self._record("list_instances", definition_id)
        if failure:
            return failure
        return GatewayResult.success(list(self.instances.get(definition_id, [])))

    def get_latest_version_id(self, definition_key):
        failure = self._record("get_latest_version_id", definition_key)
        if failure:
            return failure
        versions = [d for d in self.definitions if d.key == definition_key]
        if not versions:
            return GatewayResult.failure(ErrorKind.ENGINE, "not found", 404)
        return GatewayResult.success(max(versions, key=lambda d: d.version).id)

    def get_definition_by_id(self, definition_id):
        failure = self._record("get_definition_by_id", definition_id)
        if failure:
            return failure
        for definition in self.definitions:
            if definition.id == definition_id:
                return GatewayResult.success(definition)
        return GatewayResult.failure(ErrorKind.ENGINE, "not found", 404)

    def list_definitions(self, filters=None):
        failure = self._record("list_definitions", filters)
        if failure:
            return failure
        filters = filters or {}
        found = list(self.definitions)
        if "key" in filters:
            found = [d for d in found if d.key == filters["key"]]
        if "version" in filters:
            found = [d for d in found if d.version == filters["version"]]
        if filters.get("latestVersion"):
            latest = {}
            for d in found:
                if d.key not in latest or d.version > latest[d.key].version:
                    latest[d.key] = d
            found = list(latest.values())
        return GatewayResult.success(found)

    def generate_plan(self, source_id, target_id):
        failure = self._record("generate_plan", (source_id, target_id))
        if failure:
            return failure
        return GatewayResult.success(MigrationPlan(
            source_process_definition_id=source_id,
            target_process_definition_id=target_id,
        ))

    def submit_migration(self, plan):
        failure = self._record("submit_migration", plan)
        if failure:
            return failure
        self._batch_counter += 1
        instances = self.instances.get(plan.source_process_definition_id, [])
        return GatewayResult.success(Batch(id=f"batch-{self._batch_counter}", total_jobs=len(instances)))

    def get_batch_statistics(self, batch_id):
        failure = self._record("get_batch_statistics", batch_id)
        if failure:
            return failure
        script = self.statistics_script.setdefault(batch_id, list(self.default_script))
        entry = script.pop(0) if len(script) > 1 else script[0]
        return GatewayResult.success([entry] if entry is not None else [])

    def suspend_batch(self, batch_id):
        return self._record("suspend_batch", batch_id) or GatewayResult.success(None, 204)

    def delete_batch(self, batch_id):
        return self._record("delete_batch", batch_id) or GatewayResult.success(None, 204)

    def delete_deployment(self, deployment_id):
        failure = self._record("delete_deployment", deployment_id)
        if failure:
            return failure
        self.definitions = [d for d in self.definitions if d.deployment_id != deployment_id]
        return GatewayResult.success(None, 204)


@pytest.fixture
def gateway() -> FakeEngineGateway:
    return FakeEngineGateway()


@pytest.fixture
def invoice_flow(gateway: FakeEngineGateway) -> FakeEngineGateway:
    """invoice-flow deployed at versions 1 and 2."""
    gateway.add_definition("invoice-flow", 1)
    gateway.add_definition("invoice-flow", 2)
    return gateway
