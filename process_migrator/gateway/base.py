"""Base gateway interface for the workflow engine."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from ..models.engine import (
    Batch,
    BatchStatistics,
    MigrationPlan,
    ProcessDefinition,
    ProcessInstance,
)
from ..models.result import GatewayResult

logger = logging.getLogger(__name__)


class EngineGateway(ABC):
    """
    Base class for workflow engine gateways.

    Gateways wrap the engine's REST surface. They never raise for missing
    input, transport or engine errors; every call returns a GatewayResult.
    """

    @abstractmethod
    def list_instances(self, definition_id: str) -> GatewayResult[List[ProcessInstance]]:
        """List running process instances of a process definition."""
        pass

    @abstractmethod
    def get_latest_version_id(self, definition_key: str) -> GatewayResult[str]:
        """Get the id of the latest deployed version of a definition key."""
        pass

    @abstractmethod
    def get_definition_by_id(self, definition_id: str) -> GatewayResult[ProcessDefinition]:
        pass

    @abstractmethod
    def list_definitions(self, filters: Optional[Dict[str, Any]] = None) -> GatewayResult[List[ProcessDefinition]]:
        """
        List process definitions.

        Args:
            filters: Engine query filters (key, version, latestVersion)
        """
        pass

    @abstractmethod
    def generate_plan(self, source_id: str, target_id: str) -> GatewayResult[MigrationPlan]:
        pass

    @abstractmethod
    def submit_migration(self, plan: MigrationPlan) -> GatewayResult[Batch]:
        """Execute a plan asynchronously for every instance of its source definition."""
        pass

    @abstractmethod
    def get_batch_statistics(self, batch_id: str) -> GatewayResult[List[BatchStatistics]]:
        """Get statistics for a batch; an empty list means the batch was purged."""
        pass

    @abstractmethod
    def suspend_batch(self, batch_id: str) -> GatewayResult[None]:
        pass

    @abstractmethod
    def delete_batch(self, batch_id: str) -> GatewayResult[None]:
        pass

    @abstractmethod
    def delete_deployment(self, deployment_id: str) -> GatewayResult[None]:
        pass

    def migrate_process_instances(self, source_id: str, target_id: str) -> GatewayResult[Batch]:
        """Generate a migration plan and submit it in one step."""
        plan_result = self.generate_plan(source_id, target_id)
        if not plan_result.ok:
            return GatewayResult.failure(
                plan_result.error_kind,
                plan_result.error or "Migration plan generation failed",
                plan_result.status_code,
            )
        return self.submit_migration(plan_result.value)
