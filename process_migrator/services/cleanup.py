"""Post-migration cleanup of deployments and failed batches."""

import logging
import threading
from typing import Optional

from ..exceptions import CleanupError
from ..gateway.base import EngineGateway
from .batch_controller import wait_or_cancel

logger = logging.getLogger(__name__)


class CleanupHandler:
    """
    Removes what a migration leaves behind.

    After a successful migration (or when a version has no running
    instances) the source deployment is deleted. After a failed migration the
    batch is suspended and then deleted, leaving the deployment in place.
    """

    def __init__(
        self,
        gateway: EngineGateway,
        settle_interval: float = 3.0,
        cancel_event: Optional[threading.Event] = None,
        log: Optional[logging.Logger] = None
    ):
        """
        Initialize the cleanup handler.

        Args:
            gateway: Engine gateway
            settle_interval: Seconds to let trailing engine work finish before deleting
            cancel_event: Set to abort waiting
            log: Logger to report through
        """
        self.gateway = gateway
        self.settle_interval = settle_interval
        self.cancel_event = cancel_event or threading.Event()
        self.log = log or logger

    def cleanup_success(self, definition_id: str) -> Optional[str]:
        """
        Delete the deployment that holds a drained process definition.

        Deleting the deployment cascades to every definition it contains.

        Returns:
            Id of the deleted deployment, or None if nothing was deleted

        Raises:
            CleanupError: The definition record (and so its deployment) is unavailable
        """
        if not definition_id:
            self.log.warning("Delete deployment: processDefinitionId is not defined")
            return None

        self.log.debug(f"Start to delete deployment by process definition identifier {definition_id}")

        definition_result = self.gateway.get_definition_by_id(definition_id)
        if not definition_result.ok or definition_result.value is None:
            raise CleanupError(definition_id, definition_result.error or "definition record not found")

        deployment_id = definition_result.value.deployment_id
        if not deployment_id:
            raise CleanupError(definition_id, "definition record has no deployment id")

        wait_or_cancel(self.cancel_event, self.settle_interval)

        result = self.gateway.delete_deployment(deployment_id)
        if not result.ok:
            self.log.error(f"Deployment {deployment_id} of {definition_id} was not deleted: {result.error}")
            return None

        self.log.info(f"Deployment {deployment_id} of {definition_id} deleted")
        return deployment_id

    def cleanup_failure(self, batch_id: str) -> bool:
        """
        Suspend and then delete a failed migration batch.

        The batch is suspended first so no job executor keeps working on it
        while it is being deleted.

        Returns:
            True if the engine confirmed the batch deletion
        """
        if not batch_id:
            self.log.warning("Delete failed batch: batchId is not defined")
            return False

        self.log.debug(f"Start to delete failed batch by identifier {batch_id}")

        suspend_result = self.gateway.suspend_batch(batch_id)
        if not suspend_result.ok:
            self.log.warning(f"Batch {batch_id} was not suspended: {suspend_result.error}")

        wait_or_cancel(self.cancel_event, self.settle_interval, batch_id)

        result = self.gateway.delete_batch(batch_id)
        if not result.ok:
            self.log.error(f"Failed batch {batch_id} was not deleted: {result.error}")
            return False

        self.log.info(f"Failed batch {batch_id} suspended and deleted")
        return True
