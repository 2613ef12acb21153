"""Camunda 7 REST API gateway."""

import logging
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import ValidationError
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .base import EngineGateway
from ..models.engine import (
    Batch,
    BatchStatistics,
    MigrationPlan,
    ProcessDefinition,
    ProcessInstance,
)
from ..models.result import ErrorKind, GatewayResult

logger = logging.getLogger(__name__)


class CamundaGateway(EngineGateway):
    """
    Gateway for the Camunda 7 engine REST API.

    Holds one long-lived requests session for the whole run, with retry
    logic for throttling and transient server errors.
    """

    RETRY_STATUSES = [429, 502, 503, 504]

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 1.0,
        auth_username: Optional[str] = None,
        auth_password: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the Camunda gateway.

        Args:
            base_url: Engine REST base URL (e.g. http://camunda:8080/engine-rest)
            timeout: Per-request timeout in seconds
            max_retries: Retries for throttled or unavailable responses
            backoff_factor: urllib3 retry backoff factor
            auth_username: Username for HTTP basic auth
            auth_password: Password for HTTP basic auth
            session: Custom requests session
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self._auth = (auth_username, auth_password or "") if auth_username else None
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with retry logic and JSON headers."""
        session = requests.Session()

        retries = Retry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=self.RETRY_STATUSES,
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retries)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        session.headers["Accept"] = "application/json"
        session.headers["Content-Type"] = "application/json"
        if self._auth:
            session.auth = self._auth

        return session

    def close(self) -> None:
        self._session.close()

    @staticmethod
    def _encode_params(params: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Drop unset filters and render booleans the way the engine expects."""
        if not params:
            return None
        encoded = {}
        for name, value in params.items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            encoded[name] = value
        return encoded

    def _request(
        self,
        method: str,
        path: str,
        action: str,
        context: Dict[str, Any],
        expected_status: int = 200,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None
    ) -> GatewayResult[Any]:
        """
        Perform a request and map every failure to a GatewayResult.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            action: Human readable description used in log lines
            context: Identifiers logged alongside errors
            expected_status: Status code that counts as success
            params: Query parameters
            body: JSON body

        Returns:
            GatewayResult holding the decoded JSON body (or None for empty bodies)
        """
        url = f"{self.base_url}{path}"

        try:
            response = self._session.request(
                method,
                url,
                params=self._encode_params(params),
                json=body,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"{action} has completed with error: {e} {context}")
            return GatewayResult.failure(ErrorKind.TRANSPORT, str(e))

        if response.status_code != expected_status:
            error_msg = response.text or response.reason or ""
            try:
                error_data = response.json()
                if isinstance(error_data, dict):
                    error_msg = error_data.get("message") or error_msg
            except ValueError:
                pass
            logger.error(
                f"{action} has completed with error: HTTP {response.status_code} {error_msg} {context}"
            )
            return GatewayResult.failure(ErrorKind.ENGINE, error_msg, response.status_code)

        if not response.content:
            return GatewayResult.success(None, response.status_code)

        try:
            return GatewayResult.success(response.json(), response.status_code)
        except ValueError as e:
            logger.error(f"{action} returned a body that is not JSON: {e} {context}")
            return GatewayResult.failure(ErrorKind.INVALID_RESPONSE, str(e), response.status_code)

    @staticmethod
    def _missing(action: str, *names: str) -> GatewayResult[Any]:
        message = f"{action}: {' and / or '.join(names)} is not defined"
        logger.warning(message)
        return GatewayResult.failure(ErrorKind.MISSING_INPUT, message)

    @staticmethod
    def _parse(
        result: GatewayResult[Any],
        parser: Callable[[Any], Any],
        action: str
    ) -> GatewayResult[Any]:
        """Convert a raw JSON result with a pydantic parser."""
        if not result.ok:
            return result
        try:
            return GatewayResult.success(parser(result.value), result.status_code)
        except (ValidationError, TypeError, KeyError) as e:
            logger.error(f"{action} returned an unexpected payload: {e}")
            return GatewayResult.failure(ErrorKind.INVALID_RESPONSE, str(e), result.status_code)

    @staticmethod
    def _parse_list(model: Any) -> Callable[[Any], List[Any]]:
        return lambda data: [model.model_validate(item) for item in (data or [])]

    def list_instances(self, definition_id: str) -> GatewayResult[List[ProcessInstance]]:
        """List running process instances of a process definition."""
        action = "Get process instances by process definition id"
        if not definition_id:
            return self._missing(action, "processDefinitionId")

        logger.debug(f"Start to get process instances by process definition identifier {definition_id}")

        result = self._request(
            "GET",
            "/process-instance",
            action,
            {"processDefinitionId": definition_id},
            params={"processDefinitionId": definition_id},
        )
        return self._parse(result, self._parse_list(ProcessInstance), action)

    def get_latest_version_id(self, definition_key: str) -> GatewayResult[str]:
        action = "Get process definition last version id by definition key"
        if not definition_key:
            return self._missing(action, "definitionKey")

        logger.debug(f"Start to get process definition last version id by definition key {definition_key}")

        result = self._request(
            "GET",
            f"/process-definition/key/{definition_key}",
            action,
            {"definitionKey": definition_key},
        )
        return self._parse(result, lambda data: ProcessDefinition.model_validate(data).id, action)

    def get_definition_by_id(self, definition_id: str) -> GatewayResult[ProcessDefinition]:
        action = "Get process definition by identifier"
        if not definition_id:
            return self._missing(action, "definitionId")

        logger.debug(f"Start to get process definition by identifier {definition_id}")

        result = self._request(
            "GET",
            f"/process-definition/{definition_id}",
            action,
            {"definitionId": definition_id},
        )
        return self._parse(result, ProcessDefinition.model_validate, action)

    def list_definitions(self, filters: Optional[Dict[str, Any]] = None) -> GatewayResult[List[ProcessDefinition]]:
        action = "List process definitions by filters"
        logger.debug(f"Start to list process definitions by filters {filters}")

        result = self._request(
            "GET",
            "/process-definition",
            action,
            {"filters": filters},
            params=filters,
        )
        return self._parse(result, self._parse_list(ProcessDefinition), action)

    def generate_plan(self, source_id: str, target_id: str) -> GatewayResult[MigrationPlan]:
        """Generate a migration plan for a source version and a target version."""
        action = "Generate migration plan"
        if not source_id or not target_id:
            return self._missing(action, "sourceProcessDefinitionId", "targetProcessDefinitionId")

        logger.debug(f"Start to generate migration plan from {source_id} to {target_id}")

        body = {
            "sourceProcessDefinitionId": source_id,
            "targetProcessDefinitionId": target_id,
            "updateEventTriggers": True,
        }
        result = self._request(
            "POST",
            "/migration/generate",
            action,
            {"sourceProcessDefinitionId": source_id, "targetProcessDefinitionId": target_id},
            body=body,
        )
        return self._parse(result, MigrationPlan.model_validate, action)

    def submit_migration(self, plan: MigrationPlan) -> GatewayResult[Batch]:
        """Execute a migration plan asynchronously, skipping custom listeners."""
        action = "Migrate process instances for migration plan"
        if plan is None:
            return self._missing(action, "migrationPlan")

        logger.debug(f"Start to execute migration plan for {plan.source_process_definition_id}")

        body = {
            "processInstanceQuery": {
                "processDefinitionId": plan.source_process_definition_id,
            },
            "migrationPlan": plan.to_payload(),
            "skipCustomListeners": True,
        }
        result = self._request(
            "POST",
            "/migration/executeAsync",
            action,
            {"sourceProcessDefinitionId": plan.source_process_definition_id},
            body=body,
        )
        return self._parse(result, Batch.model_validate, action)

    def get_batch_statistics(self, batch_id: str) -> GatewayResult[List[BatchStatistics]]:
        action = "Get batches statistics"
        if not batch_id:
            return self._missing(action, "batchId")

        logger.debug(f"Start to get batch statistics for batch {batch_id}")

        result = self._request(
            "GET",
            "/batch/statistics",
            action,
            {"batchId": batch_id},
            params={"batchId": batch_id},
        )
        return self._parse(result, self._parse_list(BatchStatistics), action)

    def suspend_batch(self, batch_id: str) -> GatewayResult[None]:
        action = "Suspend batch by identifier"
        if not batch_id:
            return self._missing(action, "batchId")

        logger.debug(f"Start to suspend batch by identifier {batch_id}")

        return self._request(
            "PUT",
            f"/batch/{batch_id}/suspended",
            action,
            {"batchId": batch_id},
            expected_status=204,
            body={"suspended": True},
        )

    def delete_batch(self, batch_id: str) -> GatewayResult[None]:
        action = "Delete batch by identifier"
        if not batch_id:
            return self._missing(action, "batchId")

        logger.debug(f"Start to delete batch by identifier {batch_id}")

        return self._request(
            "DELETE",
            f"/batch/{batch_id}",
            action,
            {"batchId": batch_id},
            expected_status=204,
        )

    def delete_deployment(self, deployment_id: str) -> GatewayResult[None]:
        action = "Delete deployment by identifier"
        if not deployment_id:
            return self._missing(action, "deploymentId")

        logger.debug(f"Start to delete deployment by identifier {deployment_id}")

        return self._request(
            "DELETE",
            f"/deployment/{deployment_id}",
            action,
            {"deploymentId": deployment_id},
            expected_status=204,
        )

    def validate_connection(self) -> bool:
        """Validate connection to the engine REST API."""
        result = self._request("GET", "/engine", "List engines", {})
        return result.ok
