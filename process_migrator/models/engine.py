"""Pydantic models for Camunda engine REST payloads."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class EngineModel(BaseModel):
    """Base for engine payloads: camelCase on the wire, unknown fields ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_payload(self) -> Dict[str, Any]:
        """Serialize back to the engine's camelCase representation."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ProcessDefinition(EngineModel):
    id: str
    key: str
    version: int
    deployment_id: Optional[str] = Field(default=None, alias="deploymentId")
    name: Optional[str] = None
    tenant_id: Optional[str] = Field(default=None, alias="tenantId")
    suspended: bool = False


class ProcessInstance(EngineModel):
    id: str
    definition_id: Optional[str] = Field(default=None, alias="definitionId")
    business_key: Optional[str] = Field(default=None, alias="businessKey")
    suspended: bool = False
    ended: bool = False


class MigrationInstruction(EngineModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    source_activity_ids: List[str] = Field(default_factory=list, alias="sourceActivityIds")
    target_activity_ids: List[str] = Field(default_factory=list, alias="targetActivityIds")
    update_event_trigger: Optional[bool] = Field(default=None, alias="updateEventTrigger")


class MigrationPlan(EngineModel):
    """
    Engine-generated activity mapping between two definition versions.

    Fields the engine sends beyond the typed ones are kept, so a generated
    plan is submitted back exactly as received.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    source_process_definition_id: str = Field(alias="sourceProcessDefinitionId")
    target_process_definition_id: str = Field(alias="targetProcessDefinitionId")
    instructions: Optional[List[MigrationInstruction]] = None
    update_event_triggers: Optional[bool] = Field(default=None, alias="updateEventTriggers")
    variables: Optional[Dict[str, Any]] = None


class Batch(EngineModel):
    id: str
    type: Optional[str] = None
    total_jobs: int = Field(default=0, alias="totalJobs")
    batch_jobs_per_seed: Optional[int] = Field(default=None, alias="batchJobsPerSeed")
    invocations_per_batch_job: Optional[int] = Field(default=None, alias="invocationsPerBatchJob")
    suspended: bool = False


class BatchStatistics(EngineModel):
    id: str
    type: Optional[str] = None
    total_jobs: int = Field(default=0, alias="totalJobs")
    completed_jobs: int = Field(default=0, alias="completedJobs")
    remaining_jobs: int = Field(default=0, alias="remainingJobs")
    failed_jobs: int = Field(default=0, alias="failedJobs")
    suspended: bool = False

    @property
    def is_finished(self) -> bool:
        """All jobs completed, or every remaining job has failed."""
        return (
            self.total_jobs == self.completed_jobs
            or self.remaining_jobs == self.failed_jobs
        )

    @property
    def is_clean(self) -> bool:
        return self.failed_jobs == 0 and self.remaining_jobs == 0
