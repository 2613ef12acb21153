"""Migration request and run report models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime
import uuid

from .engine import Batch, BatchStatistics

ALL_DEFINITIONS = "ALL"


@dataclass
class MigrationRequest:
    """
    A request to migrate the running instances of one process definition key.

    Versions are 1-based engine version numbers, not definition ids.
    """
    name: str
    source_version: Optional[int] = None
    target_version: Optional[int] = None

    @property
    def is_all(self) -> bool:
        """True for the sentinel that expands to every deployed key."""
        return self.name == ALL_DEFINITIONS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "source_version": self.source_version,
            "target_version": self.target_version,
        }


@dataclass
class VersionResolution:
    """Source definition ids to drain and the single target definition id."""
    source_ids: List[str] = field(default_factory=list)
    target_id: Optional[str] = None

    @property
    def is_actionable(self) -> bool:
        return bool(self.target_id) and bool(self.source_ids)

    def pending_source_ids(self) -> List[str]:
        """Source ids that still need work (the target itself is already current)."""
        return [source_id for source_id in self.source_ids if source_id != self.target_id]


@dataclass
class BatchOutcome:
    """Result of driving one migration batch to completion."""
    batch: Batch
    succeeded: bool
    statistics: Optional[BatchStatistics] = None  # None once the engine purged the batch


class StepStatus(str, Enum):
    """Status of a single (definition, source id) migration step."""
    PENDING = "pending"
    SKIPPED = "skipped"
    MIGRATED = "migrated"
    DELETED = "deleted"  # No running instances, deployment removed directly
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    DRY_RUN = "dry_run"


@dataclass
class MigrationStep:
    """One source definition id being moved to its target."""
    definition_key: str
    source_id: str
    target_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: StepStatus = StepStatus.PENDING
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    instance_count: int = 0
    batch_id: Optional[str] = None
    deployment_id: Optional[str] = None  # Set once the source deployment is deleted
    deployment_deleted: bool = False
    batch_deleted: bool = False
    error: Optional[str] = None
    planned_action: Optional[str] = None

    def start(self) -> None:
        self.started_at = datetime.utcnow()

    def finish(self, status: StepStatus, error: Optional[str] = None) -> None:
        self.status = status
        self.error = error
        self.completed_at = datetime.utcnow()

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "definition_key": self.definition_key,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "instance_count": self.instance_count,
            "batch_id": self.batch_id,
            "deployment_id": self.deployment_id,
            "deployment_deleted": self.deployment_deleted,
            "batch_deleted": self.batch_deleted,
            "error": self.error,
            "planned_action": self.planned_action,
        }


@dataclass
class MigrationRun:
    """Report of a complete migration run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    requests: List[MigrationRequest] = field(default_factory=list)
    dry_run: bool = False
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    steps: List[MigrationStep] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)  # Keys whose versions could not be resolved

    def add_step(self, definition_key: str, source_id: str, target_id: Optional[str]) -> MigrationStep:
        """Add a new step to the run."""
        step = MigrationStep(definition_key=definition_key, source_id=source_id, target_id=target_id)
        self.steps.append(step)
        return step

    def steps_with_status(self, *statuses: StepStatus) -> List[MigrationStep]:
        return [s for s in self.steps if s.status in statuses]

    @property
    def total_pairs(self) -> int:
        return len(self.steps)

    @property
    def succeeded(self) -> int:
        return len(self.steps_with_status(StepStatus.MIGRATED, StepStatus.DELETED))

    @property
    def failed(self) -> int:
        return len(self.steps_with_status(StepStatus.FAILED, StepStatus.TIMED_OUT))

    @property
    def skipped(self) -> int:
        return len(self.steps_with_status(StepStatus.SKIPPED, StepStatus.DRY_RUN))

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "requests": [r.to_dict() for r in self.requests],
            "dry_run": self.dry_run,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "total_pairs": self.total_pairs,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "unresolved": self.unresolved,
            "steps": [s.to_dict() for s in self.steps],
        }
