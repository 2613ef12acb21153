"""Data models for the process migrator."""

from .engine import (
    ProcessDefinition,
    ProcessInstance,
    MigrationInstruction,
    MigrationPlan,
    Batch,
    BatchStatistics,
)
from .migration import (
    ALL_DEFINITIONS,
    MigrationRequest,
    VersionResolution,
    BatchOutcome,
    StepStatus,
    MigrationStep,
    MigrationRun,
)
from .result import ErrorKind, GatewayResult

__all__ = [
    "ProcessDefinition",
    "ProcessInstance",
    "MigrationInstruction",
    "MigrationPlan",
    "Batch",
    "BatchStatistics",
    "ALL_DEFINITIONS",
    "MigrationRequest",
    "VersionResolution",
    "BatchOutcome",
    "StepStatus",
    "MigrationStep",
    "MigrationRun",
    "ErrorKind",
    "GatewayResult",
]
