"""Job configuration loaded from the environment."""

import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigurationError
from .models.migration import MigrationRequest

TRUE_VALUES = {"1", "true", "yes", "on"}


def _optional_int(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = (env.get(name) or "").strip()
    if not raw:
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a version number, got {raw!r}")
    if value < 1:
        raise ConfigurationError(f"{name} must be a 1-based version number, got {value}")
    return value


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number of seconds, got {raw!r}")


@dataclass
class MigratorConfig:
    """Configuration for a migration run."""
    base_url: str = ""

    # What to migrate
    process_definition_name: Optional[str] = None
    source_version: Optional[int] = None
    target_version: Optional[int] = None

    # Timing (seconds)
    check_batch_completion_timeout: float = 5.0
    delete_camunda_entity_timeout: float = 3.0
    batch_completion_max_wait: float = 3600.0  # <= 0 disables the ceiling
    poll_backoff_factor: float = 1.5
    poll_max_interval: float = 60.0

    # HTTP
    request_timeout: float = 30.0
    max_retries: int = 3
    username: Optional[str] = None
    password: Optional[str] = None

    # Execution options
    dry_run: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "MigratorConfig":
        """Create from environment variables."""
        env = os.environ if env is None else env
        return cls(
            base_url=(env.get("INTEGRATIONS_CAMUNDA_API_BASE_URI") or "").strip(),
            process_definition_name=(env.get("PROCESS_DEFINITION_NAME") or "").strip() or None,
            source_version=_optional_int(env, "SOURCE_PROCESS_DEFINITION_ID"),
            target_version=_optional_int(env, "TARGET_PROCESS_DEFINITION_ID"),
            check_batch_completion_timeout=_float(env, "CHECK_BATCH_COMPLETION_TIMEOUT", 5.0),
            delete_camunda_entity_timeout=_float(env, "DELETE_CAMUNDA_ENTITY_TIMEOUT", 3.0),
            batch_completion_max_wait=_float(env, "BATCH_COMPLETION_MAX_WAIT", 3600.0),
            poll_backoff_factor=_float(env, "POLL_BACKOFF_FACTOR", 1.5),
            poll_max_interval=_float(env, "POLL_MAX_INTERVAL", 60.0),
            request_timeout=_float(env, "CAMUNDA_REQUEST_TIMEOUT", 30.0),
            max_retries=int(_float(env, "CAMUNDA_MAX_RETRIES", 3)),
            username=env.get("CAMUNDA_USERNAME") or None,
            password=env.get("CAMUNDA_PASSWORD") or None,
            dry_run=(env.get("MIGRATOR_DRY_RUN") or "").strip().lower() in TRUE_VALUES,
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigratorConfig":
        """Create from dictionary representation."""
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation, without the password."""
        return {
            "base_url": self.base_url,
            "process_definition_name": self.process_definition_name,
            "source_version": self.source_version,
            "target_version": self.target_version,
            "check_batch_completion_timeout": self.check_batch_completion_timeout,
            "delete_camunda_entity_timeout": self.delete_camunda_entity_timeout,
            "batch_completion_max_wait": self.batch_completion_max_wait,
            "poll_backoff_factor": self.poll_backoff_factor,
            "poll_max_interval": self.poll_max_interval,
            "request_timeout": self.request_timeout,
            "max_retries": self.max_retries,
            "username": self.username,
            "dry_run": self.dry_run,
            "log_level": self.log_level,
        }

    def validate(self) -> None:
        """Raise ConfigurationError if the run cannot start."""
        if not self.base_url:
            raise ConfigurationError("INTEGRATIONS_CAMUNDA_API_BASE_URI is not set")
        if not self.process_definition_name:
            raise ConfigurationError("PROCESS_DEFINITION_NAME is not set")
        if self.target_version is not None and self.source_version is None:
            raise ConfigurationError(
                "TARGET_PROCESS_DEFINITION_ID requires SOURCE_PROCESS_DEFINITION_ID"
            )

    def to_request(self) -> MigrationRequest:
        return MigrationRequest(
            name=self.process_definition_name or "",
            source_version=self.source_version,
            target_version=self.target_version,
        )
