"""Exceptions raised by the process migrator."""

from typing import Optional


class MigratorError(Exception):
    """Base exception for the process migrator."""

    pass


class ConfigurationError(MigratorError):
    """Raised when the job configuration is missing or malformed."""

    pass


class BatchTimeoutError(MigratorError):
    """Raised when a migration batch does not finish within the allowed wait."""

    def __init__(self, batch_id: str, waited: float) -> None:
        self.batch_id = batch_id
        self.waited = waited
        super().__init__(
            f"Batch {batch_id} did not complete within {waited:.1f} seconds"
        )


class MigrationCancelledError(MigratorError):
    """Raised when the run is cancelled while waiting on the engine."""

    def __init__(self, batch_id: Optional[str] = None) -> None:
        self.batch_id = batch_id
        detail = f" while waiting on batch {batch_id}" if batch_id else ""
        super().__init__(f"Migration run cancelled{detail}")


class CleanupError(MigratorError):
    """Raised when cleanup cannot proceed, e.g. the definition record is gone."""

    def __init__(self, definition_id: str, reason: str) -> None:
        self.definition_id = definition_id
        self.reason = reason
        super().__init__(f"Cleanup of process definition {definition_id} failed: {reason}")
