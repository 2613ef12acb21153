"""Services used by the migration orchestrator."""

from .version_resolver import VersionResolver
from .batch_controller import BatchLifecycleController, wait_or_cancel
from .cleanup import CleanupHandler

__all__ = [
    "VersionResolver",
    "BatchLifecycleController",
    "CleanupHandler",
    "wait_or_cancel",
]
