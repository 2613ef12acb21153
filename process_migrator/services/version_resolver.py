"""Resolution of source and target process definition ids."""

import logging
from typing import List, Optional

from ..gateway.base import EngineGateway
from ..models.engine import ProcessDefinition
from ..models.migration import MigrationRequest, VersionResolution

logger = logging.getLogger(__name__)


class VersionResolver:
    """
    Determines which definition versions to drain and where to move them.

    Without an explicit source version every deployed version of the key is a
    source (any of them may have running instances) and the latest version is
    the target. With an explicit source version only that version is drained,
    into the explicit target version if given, else into the latest.
    """

    def __init__(self, gateway: EngineGateway, log: Optional[logging.Logger] = None):
        self.gateway = gateway
        self.log = log or logger

    def resolve(self, request: MigrationRequest) -> VersionResolution:
        """
        Resolve a request into source ids and a target id.

        Lookup failures surface as missing ids; the caller skips a resolution
        that is not actionable.
        """
        self.log.debug(f"Start to get process definition ids for migration with {request.to_dict()}")

        if request.source_version is None:
            source_ids = self._all_version_ids(request.name)
            target_id = self._latest_version_id(request.name)
        else:
            source_id = self._version_id(request.name, request.source_version)
            source_ids = [source_id] if source_id else []
            if request.target_version is not None:
                target_id = self._version_id(request.name, request.target_version)
            else:
                target_id = self._latest_version_id(request.name)

        resolution = VersionResolution(source_ids=source_ids, target_id=target_id)
        self.log.debug(
            f"Resolved {request.name}: sources={resolution.source_ids} target={resolution.target_id}"
        )
        return resolution

    def _all_version_ids(self, key: str) -> List[str]:
        result = self.gateway.list_definitions({"key": key})
        if not result.ok:
            self.log.warning(f"Could not list versions of process definition {key}: {result.error}")
            return []
        return [definition.id for definition in result.value or []]

    def _latest_version_id(self, key: str) -> Optional[str]:
        result = self.gateway.get_latest_version_id(key)
        if not result.ok:
            self.log.warning(f"Could not find latest version of process definition {key}: {result.error}")
            return None
        return result.value

    def _version_id(self, key: str, version: int) -> Optional[str]:
        """Id of the definition at an exact version, or None when absent or ambiguous."""
        result = self.gateway.list_definitions({"key": key, "version": version})
        definitions: List[ProcessDefinition] = result.unwrap_or([])

        if not definitions:
            self.log.warning(f"Process definition {key} has no version {version}")
            return None

        if len(definitions) > 1:
            # Same key and version deployed for several tenants
            self.log.warning(
                f"Process definition {key} version {version} is ambiguous: "
                f"{[d.id for d in definitions]}"
            )
            return None

        return definitions[0].id
