"""
Process Instance Migrator

Bulk migration of running workflow process instances from old process
definition versions to the latest (or an explicitly chosen) version on a
Camunda 7 engine.

Supports:
- Migrating a single process definition key or every deployed key ("ALL")
- Explicit source/target version selection
- Asynchronous migration batches with completion polling
- Deleting drained deployments and cleaning up failed batches
- Dry-run planning
"""

__version__ = "0.1.0"
