"""Command line entry point for the process instance migrator."""

import argparse
import json
import logging
import signal
import sys
import threading
from typing import List, Optional

from .config import MigratorConfig
from .exceptions import ConfigurationError
from .gateway.camunda import CamundaGateway
from .models.migration import MigrationRun
from .orchestrator import MigrationOrchestrator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Migrate running Camunda process instances to a newer process definition version"
    )
    parser.add_argument("--name", help="Process definition key, or ALL (env: PROCESS_DEFINITION_NAME)")
    parser.add_argument("--source-version", type=int,
                        help="Only migrate this version (env: SOURCE_PROCESS_DEFINITION_ID)")
    parser.add_argument("--target-version", type=int,
                        help="Migrate to this version instead of the latest (env: TARGET_PROCESS_DEFINITION_ID)")
    parser.add_argument("--base-url", help="Engine REST URL (env: INTEGRATIONS_CAMUNDA_API_BASE_URI)")
    parser.add_argument("--dry-run", action="store_true", help="Plan without changing the engine")
    parser.add_argument("--report", help="Write the run report as JSON to this path")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def load_config(args: argparse.Namespace) -> MigratorConfig:
    """Read configuration from the environment and apply command line overrides."""
    config = MigratorConfig.from_env()

    if args.name:
        config.process_definition_name = args.name
    if args.source_version is not None:
        config.source_version = args.source_version
    if args.target_version is not None:
        config.target_version = args.target_version
    if args.base_url:
        config.base_url = args.base_url
    if args.dry_run:
        config.dry_run = True
    if args.verbose:
        config.log_level = "DEBUG"

    config.validate()
    return config


def print_summary(report: MigrationRun) -> None:
    print("\n" + "=" * 60)
    print("MIGRATION COMPLETE" + (" (DRY RUN)" if report.dry_run else ""))
    print("=" * 60)
    print(f"Pairs: {report.total_pairs}")
    print(f"Succeeded: {report.succeeded}")
    print(f"Failed: {report.failed}")
    print(f"Skipped: {report.skipped}")
    if report.unresolved:
        print(f"Unresolved: {', '.join(report.unresolved)}")
    for step in report.steps:
        line = f"  {step.definition_key} {step.source_id} -> {step.target_id}: {step.status.value}"
        if step.planned_action:
            line += f" ({step.planned_action})"
        if step.error:
            line += f" [{step.error}]"
        print(line)
    if report.duration_seconds:
        print(f"Duration: {report.duration_seconds:.2f} seconds")


def run(config: MigratorConfig, cancel_event: Optional[threading.Event] = None) -> MigrationRun:
    """Run one migration for the configured request."""
    gateway = CamundaGateway(
        config.base_url,
        timeout=config.request_timeout,
        max_retries=config.max_retries,
        auth_username=config.username,
        auth_password=config.password,
    )
    try:
        if not gateway.validate_connection():
            logger.warning(f"Engine at {config.base_url} did not answer the connection check")

        orchestrator = MigrationOrchestrator.from_config(config, gateway, cancel_event=cancel_event)
        return orchestrator.run([config.to_request()])
    finally:
        gateway.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ConfigurationError as e:
        logging.basicConfig(level=logging.INFO)
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    cancel_event = threading.Event()

    def _handle_sigterm(signum, frame):
        logger.warning("Termination requested, stopping after the current engine call")
        cancel_event.set()

    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGTERM, _handle_sigterm)

    try:
        report = run(config, cancel_event)
    except Exception:
        logger.exception("Error while migrating process instances")
        return EXIT_ERROR

    print_summary(report)

    if args.report:
        with open(args.report, "w") as f:
            json.dump(report.to_dict(), f, indent=2)
        print(f"Report saved to {args.report}")

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
