"""
Unit tests for VersionResolver.

Tests cover:
- Resolution of every version into the latest
- Explicit source version, with and without explicit target version
- Missing versions and engine failures degrading to non-actionable results
"""

from process_migrator.models.migration import MigrationRequest
from process_migrator.models.result import ErrorKind
from process_migrator.services.version_resolver import VersionResolver


class TestResolveAllVersions:
    """Requests without a source version."""

    def test_sources_are_every_version_and_target_is_latest(self, invoice_flow) -> None:
        invoice_flow.add_definition("invoice-flow", 3)
        invoice_flow.add_definition("other-flow", 1)
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(MigrationRequest(name="invoice-flow"))

        assert set(resolution.source_ids) == {
            "invoice-flow:1:id",
            "invoice-flow:2:id",
            "invoice-flow:3:id",
        }
        assert resolution.target_id == "invoice-flow:3:id"
        assert resolution.is_actionable
        assert resolution.pending_source_ids() == ["invoice-flow:1:id", "invoice-flow:2:id"]

    def test_target_version_is_ignored_without_source_version(self, invoice_flow) -> None:
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(MigrationRequest(name="invoice-flow", target_version=1))

        assert resolution.target_id == "invoice-flow:2:id"

    def test_unknown_key_is_not_actionable(self, gateway) -> None:
        resolver = VersionResolver(gateway)

        resolution = resolver.resolve(MigrationRequest(name="missing"))

        assert resolution.source_ids == []
        assert resolution.target_id is None
        assert not resolution.is_actionable

    def test_listing_failure_degrades_to_no_sources(self, invoice_flow) -> None:
        invoice_flow.fail("list_definitions", ErrorKind.TRANSPORT)
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(MigrationRequest(name="invoice-flow"))

        assert resolution.source_ids == []
        assert not resolution.is_actionable


class TestResolveExplicitVersions:
    """Requests naming a source version."""

    def test_source_version_into_latest(self, invoice_flow) -> None:
        invoice_flow.add_definition("invoice-flow", 3)
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(MigrationRequest(name="invoice-flow", source_version=1))

        assert resolution.source_ids == ["invoice-flow:1:id"]
        assert resolution.target_id == "invoice-flow:3:id"

    def test_source_version_into_explicit_target(self, invoice_flow) -> None:
        invoice_flow.add_definition("invoice-flow", 3)
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(
            MigrationRequest(name="invoice-flow", source_version=1, target_version=2)
        )

        assert resolution.source_ids == ["invoice-flow:1:id"]
        assert resolution.target_id == "invoice-flow:2:id"

    def test_equal_versions_resolve_but_have_nothing_pending(self, invoice_flow) -> None:
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(
            MigrationRequest(name="invoice-flow", source_version=2, target_version=2)
        )

        assert resolution.is_actionable
        assert resolution.pending_source_ids() == []

    def test_missing_source_version_is_dropped(self, invoice_flow) -> None:
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(MigrationRequest(name="invoice-flow", source_version=7))

        assert resolution.source_ids == []
        assert resolution.target_id == "invoice-flow:2:id"
        assert not resolution.is_actionable

    def test_missing_target_version_is_not_actionable(self, invoice_flow) -> None:
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(
            MigrationRequest(name="invoice-flow", source_version=1, target_version=9)
        )

        assert resolution.target_id is None
        assert not resolution.is_actionable

    def test_ambiguous_version_is_dropped(self, invoice_flow) -> None:
        invoice_flow.add_definition("invoice-flow", 1, deployment_id="tenant-b")
        invoice_flow.definitions[-1] = invoice_flow.definitions[-1].model_copy(
            update={"id": "invoice-flow:1:tenant-b"}
        )
        resolver = VersionResolver(invoice_flow)

        resolution = resolver.resolve(MigrationRequest(name="invoice-flow", source_version=1))

        assert resolution.source_ids == []
