"""Tests for the registry-backed data source resolver."""

import pytest

from persistwire.container.registry import ComponentRegistry
from persistwire.units.datasources import DEFAULT_DATA_SOURCE, DataSource, RegistryBackedDataSourceResolver


class FakeDataSource(DataSource):
    def __init__(self, label):
        self.label = label

    def get_connection(self):
        return f"connection to {self.label}"


@pytest.fixture
def registry():
    registry = ComponentRegistry()
    registry.register_instance(FakeDataSource("orders"), DataSource, qualifiers=["ordersDS"])
    registry.register_instance(FakeDataSource("default"), DataSource, qualifiers=[DEFAULT_DATA_SOURCE])
    return registry


class TestRegistryBackedDataSourceResolver:
    def test_named_lookup(self, registry):
        resolver = RegistryBackedDataSourceResolver(registry)

        assert resolver(False, False, "ordersDS").label == "orders"

    def test_unknown_name_without_default(self, registry):
        assert RegistryBackedDataSourceResolver(registry)(False, False, "missingDS") is None

    def test_unknown_name_falls_back_to_default(self, registry):
        assert RegistryBackedDataSourceResolver(registry)(True, True, "missingDS").label == "default"

    def test_no_name_uses_default(self, registry):
        assert RegistryBackedDataSourceResolver(registry)(True, True, None).label == "default"

    def test_no_name_no_default(self, registry):
        assert RegistryBackedDataSourceResolver(registry)(True, False, None) is None

    def test_single_unqualified_data_source_is_default(self):
        registry = ComponentRegistry()
        registry.register_instance(FakeDataSource("only"), DataSource)

        assert RegistryBackedDataSourceResolver(registry)(True, True, None).label == "only"

    def test_no_data_sources(self):
        assert RegistryBackedDataSourceResolver(ComponentRegistry())(True, True, "x") is None

    def test_lookup_happens_at_call_time(self):
        """Test that data sources registered after the resolver was built are found."""
        registry = ComponentRegistry()
        resolver = RegistryBackedDataSourceResolver(registry)
        assert resolver(False, False, "late") is None

        registry.register_instance(FakeDataSource("late"), DataSource, qualifiers=["late"])

        assert resolver(False, False, "late").label == "late"

    def test_ambiguous_name_resolves_to_none(self, registry):
        """Test that ambiguity is reported as no match rather than an error."""
        registry.register_instance(FakeDataSource("dup"), DataSource, qualifiers=["ordersDS"])

        assert RegistryBackedDataSourceResolver(registry)(False, False, "ordersDS") is None
