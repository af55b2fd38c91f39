"""Tests for the provider registry."""

import pytest

from persistwire.base.errors import RegistryError
from persistwire.providers.resolver import ENTRY_POINT_GROUP, ProviderRegistration, ProviderResolver


def resolver_for(*registrations: ProviderRegistration) -> ProviderResolver:
    return ProviderResolver(registrations=list(registrations), entry_point_group=None, use_config=False)


class FakeEntryPoint:
    def __init__(self, name, target):
        self.name = name
        self.value = f"fake:{name}"
        self._target = target

    def load(self):
        if isinstance(self._target, Exception):
            raise self._target
        return self._target


class TestProviderResolver:
    def test_loads_explicit_registrations(self, provider_module):
        resolver = resolver_for(ProviderRegistration("fake_backend", "RecordingProvider"))

        providers = resolver.get_persistence_providers()

        assert [type(p).__name__ for p in providers] == ["RecordingProvider"]

    def test_lazy_and_cached(self, provider_module):
        """Test that nothing is built before the first call and only once afterwards."""
        resolver = resolver_for(ProviderRegistration("fake_backend", "RecordingProvider"))
        assert provider_module.RecordingProvider.instances == 0

        first = resolver.get_persistence_providers()
        second = resolver.get_persistence_providers()

        assert provider_module.RecordingProvider.instances == 1
        assert first[0] is second[0]

    def test_clear_cached_providers(self, provider_module):
        resolver = resolver_for(ProviderRegistration("fake_backend", "RecordingProvider"))
        first = resolver.get_persistence_providers()[0]

        resolver.clear_cached_providers()

        assert resolver.get_persistence_providers()[0] is not first

    def test_one_instance_per_class(self, provider_module):
        resolver = resolver_for(
            ProviderRegistration("fake_backend", "RecordingProvider"),
            ProviderRegistration("fake_backend", "OtherProvider"),
            ProviderRegistration("fake_backend", "RecordingProvider"),
        )

        providers = resolver.get_persistence_providers()

        assert [type(p).__name__ for p in providers] == ["RecordingProvider", "OtherProvider"]

    def test_missing_module(self):
        resolver = resolver_for(ProviderRegistration("no_such_backend_xyz", "Provider"))

        with pytest.raises(RegistryError, match="no_such_backend_xyz"):
            resolver.get_persistence_providers()

    def test_missing_class(self, provider_module):
        resolver = resolver_for(ProviderRegistration("fake_backend", "MissingProvider"))

        with pytest.raises(RegistryError, match="MissingProvider"):
            resolver.get_persistence_providers()

    def test_not_a_provider(self, provider_module):
        resolver = resolver_for(ProviderRegistration("fake_backend", "NotAProvider"))

        with pytest.raises(RegistryError, match="must inherit from PersistenceProvider"):
            resolver.get_persistence_providers()

    def test_constructor_failure(self, provider_module):
        resolver = resolver_for(ProviderRegistration("fake_backend", "ExplodingProvider"))

        with pytest.raises(RegistryError, match="backend unavailable"):
            resolver.get_persistence_providers()

    def test_registrations_from_config(self, provider_module, isolated_environment):
        (isolated_environment / "config.yml").write_text(
            "persistence:\n  providers:\n    - module_path: fake_backend\n      class_name: OtherProvider\n"
        )
        resolver = ProviderResolver(entry_point_group=None)

        assert [type(p).__name__ for p in resolver.get_persistence_providers()] == ["OtherProvider"]

    def test_invalid_config_entry(self, isolated_environment):
        (isolated_environment / "config.yml").write_text("persistence:\n  providers:\n    - module: fake_backend\n")

        with pytest.raises(RegistryError, match="Invalid provider entry"):
            ProviderResolver(entry_point_group=None).get_persistence_providers()

    def test_entry_points(self, provider_module, monkeypatch):
        """Test that providers advertised through entry points are loaded."""
        seen_groups = []

        def fake_entry_points(group):
            seen_groups.append(group)
            return [FakeEntryPoint("recording", provider_module.RecordingProvider)]

        monkeypatch.setattr("persistwire.providers.resolver.entry_points", fake_entry_points)

        providers = ProviderResolver(use_config=False).get_persistence_providers()

        assert seen_groups == [ENTRY_POINT_GROUP]
        assert [type(p).__name__ for p in providers] == ["RecordingProvider"]

    def test_broken_entry_point(self, monkeypatch):
        monkeypatch.setattr(
            "persistwire.providers.resolver.entry_points",
            lambda group: [FakeEntryPoint("broken", ImportError("no module named broken"))],
        )

        with pytest.raises(RegistryError, match="broken"):
            ProviderResolver(use_config=False).get_persistence_providers()
