"""Provider registry.

Known providers come from two places:

- the ``persistwire.providers`` entry-point group of installed distributions
- :class:`ProviderRegistration` entries passed explicitly or listed under
  ``persistence.providers`` in configuration

Nothing is imported until :meth:`ProviderResolver.get_persistence_providers`
is first called; the resulting instances are cached.

Examples:
    >>> resolver = ProviderResolver(
    ...     registrations=[ProviderRegistration("myapp.backend", "MyProvider")],
    ...     entry_point_group=None,
    ...     use_config=False,
    ... )
    >>> [type(p).__name__ for p in resolver.get_persistence_providers()]
    ['MyProvider']
"""

import importlib
from dataclasses import dataclass
from importlib.metadata import entry_points

from persistwire.base.errors import RegistryError
from persistwire.providers.base import PersistenceProvider
from persistwire.scanning.managed_classes import qualified_name
from persistwire.utils.config import get_config_value
from persistwire.utils.logger import get_logger

logger = get_logger("providers")

ENTRY_POINT_GROUP = "persistwire.providers"


@dataclass
class ProviderRegistration:
    """Lazy reference to a provider class.

    :param module_path: Module to import (e.g., 'myapp.backend')
    :param class_name: Provider class within the module (e.g., 'MyProvider')
    """

    module_path: str
    class_name: str


class ProviderResolver:
    """Resolve and cache the globally known provider instances.

    :param registrations: Explicit provider registrations
    :param entry_point_group: Entry-point group to scan, or None to skip entry points
    :param use_config: Whether to read ``persistence.providers`` from configuration
    """

    def __init__(
        self,
        registrations: list[ProviderRegistration] | None = None,
        entry_point_group: str | None = ENTRY_POINT_GROUP,
        use_config: bool = True,
    ):
        self.registrations = list(registrations or [])
        self.entry_point_group = entry_point_group
        self.use_config = use_config
        self._providers: list[PersistenceProvider] | None = None

    def get_persistence_providers(self) -> list[PersistenceProvider]:
        """Return one instance per distinct provider class, loading on first call.

        :raises RegistryError: If a registration cannot be imported or is not a provider
        """
        if self._providers is None:
            self._providers = self._load()
        return list(self._providers)

    def clear_cached_providers(self) -> None:
        self._providers = None

    def _load(self) -> list[PersistenceProvider]:
        classes: dict[str, type] = {}

        for source, provider_class in self._discover():
            if not isinstance(provider_class, type) or not issubclass(provider_class, PersistenceProvider):
                raise RegistryError(
                    f"Provider {source} must inherit from PersistenceProvider"
                )
            classes.setdefault(qualified_name(provider_class), provider_class)

        providers = []
        for class_name, provider_class in classes.items():
            try:
                providers.append(provider_class())
            except Exception as e:
                raise RegistryError(f"Failed to instantiate provider {class_name}: {e}") from e
            logger.debug(f"  ✓ Loaded provider: {class_name}")

        logger.info(f"Resolved {len(providers)} persistence provider(s)")
        return providers

    def _discover(self):
        if self.entry_point_group:
            for entry_point in entry_points(group=self.entry_point_group):
                try:
                    yield f"entry point '{entry_point.name}'", entry_point.load()
                except Exception as e:
                    raise RegistryError(
                        f"Failed to load provider entry point '{entry_point.name}' ({entry_point.value}): {e}"
                    ) from e

        for registration in self._all_registrations():
            try:
                module = importlib.import_module(registration.module_path)
                provider_class = getattr(module, registration.class_name)
            except (ImportError, AttributeError) as e:
                raise RegistryError(
                    f"Failed to load provider {registration.class_name} from {registration.module_path}: {e}"
                ) from e
            yield f"{registration.module_path}.{registration.class_name}", provider_class

    def _all_registrations(self) -> list[ProviderRegistration]:
        registrations = list(self.registrations)
        if self.use_config:
            for entry in get_config_value("persistence.providers", None) or []:
                try:
                    registrations.append(ProviderRegistration(**entry))
                except TypeError as e:
                    raise RegistryError(f"Invalid provider entry in configuration: {entry!r}") from e
        return registrations
