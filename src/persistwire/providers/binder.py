"""Binding of provider classes to host singletons.

Each distinct provider class ends up registered exactly once in the host
:class:`~persistwire.container.registry.ComponentRegistry`:

- providers already known to the :class:`~persistwire.providers.resolver.ProviderResolver`
  are registered as ready-made instances
- a unit naming a known provider class through a re-exporting module
  (``pkg.Provider`` for ``pkg.backend.Provider``) reuses the known instance
- a provider class named by a unit but unknown to the resolver is registered
  as a lazy singleton; the class is loaded and constructed on first use, so a
  bad class name only fails when something actually asks for the provider
"""

import sys
from collections.abc import Iterable

from persistwire.base.errors import ProviderInstantiationError
from persistwire.container.registry import ComponentRegistry, SingletonRegistration
from persistwire.providers.base import PersistenceProvider
from persistwire.scanning.managed_classes import qualified_name
from persistwire.units.class_loading import ClassLoader, context_class_loader
from persistwire.units.info import UnitDescription, UnitInfo
from persistwire.utils.logger import get_logger

logger = get_logger("providers")


def _provider_types(provider_class: type) -> tuple[type, ...]:
    return tuple(t for t in provider_class.__mro__ if t is not object)


def _known_provider_named(
    class_name: str, known_providers: Iterable[PersistenceProvider]
) -> PersistenceProvider | None:
    """The known provider whose class is reachable as ``class_name``, without importing anything.

    Besides the defining module path, a class is reachable through any already
    imported module that re-exports it (``pkg.Provider`` for ``pkg.backend.Provider``).
    """
    by_class = {type(p): p for p in known_providers}
    for provider_class, provider in by_class.items():
        if qualified_name(provider_class) == class_name:
            return provider

    module_name, _, attribute = class_name.rpartition(".")
    module = sys.modules.get(module_name)
    target = getattr(module, attribute, None) if module is not None else None
    return by_class.get(target) if isinstance(target, type) else None


class ProviderBindingTable:
    """Provider class names bound during one registration pass."""

    def __init__(self):
        self._bound: set[str] = set()

    def add(self, class_name: str) -> bool:
        """Record ``class_name``; False if it was already bound."""
        if class_name in self._bound:
            return False
        self._bound.add(class_name)
        return True

    def __contains__(self, class_name: str) -> bool:
        return class_name in self._bound

    def __len__(self) -> int:
        return len(self._bound)

    def __iter__(self):
        return iter(sorted(self._bound))


class ProviderBinder:
    """Register provider singletons in ``registry``, one per provider class.

    :param registry: Host registry receiving the registrations
    :param table: Binding table shared across the pass (a new one by default)
    """

    def __init__(self, registry: ComponentRegistry, table: ProviderBindingTable | None = None):
        self.registry = registry
        self.table = table if table is not None else ProviderBindingTable()

    def bind_known_providers(self, providers: Iterable[PersistenceProvider]) -> list[SingletonRegistration]:
        """Register every resolver-known provider instance once, keyed by class name."""
        registrations = []
        for provider in providers:
            class_name = qualified_name(type(provider))
            if not self.table.add(class_name):
                continue
            registrations.append(
                self.registry.register_singleton(
                    _provider_types(type(provider)),
                    lambda provider=provider: provider,
                    qualifiers=[class_name],
                )
            )
            logger.debug(f"Bound known provider {class_name}")
        return registrations

    def bind(
        self,
        unit: UnitInfo | UnitDescription,
        known_providers: Iterable[PersistenceProvider] = (),
    ) -> SingletonRegistration | None:
        """Bind the provider class named by ``unit``, if it is not bound yet.

        :return: The new lazy registration, or None when nothing had to be bound
        """
        class_name = unit.persistence_provider_class_name
        if not class_name:
            return None

        known_providers = list(known_providers)
        if _known_provider_named(class_name, known_providers) is not None or not self.table.add(class_name):
            return None

        loader = unit.class_loader
        registration = self.registry.register_singleton(
            PersistenceProvider,
            lambda: self._instantiate(class_name, loader, known_providers),
            qualifiers=[class_name],
        )
        logger.info(f"Bound provider {class_name} for unit '{unit.persistence_unit_name}' (lazy)")
        return registration

    def bind_preexisting(
        self,
        registrations: Iterable[SingletonRegistration],
        known_providers: Iterable[PersistenceProvider] = (),
    ) -> list[SingletonRegistration]:
        """Bind providers for unit registrations made before the pipeline ran.

        The provider class name and loader come from the registration's
        :class:`UnitDescription`. Registrations without one are instantiated
        once, uncached, to read them.
        """
        known_providers = list(known_providers)
        bound = []
        for registration in registrations:
            description = registration.description
            if not isinstance(description, UnitDescription):
                instance = registration.create()
                description = instance.describe() if isinstance(instance, UnitInfo) else None
            if description is None:
                logger.warning(f"Skipping unit registration without a description: {registration!r}")
                continue
            new = self.bind(description, known_providers)
            if new is not None:
                bound.append(new)
        return bound

    @staticmethod
    def _instantiate(
        class_name: str, loader: ClassLoader | None, known_providers: Iterable[PersistenceProvider] = ()
    ) -> PersistenceProvider:
        loader = loader or context_class_loader()
        try:
            provider_class = loader.load_class(class_name)
        except (ImportError, TypeError) as e:
            raise ProviderInstantiationError(
                f"Cannot load provider class {class_name}: {e}", class_name=class_name
            ) from e

        # Alias of a known provider that was not imported when the unit was bound
        for provider in known_providers:
            if type(provider) is provider_class:
                return provider

        try:
            return provider_class()
        except Exception as e:
            raise ProviderInstantiationError(
                f"Cannot instantiate provider class {class_name}: {e}", class_name=class_name
            ) from e
