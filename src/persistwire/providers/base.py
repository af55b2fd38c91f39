"""Base interface for persistence backend providers."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any


class PersistenceProvider(ABC):
    """Abstract base class for backend providers.

    A provider turns a finalized :class:`~persistwire.units.info.UnitInfo` into
    a container-managed factory. Providers are constructed with no arguments;
    the registration pipeline creates at most one instance per provider class.

    Metadata Attributes (define on subclass):
        name: Provider identifier (e.g., "sqlalchemy")
        description: Short description for display in the CLI
    """

    name: str = NotImplemented
    description: str | None = None

    @abstractmethod
    def create_container_factory(self, unit_info: Any, properties: Mapping[str, Any] | None = None) -> Any:
        """Create the factory backing ``unit_info``.

        :param unit_info: The unit to initialize
        :param properties: Overrides merged over ``unit_info.properties``
        :return: Provider-specific factory object
        """
