"""Data source handles and the registry-backed resolver.

Data sources are whatever the host registers under the :class:`DataSource`
type, qualified by their symbolic name. A registration qualified with
:data:`DEFAULT_DATA_SOURCE` (or with no qualifier at all) is the default data
source.
"""

from abc import ABC, abstractmethod
from typing import Any

from persistwire.container.registry import ComponentRegistry
from persistwire.utils.logger import get_logger

logger = get_logger("datasources")

DEFAULT_DATA_SOURCE = "default"


class DataSource(ABC):
    """Handle to a source of connections, consumed by backend providers."""

    @abstractmethod
    def get_connection(self) -> Any:
        """Return a new connection."""


class RegistryBackedDataSourceResolver:
    """Resolve data sources from a :class:`ComponentRegistry` at call time.

    Lookup order for ``(jta, use_default, name)``:

    1. ``name`` given: the registration qualified with ``name``.
    2. Nothing found and ``use_default``: the default data source.
    3. Otherwise None.

    ``jta`` is passed through for hosts that subclass this resolver; the
    in-process registry makes no distinction.
    """

    def __init__(self, registry: ComponentRegistry):
        self.registry = registry

    def __call__(self, jta: bool, use_default: bool, name: str | None) -> Any | None:
        if name is not None:
            found = self._lookup(name)
            if found is not None:
                return found
            logger.debug(f"No data source named '{name}' (jta={jta})")

        if use_default:
            return self._default()

        return None

    def _lookup(self, name: str) -> Any | None:
        matches = self.registry.get_registrations(DataSource, name)
        if len(matches) > 1:
            logger.warning(f"Ambiguous data source name '{name}': {len(matches)} registrations match")
            return None
        return matches[0].get() if matches else None

    def _default(self) -> Any | None:
        found = self._lookup(DEFAULT_DATA_SOURCE)
        if found is not None:
            return found
        unqualified = [r for r in self.registry.get_registrations(DataSource) if not r.qualifiers]
        if len(unqualified) == 1:
            return unqualified[0].get()
        return None
