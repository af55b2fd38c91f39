"""Component scanner.

Walks modules and packages, hands every class carrying a persistence marker to
the :class:`ManagedClassRegistry` and vetoes it from ordinary component
registration. Classes nested inside other classes are discovered too. All
other classes defined in the scanned modules are returned as ordinary
component candidates.

The host may also drive discovery itself and call :meth:`ComponentScanner.observe`
once per discovered type.
"""

import importlib
import inspect
import pkgutil
from collections.abc import Iterable
from dataclasses import dataclass, field
from types import ModuleType
from typing import TYPE_CHECKING

from persistwire.base.errors import RegistryError
from persistwire.scanning.managed_classes import ManagedClassRegistry
from persistwire.scanning.markers import declared_units, is_managed_class
from persistwire.utils.logger import get_logger

if TYPE_CHECKING:
    from persistwire.container.registry import ComponentRegistry

logger = get_logger("scanner")


@dataclass
class ScanResult:
    """Outcome of one scan.

    :param components: Unmarked classes, eligible for ordinary registration
    :param managed: Marked classes, filed in the managed-class registry and vetoed
    """

    components: list[type] = field(default_factory=list)
    managed: list[type] = field(default_factory=list)


class ComponentScanner:
    """Observe discovered types and file the managed ones.

    :param registry: Registry receiving managed classes
    :param component_registry: Optional host registry; managed classes are vetoed there
    """

    def __init__(self, registry: ManagedClassRegistry, component_registry: "ComponentRegistry | None" = None):
        self.registry = registry
        self.component_registry = component_registry

    def observe(self, discovered: type) -> bool:
        """Process one discovered type.

        Returns:
            True if the type is a managed class and must not be registered as a component
        """
        if not is_managed_class(discovered):
            return False

        units = declared_units(discovered)
        self.registry.record(discovered, units)
        if self.component_registry is not None:
            self.component_registry.veto(discovered)
        logger.debug(
            f"Managed class {discovered.__module__}.{discovered.__qualname__} -> "
            f"{', '.join(units) if units else 'unassigned'}"
        )
        return True

    def scan(self, targets: Iterable[str | ModuleType]) -> ScanResult:
        """Scan modules (and packages, recursively) for classes.

        :raises RegistryError: If a module cannot be imported
        """
        result = ScanResult()
        seen: set[str] = set()

        for module in self._iter_modules(targets):
            if module.__name__ in seen:
                continue
            seen.add(module.__name__)

            for candidate in _classes_defined_in(module):
                if self.observe(candidate):
                    result.managed.append(candidate)
                else:
                    result.components.append(candidate)

        logger.info(
            f"Scanned {len(seen)} module(s): {len(result.managed)} managed class(es), "
            f"{len(result.components)} component candidate(s)"
        )
        return result

    def _iter_modules(self, targets: Iterable[str | ModuleType]):
        for target in targets:
            module = self._import(target) if isinstance(target, str) else target
            yield module

            package_path = getattr(module, "__path__", None)
            if package_path is None:
                continue
            for info in pkgutil.walk_packages(package_path, prefix=f"{module.__name__}."):
                yield self._import(info.name)

    @staticmethod
    def _import(module_name: str) -> ModuleType:
        try:
            return importlib.import_module(module_name)
        except ImportError as e:
            logger.error(f"Failed to import module for scanning: {module_name}")
            raise RegistryError(f"Cannot import module {module_name} for scanning: {e}") from e


def _classes_defined_in(module: ModuleType):
    """Classes defined in ``module``, including classes nested in them, outermost first."""
    pending = [c for _, c in inspect.getmembers(module, inspect.isclass) if c.__module__ == module.__name__]
    seen: set[type] = set()
    while pending:
        cls = pending.pop(0)
        if cls in seen:
            continue
        seen.add(cls)
        yield cls
        pending.extend(
            member
            for member in vars(cls).values()
            if isinstance(member, type)
            and member.__module__ == module.__name__
            and member.__qualname__ == f"{cls.__qualname__}.{member.__name__}"
        )
