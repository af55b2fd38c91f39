"""Registry of managed classes discovered during the scan phase.

Managed classes are indexed by the unit they declare. A class that declares no
unit is filed under :data:`UNASSIGNED`, which is a key of its own and never
equal to a unit literally named ``""``.

The registry is written only while the scan runs and read once during
synthesis. :meth:`ManagedClassRegistry.freeze` marks the end of the scan.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Union

from persistwire.base.errors import RegistryError


@dataclass(frozen=True)
class NamedUnit:
    """Key for the classes declared for one named unit."""

    name: str

    def __str__(self) -> str:
        return self.name


class Unassigned(Enum):
    """Key for classes that declare no unit."""

    UNASSIGNED = "unassigned"

    def __repr__(self) -> str:
        return "UNASSIGNED"


UNASSIGNED = Unassigned.UNASSIGNED

UnitKey = Union[NamedUnit, Unassigned]


def qualified_name(managed_class: type | str) -> str:
    """Return ``module.QualName`` for a class; strings pass through unchanged."""
    if isinstance(managed_class, str):
        return managed_class
    return f"{managed_class.__module__}.{managed_class.__qualname__}"


class ManagedClassRegistry:
    """Managed class names indexed by :data:`UnitKey`.

    Examples:
        >>> registry = ManagedClassRegistry()
        >>> registry.record("app.model.Order", ["orders", "reporting"])
        >>> registry.record("app.model.Money")
        >>> sorted(registry.classes_for(NamedUnit("orders")))
        ['app.model.Order']
        >>> sorted(registry.classes_for(UNASSIGNED))
        ['app.model.Money']
    """

    def __init__(self):
        self._classes: dict[UnitKey, set[str]] = {}
        self._frozen = False

    def record(self, managed_class: type | str, declared_unit_names: Iterable[str] = ()) -> None:
        """File a managed class under each declared unit, or under UNASSIGNED.

        :raises RegistryError: If the registry has been frozen
        """
        if self._frozen:
            raise RegistryError(
                f"Cannot record {qualified_name(managed_class)}: the managed class registry is frozen"
            )

        class_name = qualified_name(managed_class)
        names = list(declared_unit_names or ())
        keys: list[UnitKey] = [NamedUnit(n) for n in names] if names else [UNASSIGNED]
        for key in keys:
            self._classes.setdefault(key, set()).add(class_name)

    def classes_for(self, key: UnitKey) -> frozenset[str]:
        return frozenset(self._classes.get(key, ()))

    def keys(self) -> list[UnitKey]:
        return list(self._classes)

    def freeze(self) -> "ManagedClassRegistry":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, class_name: object) -> bool:
        return any(class_name in classes for classes in self._classes.values())

    def __len__(self) -> int:
        return len(set().union(*self._classes.values())) if self._classes else 0

    def __repr__(self) -> str:
        buckets = ", ".join(f"{key!r}: {len(classes)}" for key, classes in self._classes.items())
        return f"ManagedClassRegistry({buckets})"
