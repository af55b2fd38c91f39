"""Discovery of managed data-model classes."""

from .managed_classes import (
    UNASSIGNED,
    ManagedClassRegistry,
    NamedUnit,
    Unassigned,
    UnitKey,
    qualified_name,
)
from .markers import (
    converter,
    declared_units,
    embeddable,
    entity,
    is_managed_class,
    mapped_superclass,
    persistence_unit,
)
from .scanner import ComponentScanner, ScanResult

__all__ = [
    "ManagedClassRegistry",
    "NamedUnit",
    "Unassigned",
    "UNASSIGNED",
    "UnitKey",
    "qualified_name",
    "entity",
    "embeddable",
    "mapped_superclass",
    "converter",
    "persistence_unit",
    "is_managed_class",
    "declared_units",
    "ComponentScanner",
    "ScanResult",
]
