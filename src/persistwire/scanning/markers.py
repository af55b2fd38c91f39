"""Persistence markers for data-model classes.

Classes decorated with one of :func:`entity`, :func:`embeddable`,
:func:`mapped_superclass` or :func:`converter` are managed data-model types.
The component scanner files them in the managed-class registry and keeps them
out of ordinary component registration. :func:`persistence_unit` declares which
unit(s) a managed class belongs to; without it the class is unassigned.

Markers are stored in the class's own ``__dict__`` and are not inherited by
subclasses.

Examples:
    >>> @persistence_unit("orders")
    ... @entity
    ... class Order:
    ...     pass
    >>> is_managed_class(Order)
    True
    >>> declared_units(Order)
    ('orders',)
"""

from typing import Callable

__all__ = [
    "ENTITY",
    "EMBEDDABLE",
    "MAPPED_SUPERCLASS",
    "CONVERTER",
    "MANAGED_MARKERS",
    "entity",
    "embeddable",
    "mapped_superclass",
    "converter",
    "persistence_unit",
    "markers_of",
    "is_managed_class",
    "declared_units",
]

ENTITY = "entity"
EMBEDDABLE = "embeddable"
MAPPED_SUPERCLASS = "mapped_superclass"
CONVERTER = "converter"

MANAGED_MARKERS = frozenset({ENTITY, EMBEDDABLE, MAPPED_SUPERCLASS, CONVERTER})

_MARKERS_ATTR = "__persistence_markers__"
_UNITS_ATTR = "__persistence_units__"


def _add_marker(target: type, marker: str) -> type:
    if not isinstance(target, type):
        raise TypeError(f"@{marker} can only decorate classes, got {target!r}")
    existing = target.__dict__.get(_MARKERS_ATTR, frozenset())
    setattr(target, _MARKERS_ATTR, existing | {marker})
    return target


def entity(target: type) -> type:
    return _add_marker(target, ENTITY)


def embeddable(target: type) -> type:
    return _add_marker(target, EMBEDDABLE)


def mapped_superclass(target: type) -> type:
    return _add_marker(target, MAPPED_SUPERCLASS)


def converter(target: type) -> type:
    return _add_marker(target, CONVERTER)


def persistence_unit(*unit_names: str) -> Callable[[type], type]:
    """Declare the persistence unit(s) a managed class belongs to.

    May be stacked; names accumulate in declaration order without duplicates.
    """
    for unit_name in unit_names:
        if not isinstance(unit_name, str):
            raise TypeError(f"Persistence unit names must be strings, got {unit_name!r}")

    def decorator(target: type) -> type:
        existing = target.__dict__.get(_UNITS_ATTR, ())
        merged = existing + tuple(n for n in unit_names if n not in existing)
        setattr(target, _UNITS_ATTR, merged)
        return target

    return decorator


def markers_of(target: type) -> frozenset[str]:
    return getattr(target, "__dict__", {}).get(_MARKERS_ATTR, frozenset())


def is_managed_class(target: type) -> bool:
    return bool(markers_of(target) & MANAGED_MARKERS)


def declared_units(target: type) -> tuple[str, ...]:
    return getattr(target, "__dict__", {}).get(_UNITS_ATTR, ())
