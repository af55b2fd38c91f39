"""In-process component registry.

The registration pipeline hands its results to a host registry that owns their
lifecycle. :class:`ComponentRegistry` is that host: it holds singleton
registrations (types, qualifiers, a factory called on first use), remembers
classes vetoed by the scanner, and answers lookups by type and qualifier.

Examples:
    >>> registry = ComponentRegistry()
    >>> registry.register_singleton(dict, lambda: {"a": 1}, qualifiers=["config"])
    SingletonRegistration(types=['dict'], qualifiers=['config'], created=False)
    >>> registry.get(dict, "config")
    {'a': 1}
"""

from collections.abc import Callable, Iterable
from typing import Any

from persistwire.base.errors import RegistryError
from persistwire.utils.logger import get_logger

logger = get_logger("registry")

SINGLETON_SCOPE = "singleton"


class SingletonRegistration:
    """A lazily created, process-wide instance.

    :param types: Types the instance can be looked up by
    :param factory: Zero-argument callable building the instance
    :param qualifiers: Names distinguishing registrations of the same type
    :param description: Optional metadata readable without calling the factory
    """

    scope = SINGLETON_SCOPE

    def __init__(
        self,
        types: Iterable[type],
        factory: Callable[[], Any],
        qualifiers: Iterable[str] = (),
        description: Any = None,
    ):
        self.types = tuple(types)
        if not self.types:
            raise RegistryError("A registration needs at least one type")
        if not callable(factory):
            raise RegistryError(f"Factory for {self.types[0].__name__} is not callable")
        self.factory = factory
        self.qualifiers = frozenset(qualifiers)
        self.description = description
        self._instance: Any = None
        self._created = False

    @property
    def created(self) -> bool:
        return self._created

    def provides(self, wanted: type) -> bool:
        return any(t is wanted or (isinstance(t, type) and issubclass(t, wanted)) for t in self.types)

    def create(self) -> Any:
        """Call the factory without caching the result."""
        return self.factory()

    def get(self) -> Any:
        """Return the singleton, creating it on first use.

        A failing factory is not cached; the next call tries again.
        """
        if not self._created:
            self._instance = self.factory()
            self._created = True
        return self._instance

    def __repr__(self) -> str:
        return (
            f"SingletonRegistration(types={[t.__name__ for t in self.types]}, "
            f"qualifiers={sorted(self.qualifiers)}, created={self._created})"
        )


class ComponentRegistry:
    """Singleton registrations plus the set of vetoed classes."""

    def __init__(self):
        self._registrations: list[SingletonRegistration] = []
        self._vetoed: set[type] = set()

    def register_singleton(
        self,
        types: type | Iterable[type],
        factory: Callable[[], Any],
        qualifiers: Iterable[str] = (),
        description: Any = None,
    ) -> SingletonRegistration:
        """Register ``factory`` as the process-wide singleton for ``types``."""
        if isinstance(types, type):
            types = (types,)
        registration = SingletonRegistration(types, factory, qualifiers, description)
        self._registrations.append(registration)
        logger.debug(f"Registered singleton {registration!r}")
        return registration

    def register_instance(
        self, instance: Any, types: type | Iterable[type] | None = None, qualifiers: Iterable[str] = ()
    ) -> SingletonRegistration:
        """Register an existing object as a singleton of ``types`` (its class by default)."""
        return self.register_singleton(types or type(instance), lambda: instance, qualifiers)

    def veto(self, cls: type) -> None:
        """Exclude ``cls`` from ordinary component registration."""
        self._vetoed.add(cls)

    def is_vetoed(self, cls: type) -> bool:
        return cls in self._vetoed

    @property
    def vetoed(self) -> frozenset[type]:
        return frozenset(self._vetoed)

    @property
    def registrations(self) -> list[SingletonRegistration]:
        return list(self._registrations)

    def get_registrations(self, wanted: type, qualifier: str | None = None) -> list[SingletonRegistration]:
        """Registrations providing ``wanted``, optionally restricted to one qualifier."""
        return [
            r
            for r in self._registrations
            if r.provides(wanted) and (qualifier is None or qualifier in r.qualifiers)
        ]

    def get(self, wanted: type, qualifier: str | None = None) -> Any:
        """Return the single instance matching ``wanted`` and ``qualifier``.

        :raises RegistryError: If no registration or more than one matches
        """
        matches = self.get_registrations(wanted, qualifier)
        label = wanted.__name__ + (f" ({qualifier})" if qualifier is not None else "")
        if not matches:
            raise RegistryError(f"No registration satisfies {label}")
        if len(matches) > 1:
            raise RegistryError(f"Ambiguous lookup for {label}: {len(matches)} registrations match")
        return matches[0].get()

    def get_stats(self) -> dict[str, Any]:
        type_names = sorted({r.types[0].__name__ for r in self._registrations})
        return {
            "registrations": len(self._registrations),
            "created": sum(1 for r in self._registrations if r.created),
            "vetoed": len(self._vetoed),
            "type_names": type_names,
        }

    def clear(self) -> None:
        self._registrations.clear()
        self._vetoed.clear()
