"""Class-loading contexts.

A :class:`ClassLoader` resolves dotted class names (``package.module.Class``)
through the import system and locates named resources on its search roots.
:class:`PathClassLoader` additionally exposes an explicit search path, which
makes it cloneable: temp loaders for a unit are fresh ``PathClassLoader``
instances over the same path.

The ambient loader returned by :func:`context_class_loader` is used whenever a
unit carries no loader of its own. Hosts can replace it with
:func:`set_context_class_loader`.
"""

import importlib
import sys
from collections.abc import Callable, Iterable
from contextlib import contextmanager
from pathlib import Path

from persistwire.descriptors.resources import DescriptorResource

TempClassLoaderFactory = Callable[[], "ClassLoader"]


class ClassLoader:
    """Loads classes through the interpreter's import system.

    The base loader does not expose a search path of its own; it searches
    ``sys.path`` as it is at the time of the call.
    """

    @property
    def search_path(self) -> tuple[str, ...] | None:
        return None

    def load_class(self, name: str) -> type:
        """Import ``module`` and return attribute ``Class`` for ``module.Class``.

        :raises ImportError: If the module or the attribute cannot be found
        :raises TypeError: If the attribute is not a class
        """
        module_name, _, attribute = name.rpartition(".")
        if not module_name or not attribute:
            raise ImportError(f"Not a fully-qualified class name: {name!r}")

        module = self._import_module(module_name)

        try:
            target = getattr(module, attribute)
        except AttributeError as e:
            raise ImportError(f"Class {attribute} not found in module {module_name}") from e

        if not isinstance(target, type):
            raise TypeError(f"{name} is not a class")
        return target

    def _import_module(self, module_name: str):
        return importlib.import_module(module_name)

    def _resource_roots(self) -> Iterable[str]:
        return list(sys.path)

    def get_resources(self, name: str) -> list[DescriptorResource]:
        """Return every file called ``name`` under this loader's search roots, in search order."""
        found: list[DescriptorResource] = []
        seen: set[Path] = set()
        for root in self._resource_roots():
            directory = Path(root or ".")
            if not directory.is_dir():
                continue
            candidate = (directory / name).resolve()
            if candidate in seen or not candidate.is_file():
                continue
            seen.add(candidate)
            found.append(DescriptorResource.from_path(candidate))
        return found

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class PathClassLoader(ClassLoader):
    """Class loader over an explicit search path.

    Modules not yet imported are imported with the search path placed in front
    of ``sys.path`` for the duration of the import.

    :param search_path: Directories searched for modules and resources
    """

    def __init__(self, search_path: Iterable[str | Path]):
        self._search_path = tuple(str(p) for p in search_path)

    @property
    def search_path(self) -> tuple[str, ...]:
        return self._search_path

    def _import_module(self, module_name: str):
        if module_name in sys.modules:
            return sys.modules[module_name]
        with _prepended_to_sys_path(self._search_path):
            return importlib.import_module(module_name)

    def _resource_roots(self) -> Iterable[str]:
        return self._search_path

    def clone(self) -> "PathClassLoader":
        return PathClassLoader(self._search_path)

    def __repr__(self) -> str:
        return f"PathClassLoader({list(self._search_path)!r})"


@contextmanager
def _prepended_to_sys_path(entries: tuple[str, ...]):
    added = [entry for entry in entries if entry not in sys.path]
    sys.path[:0] = added
    try:
        yield
    finally:
        for entry in added:
            if entry in sys.path:
                sys.path.remove(entry)


_context_class_loader: ClassLoader | None = None


def context_class_loader() -> ClassLoader:
    """The ambient class loader (a plain :class:`ClassLoader` unless replaced)."""
    global _context_class_loader
    if _context_class_loader is None:
        _context_class_loader = ClassLoader()
    return _context_class_loader


def set_context_class_loader(loader: ClassLoader | None) -> None:
    """Replace the ambient class loader; ``None`` restores the default."""
    global _context_class_loader
    _context_class_loader = loader


def default_temp_class_loader_factory(loader: ClassLoader) -> TempClassLoaderFactory:
    """Clone ``loader``'s search path when it exposes one, else reuse ``loader``."""
    search_path = loader.search_path
    if search_path is not None:
        return lambda: PathClassLoader(search_path)
    return lambda: loader
