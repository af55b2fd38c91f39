"""Host component registry.

The registration driver lives in :mod:`persistwire.container.driver` and is
imported from there; it depends on most other subpackages.
"""

from .registry import SINGLETON_SCOPE, ComponentRegistry, SingletonRegistration

__all__ = [
    "ComponentRegistry",
    "SingletonRegistration",
    "SINGLETON_SCOPE",
]
