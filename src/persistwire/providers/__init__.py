"""Backend provider interface, registry and binding."""

from .base import PersistenceProvider
from .binder import ProviderBinder, ProviderBindingTable
from .resolver import ENTRY_POINT_GROUP, ProviderRegistration, ProviderResolver

__all__ = [
    "PersistenceProvider",
    "ProviderBinder",
    "ProviderBindingTable",
    "ProviderRegistration",
    "ProviderResolver",
    "ENTRY_POINT_GROUP",
]
