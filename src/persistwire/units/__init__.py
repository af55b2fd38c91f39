"""Finalized persistence unit records and their synthesis."""

from .class_loading import (
    ClassLoader,
    PathClassLoader,
    TempClassLoaderFactory,
    context_class_loader,
    default_temp_class_loader_factory,
    set_context_class_loader,
)
from .datasources import DEFAULT_DATA_SOURCE, DataSource, RegistryBackedDataSourceResolver
from .info import (
    DEFAULT_SCHEMA_VERSION,
    DataSourceResolver,
    SharedCacheMode,
    TransactionType,
    UnitDescription,
    UnitInfo,
    ValidationMode,
)
from .synthesizer import UnitInfoSynthesizer, map_enum, merge_managed_classes

__all__ = [
    "ClassLoader",
    "PathClassLoader",
    "TempClassLoaderFactory",
    "context_class_loader",
    "set_context_class_loader",
    "default_temp_class_loader_factory",
    "DataSource",
    "RegistryBackedDataSourceResolver",
    "DEFAULT_DATA_SOURCE",
    "DataSourceResolver",
    "DEFAULT_SCHEMA_VERSION",
    "SharedCacheMode",
    "TransactionType",
    "UnitDescription",
    "UnitInfo",
    "ValidationMode",
    "UnitInfoSynthesizer",
    "map_enum",
    "merge_managed_classes",
]
