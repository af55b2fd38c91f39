"""Finalized persistence unit records.

:class:`UnitInfo` is what a backend provider receives to initialize itself.
It is immutable once built: list-valued fields are tuples copied from the
inputs and the property bag is a private copy exposed read-only.

Some methods reach back into the host on every call:

- :meth:`UnitInfo.jta_data_source` / :meth:`UnitInfo.non_jta_data_source` call
  the injected :class:`DataSourceResolver` on every access. Nothing is cached,
  so a host may change what the resolver returns between calls.
- :meth:`UnitInfo.new_temp_class_loader` calls the temp loader factory on every
  access and may return a fresh loader each time.
- :meth:`UnitInfo.add_transformer` forwards a provider's class transformer to
  the host-supplied consumer, if any.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Protocol

from persistwire.base.errors import ConfigurationError
from persistwire.units.class_loading import ClassLoader, TempClassLoaderFactory, context_class_loader

DEFAULT_SCHEMA_VERSION = "2.2"


class TransactionType(Enum):
    JTA = "JTA"
    RESOURCE_LOCAL = "RESOURCE_LOCAL"


class SharedCacheMode(Enum):
    ALL = "ALL"
    NONE = "NONE"
    ENABLE_SELECTIVE = "ENABLE_SELECTIVE"
    DISABLE_SELECTIVE = "DISABLE_SELECTIVE"
    UNSPECIFIED = "UNSPECIFIED"


class ValidationMode(Enum):
    AUTO = "AUTO"
    CALLBACK = "CALLBACK"
    NONE = "NONE"


class DataSourceResolver(Protocol):
    """Late-bound data source lookup supplied by the host.

    :param jta: Whether the data source must be able to join managed transactions
    :param use_default: Whether a default data source may be returned when ``name``
        is absent or unknown
    :param name: Symbolic data source name from the descriptor
    :return: A data source handle, or None if nothing matches
    """

    def __call__(self, jta: bool, use_default: bool, name: str | None) -> Any | None: ...


@dataclass(frozen=True)
class UnitDescription:
    """The parts of a unit needed to bind its provider, available without building the unit."""

    persistence_unit_name: str
    persistence_provider_class_name: str | None = None
    class_loader: ClassLoader | None = None


@dataclass(frozen=True, eq=False)
class UnitInfo:
    """Immutable description of one persistence unit.

    Equality is identity: two units with the same name from different
    descriptor resources are distinct units.
    """

    persistence_unit_name: str
    persistence_unit_root_url: str
    data_source_resolver: DataSourceResolver = field(repr=False)
    transaction_type: TransactionType = TransactionType.JTA
    persistence_xml_schema_version: str | None = DEFAULT_SCHEMA_VERSION
    persistence_provider_class_name: str | None = None
    class_loader: ClassLoader | None = None
    temp_class_loader_factory: TempClassLoaderFactory | None = field(default=None, repr=False)
    class_transformer_consumer: Callable[[Any], None] | None = field(default=None, repr=False)
    exclude_unlisted_classes: bool = True
    jar_file_urls: Iterable[str] = ()
    managed_class_names: Iterable[str] = ()
    mapping_file_names: Iterable[str] = ()
    jta_data_source_name: str | None = None
    non_jta_data_source_name: str | None = None
    properties: Mapping[str, str] = field(default_factory=dict, repr=False)
    shared_cache_mode: SharedCacheMode = SharedCacheMode.UNSPECIFIED
    validation_mode: ValidationMode = ValidationMode.AUTO
    description: str | None = None

    def __post_init__(self):
        if self.persistence_unit_name is None:
            raise ConfigurationError("persistence_unit_name must not be None")
        if self.persistence_unit_root_url is None:
            raise ConfigurationError(f"Unit '{self.persistence_unit_name}' has no root URL")
        if not callable(self.data_source_resolver):
            raise ConfigurationError(f"Unit '{self.persistence_unit_name}' needs a callable data source resolver")
        if self.transaction_type is None:
            raise ConfigurationError(f"Unit '{self.persistence_unit_name}' has no transaction type")

        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "jar_file_urls", tuple(self.jar_file_urls or ()))
        object.__setattr__(self, "managed_class_names", tuple(self.managed_class_names or ()))
        object.__setattr__(self, "mapping_file_names", tuple(self.mapping_file_names or ()))
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties or {})))
        if self.persistence_xml_schema_version is None:
            object.__setattr__(self, "persistence_xml_schema_version", DEFAULT_SCHEMA_VERSION)
        if self.shared_cache_mode is None:
            object.__setattr__(self, "shared_cache_mode", SharedCacheMode.UNSPECIFIED)
        if self.validation_mode is None:
            object.__setattr__(self, "validation_mode", ValidationMode.AUTO)

    def jta_data_source(self) -> Any | None:
        """Resolve the JTA data source now.

        The default data source may be used only when no non-JTA data source is named.
        """
        use_default = self.non_jta_data_source_name is None
        if self.jta_data_source_name is None and not use_default:
            return None
        return self.data_source_resolver(True, use_default, self.jta_data_source_name)

    def non_jta_data_source(self) -> Any | None:
        """Resolve the non-JTA data source now; None when no name is given."""
        if self.non_jta_data_source_name is None:
            return None
        return self.data_source_resolver(False, False, self.non_jta_data_source_name)

    def new_temp_class_loader(self) -> ClassLoader:
        """Return a loader for provider-side temporary class inspection."""
        loader = self.temp_class_loader_factory() if self.temp_class_loader_factory is not None else None
        if loader is None:
            loader = self.class_loader or context_class_loader()
        return loader

    def add_transformer(self, transformer: Any) -> None:
        """Hand a provider's class transformer to the host; ignored when the host takes none."""
        if self.class_transformer_consumer is not None:
            self.class_transformer_consumer(transformer)

    def describe(self) -> UnitDescription:
        return UnitDescription(
            persistence_unit_name=self.persistence_unit_name,
            persistence_provider_class_name=self.persistence_provider_class_name,
            class_loader=self.class_loader,
        )
