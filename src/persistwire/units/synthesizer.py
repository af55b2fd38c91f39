"""Synthesis of :class:`UnitInfo` records from raw descriptors and scanned classes.

Unlisted-class merge policy:

1. ``exclude_unlisted_classes is True``: the explicit class list is authoritative,
   nothing from the managed-class registry is added.
2. Otherwise the classes declared for the unit's own name are added, and, only
   when the unit has a non-empty name, every unassigned class as well.
3. A missing flag still means "exclude" in the finished record; the merge in
   step 2 has already happened by then.

The merged list keeps explicit entries first and drops duplicates.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from persistwire.base.errors import ConfigurationError
from persistwire.descriptors.parser import DescriptorParser, RawUnitDescriptor
from persistwire.descriptors.schema import PersistenceDocument
from persistwire.scanning.managed_classes import UNASSIGNED, ManagedClassRegistry, NamedUnit
from persistwire.units.class_loading import (
    ClassLoader,
    TempClassLoaderFactory,
    context_class_loader,
    default_temp_class_loader_factory,
)
from persistwire.units.info import (
    DEFAULT_SCHEMA_VERSION,
    DataSourceResolver,
    SharedCacheMode,
    TransactionType,
    UnitInfo,
    ValidationMode,
)
from persistwire.utils.config import get_config_value
from persistwire.utils.logger import get_logger

logger = get_logger("synthesizer")


def merge_managed_classes(raw: RawUnitDescriptor, registry: ManagedClassRegistry | None) -> list[str]:
    """Apply the unlisted-class policy to ``raw`` and return the merged class names."""
    merged = dict.fromkeys(name for name in raw.managed_class_names if name)

    if raw.exclude_unlisted_classes is not True and registry is not None:
        merged.update(dict.fromkeys(sorted(registry.classes_for(NamedUnit(raw.name)))))
        if raw.name:
            merged.update(dict.fromkeys(sorted(registry.classes_for(UNASSIGNED))))

    return list(merged)


def map_enum(value: Enum | str, target: type[Enum], what: str, unit_name: str = ""):
    """Map an enum member (or its name) onto the member of ``target`` with the same name.

    :raises ConfigurationError: If ``target`` has no such member
    """
    member_name = value.name if isinstance(value, Enum) else str(value)
    try:
        return target[member_name]
    except KeyError as e:
        raise ConfigurationError(
            f"Unrecognized {what} '{member_name}' in persistence unit '{unit_name}'. "
            f"Expected one of: {', '.join(target.__members__)}"
        ) from e


class UnitInfoSynthesizer:
    """Build finalized :class:`UnitInfo` records.

    :param schema_version: Schema version used when a descriptor does not state
        one; defaults to ``persistence.schema_version`` from configuration, then ``"2.2"``
    """

    def __init__(self, schema_version: str | None = None):
        self.schema_version = schema_version or get_config_value(
            "persistence.schema_version", DEFAULT_SCHEMA_VERSION
        )

    def synthesize(
        self,
        raw: RawUnitDescriptor,
        registry: ManagedClassRegistry | None,
        root_location: str,
        data_source_resolver: DataSourceResolver,
        temp_class_loader_factory: TempClassLoaderFactory | None = None,
        class_loader: ClassLoader | None = None,
        class_transformer_consumer: Callable[[Any], None] | None = None,
    ) -> UnitInfo:
        """Merge ``raw`` with the registry and return an immutable record.

        :raises ConfigurationError: If an enum value has no counterpart
        """
        loader = class_loader or context_class_loader()
        if temp_class_loader_factory is None:
            temp_class_loader_factory = default_temp_class_loader_factory(loader)

        managed_class_names = merge_managed_classes(raw, registry)
        added = len(managed_class_names) - len(set(raw.managed_class_names))
        if added > 0:
            logger.debug(f"Unit '{raw.name}': added {added} unlisted managed class(es)")

        info = UnitInfo(
            persistence_unit_name=raw.name if raw.name is not None else "",
            persistence_unit_root_url=root_location,
            data_source_resolver=data_source_resolver,
            transaction_type=map_enum(raw.transaction_type, TransactionType, "transaction type", raw.name),
            persistence_xml_schema_version=raw.schema_version or self.schema_version,
            persistence_provider_class_name=raw.provider,
            class_loader=loader,
            temp_class_loader_factory=temp_class_loader_factory,
            class_transformer_consumer=class_transformer_consumer,
            exclude_unlisted_classes=True if raw.exclude_unlisted_classes is None else raw.exclude_unlisted_classes,
            jar_file_urls=raw.jar_file_urls,
            managed_class_names=managed_class_names,
            mapping_file_names=raw.mapping_file_names,
            jta_data_source_name=raw.jta_data_source,
            non_jta_data_source_name=raw.non_jta_data_source,
            properties=raw.properties,
            shared_cache_mode=map_enum(raw.shared_cache_mode, SharedCacheMode, "shared cache mode", raw.name),
            validation_mode=map_enum(raw.validation_mode, ValidationMode, "validation mode", raw.name),
            description=raw.description,
        )

        logger.debug(
            f"Synthesized unit '{info.persistence_unit_name}' with {len(info.managed_class_names)} managed class(es)"
        )
        return info

    def synthesize_document(
        self,
        document: PersistenceDocument,
        registry: ManagedClassRegistry | None,
        root_location: str,
        data_source_resolver: DataSourceResolver,
        temp_class_loader_factory: TempClassLoaderFactory | None = None,
        class_loader: ClassLoader | None = None,
        parser: DescriptorParser | None = None,
        class_transformer_consumer: Callable[[Any], None] | None = None,
    ) -> list[UnitInfo]:
        """Parse every unit of ``document`` and synthesize it, in document order."""
        parser = parser or DescriptorParser()
        return [
            self.synthesize(
                raw,
                registry,
                root_location,
                data_source_resolver,
                temp_class_loader_factory,
                class_loader,
                class_transformer_consumer,
            )
            for raw in parser.parse(document, root_location)
        ]
