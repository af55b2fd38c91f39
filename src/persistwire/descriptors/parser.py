"""Conversion of descriptor documents into raw unit descriptors.

:class:`DescriptorParser` is a pure transformation: it applies defaults, copies
lists so later merging cannot alter the document, and resolves jar references
against the unit root. It performs no I/O and no schema validation (the
marshalling step already did that).
"""

from dataclasses import dataclass, field

from persistwire.descriptors.locations import resolve_location
from persistwire.descriptors.schema import (
    PersistenceDocument,
    PersistenceUnitCachingType,
    PersistenceUnitElement,
    PersistenceUnitTransactionType,
    PersistenceUnitValidationModeType,
)


@dataclass
class RawUnitDescriptor:
    """One declared unit, defaults applied, not yet merged with scanned classes.

    The synthesizer extends a copy of ``managed_class_names`` with unlisted
    classes; the descriptor itself is never changed.
    """

    name: str = ""
    provider: str | None = None
    description: str | None = None
    transaction_type: PersistenceUnitTransactionType = PersistenceUnitTransactionType.JTA
    managed_class_names: list[str] = field(default_factory=list)
    mapping_file_names: list[str] = field(default_factory=list)
    jar_file_urls: list[str] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    shared_cache_mode: PersistenceUnitCachingType = PersistenceUnitCachingType.UNSPECIFIED
    validation_mode: PersistenceUnitValidationModeType = PersistenceUnitValidationModeType.AUTO
    exclude_unlisted_classes: bool | None = None
    jta_data_source: str | None = None
    non_jta_data_source: str | None = None
    schema_version: str | None = None


class DescriptorParser:
    """Turn a :class:`PersistenceDocument` into :class:`RawUnitDescriptor` objects.

    Examples:
        >>> document = PersistenceDocument.model_validate(
        ...     {"persistence-unit": [{"name": "orders", "jar-file": ["lib/x.jar"]}]}
        ... )
        >>> [unit] = DescriptorParser().parse(document, "file:/app/")
        >>> unit.jar_file_urls
        ['file:/app/lib/x.jar']
    """

    def parse(self, document: PersistenceDocument, root_location: str) -> list[RawUnitDescriptor]:
        """Return one raw descriptor per unit, in document order.

        :raises LocationResolutionError: If a jar reference cannot be resolved
        """
        if document is None:
            return []
        return [self.parse_unit(unit, root_location, document.version) for unit in document.persistence_units]

    def parse_unit(
        self, unit: PersistenceUnitElement, root_location: str, schema_version: str | None = None
    ) -> RawUnitDescriptor:
        jar_file_urls = [resolve_location(root_location, jar) for jar in unit.jar_files if jar is not None]

        properties: dict[str, str] = {}
        for prop in unit.properties:
            properties[prop.name] = prop.value

        return RawUnitDescriptor(
            name=unit.name if unit.name is not None else "",
            provider=unit.provider or None,
            description=unit.description,
            transaction_type=unit.transaction_type or PersistenceUnitTransactionType.JTA,
            managed_class_names=list(unit.classes),
            mapping_file_names=list(unit.mapping_files),
            jar_file_urls=jar_file_urls,
            properties=properties,
            shared_cache_mode=unit.shared_cache_mode or PersistenceUnitCachingType.UNSPECIFIED,
            validation_mode=unit.validation_mode or PersistenceUnitValidationModeType.AUTO,
            exclude_unlisted_classes=unit.exclude_unlisted_classes,
            jta_data_source=unit.jta_data_source or None,
            non_jta_data_source=unit.non_jta_data_source or None,
            schema_version=schema_version,
        )
