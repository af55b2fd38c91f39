"""Persistence descriptor resources: marshalling, location resolution and parsing."""

from .locations import descriptor_root, resolve_location
from .marshalling import XML_MEDIA_TYPE, YAML_MEDIA_TYPE, media_type_for, unmarshal, unmarshal_xml, unmarshal_yaml
from .parser import DescriptorParser, RawUnitDescriptor
from .resources import DescriptorResource, load_document
from .schema import (
    PersistenceDocument,
    PersistenceUnitCachingType,
    PersistenceUnitElement,
    PersistenceUnitTransactionType,
    PersistenceUnitValidationModeType,
    PropertyElement,
)

__all__ = [
    "resolve_location",
    "descriptor_root",
    "XML_MEDIA_TYPE",
    "YAML_MEDIA_TYPE",
    "media_type_for",
    "unmarshal",
    "unmarshal_xml",
    "unmarshal_yaml",
    "DescriptorParser",
    "RawUnitDescriptor",
    "DescriptorResource",
    "load_document",
    "PersistenceDocument",
    "PersistenceUnitElement",
    "PropertyElement",
    "PersistenceUnitTransactionType",
    "PersistenceUnitCachingType",
    "PersistenceUnitValidationModeType",
]
