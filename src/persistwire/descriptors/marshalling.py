"""Marshalling of descriptor byte streams into :class:`PersistenceDocument` trees.

Two surface syntaxes are supported:

- **XML** (``persistence.xml``): the standard ``<persistence>`` document. Element
  namespaces are ignored so that every published schema version is accepted.
- **YAML** (``persistence.yaml``): either a list of unit mappings, or a mapping
  with a ``persistence-unit`` list and an optional ``version``.

Any shape mismatch is reported as :class:`DescriptorFormatError`; the parser
downstream does not validate again.
"""

import xml.etree.ElementTree as ET
from pathlib import PurePosixPath
from typing import Any, BinaryIO
from urllib.parse import urlsplit

import yaml
from pydantic import ValidationError

from persistwire.base.errors import DescriptorFormatError
from persistwire.descriptors.schema import PersistenceDocument
from persistwire.utils.logger import get_logger

logger = get_logger("descriptors")

XML_MEDIA_TYPE = "application/xml"
YAML_MEDIA_TYPE = "application/yaml"

_MEDIA_TYPES_BY_SUFFIX = {
    ".xml": XML_MEDIA_TYPE,
    ".yaml": YAML_MEDIA_TYPE,
    ".yml": YAML_MEDIA_TYPE,
}

# Child elements of <persistence-unit> that may repeat
_REPEATED_ELEMENTS = {"class", "jar-file", "mapping-file"}


def media_type_for(location: str) -> str:
    """Guess the media type of a descriptor from its location's suffix (XML by default)."""
    suffix = PurePosixPath(urlsplit(location).path).suffix.lower()
    return _MEDIA_TYPES_BY_SUFFIX.get(suffix, XML_MEDIA_TYPE)


def unmarshal(stream: BinaryIO, media_type: str = XML_MEDIA_TYPE, location: str | None = None) -> PersistenceDocument:
    """Read a whole descriptor stream and convert it into a document tree.

    :raises DescriptorFormatError: If the content does not match the descriptor schema
    """
    data = stream.read()
    if media_type == YAML_MEDIA_TYPE:
        return unmarshal_yaml(data, location)
    if media_type == XML_MEDIA_TYPE:
        return unmarshal_xml(data, location)
    raise DescriptorFormatError(f"Unsupported descriptor media type: {media_type}", location)


def unmarshal_xml(data: bytes | str, location: str | None = None) -> PersistenceDocument:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise DescriptorFormatError(f"Malformed XML descriptor {location or ''}: {e}".strip(), location) from e

    if _local_name(root.tag) != "persistence":
        raise DescriptorFormatError(
            f"Expected <persistence> root element, found <{_local_name(root.tag)}>", location
        )

    units = []
    for child in root:
        tag = _local_name(child.tag)
        if tag != "persistence-unit":
            raise DescriptorFormatError(f"Unexpected element <{tag}> under <persistence>", location)
        units.append(_unit_from_element(child))

    return _validate({"version": root.get("version"), "persistence-unit": units}, location)


def unmarshal_yaml(data: bytes | str, location: str | None = None) -> PersistenceDocument:
    try:
        loaded = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise DescriptorFormatError(f"Malformed YAML descriptor {location or ''}: {e}".strip(), location) from e

    if loaded is None:
        loaded = {}
    elif isinstance(loaded, list):
        loaded = {"persistence-unit": loaded}
    elif not isinstance(loaded, dict):
        raise DescriptorFormatError(
            f"YAML descriptor must be a list of units or a mapping, got {type(loaded).__name__}", location
        )

    return _validate(loaded, location)


def _validate(tree: dict[str, Any], location: str | None) -> PersistenceDocument:
    try:
        document = PersistenceDocument.model_validate(tree)
    except ValidationError as e:
        raise DescriptorFormatError(
            f"Descriptor {location or '<unknown>'} does not match the persistence schema: {e}",
            location,
            {"errors": e.errors(include_url=False)},
        ) from e

    logger.debug(f"Unmarshalled {len(document.persistence_units)} unit(s) from {location or '<stream>'}")
    return document


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _unit_from_element(element: ET.Element) -> dict[str, Any]:
    unit: dict[str, Any] = dict(element.attrib)

    for child in element:
        tag = _local_name(child.tag)
        if tag in _REPEATED_ELEMENTS:
            unit.setdefault(tag, []).append(_text(child))
        elif tag in unit:
            raise DescriptorFormatError(f"Element <{tag}> may appear only once per persistence-unit")
        elif tag == "properties":
            unit["properties"] = [
                {"name": prop.get("name"), "value": prop.get("value")}
                for prop in child
                if _local_name(prop.tag) == "property"
            ]
        elif tag == "exclude-unlisted-classes":
            # An empty element means true
            unit[tag] = _text(child) or "true"
        else:
            unit[tag] = _text(child)

    return unit
