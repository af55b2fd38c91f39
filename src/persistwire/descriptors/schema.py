"""Document tree for persistence descriptors.

These pydantic models are the shape a descriptor resource is marshalled into,
whatever its surface syntax (XML or YAML). Field aliases accept the XML element
names (``transaction-type``), their snake_case spelling and, for list-valued
children, the plural form used by YAML descriptors (``classes``).
"""

from enum import Enum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PersistenceUnitTransactionType(str, Enum):
    """Transaction type as written in a descriptor."""

    JTA = "JTA"
    RESOURCE_LOCAL = "RESOURCE_LOCAL"


class PersistenceUnitCachingType(str, Enum):
    """Shared cache mode as written in a descriptor."""

    ALL = "ALL"
    NONE = "NONE"
    ENABLE_SELECTIVE = "ENABLE_SELECTIVE"
    DISABLE_SELECTIVE = "DISABLE_SELECTIVE"
    UNSPECIFIED = "UNSPECIFIED"


class PersistenceUnitValidationModeType(str, Enum):
    """Validation mode as written in a descriptor."""

    AUTO = "AUTO"
    CALLBACK = "CALLBACK"
    NONE = "NONE"


_XSD_BOOLEANS = {"true": True, "false": False, "1": True, "0": False}


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


class PropertyElement(BaseModel):
    """One ``<property name=".." value=".."/>`` entry."""

    model_config = ConfigDict(extra="forbid")

    name: str
    value: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value):
        if value is None:
            return ""
        if isinstance(value, bool):
            return str(value).lower()
        return value if isinstance(value, str) else str(value)


class PersistenceUnitElement(BaseModel):
    """One ``persistence-unit`` element."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str | None = None
    description: str | None = None
    provider: str | None = None
    transaction_type: PersistenceUnitTransactionType | None = Field(
        default=None, validation_alias=_aliases("transaction-type", "transaction_type", "transactionType")
    )
    jta_data_source: str | None = Field(
        default=None, validation_alias=_aliases("jta-data-source", "jta_data_source", "jtaDataSource")
    )
    non_jta_data_source: str | None = Field(
        default=None,
        validation_alias=_aliases("non-jta-data-source", "non_jta_data_source", "nonJtaDataSource"),
    )
    mapping_files: list[str] = Field(
        default_factory=list,
        validation_alias=_aliases("mapping-file", "mapping_file", "mapping-files", "mapping_files"),
    )
    jar_files: list[str] = Field(
        default_factory=list, validation_alias=_aliases("jar-file", "jar_file", "jar-files", "jar_files")
    )
    classes: list[str] = Field(default_factory=list, validation_alias=_aliases("class", "classes"))
    exclude_unlisted_classes: bool | None = Field(
        default=None,
        validation_alias=_aliases("exclude-unlisted-classes", "exclude_unlisted_classes", "excludeUnlistedClasses"),
    )
    shared_cache_mode: PersistenceUnitCachingType | None = Field(
        default=None, validation_alias=_aliases("shared-cache-mode", "shared_cache_mode", "sharedCacheMode")
    )
    validation_mode: PersistenceUnitValidationModeType | None = Field(
        default=None, validation_alias=_aliases("validation-mode", "validation_mode", "validationMode")
    )
    properties: list[PropertyElement] = Field(default_factory=list)

    @field_validator("mapping_files", "jar_files", "classes", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("exclude_unlisted_classes", mode="before")
    @classmethod
    def _xsd_boolean(cls, value):
        """Accept only xsd:boolean lexical forms (true, false, 1, 0) besides real booleans."""
        if value is None or isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str) and value.strip() in _XSD_BOOLEANS:
            return _XSD_BOOLEANS[value.strip()]
        raise ValueError(f"{value!r} is not a boolean (expected true, false, 1 or 0)")

    @field_validator("properties", mode="before")
    @classmethod
    def _mapping_to_properties(cls, value):
        """YAML descriptors may give properties as a plain mapping."""
        if value is None:
            return []
        if isinstance(value, dict):
            return [{"name": str(k), "value": v} for k, v in value.items()]
        return value


class PersistenceDocument(BaseModel):
    """Root ``persistence`` element: zero or more units."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    version: str | None = None
    persistence_units: list[PersistenceUnitElement] = Field(
        default_factory=list,
        validation_alias=_aliases("persistence-unit", "persistence_unit", "persistence_units", "units"),
    )

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_string(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)
