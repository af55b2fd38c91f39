"""Shared base definitions for persistwire."""

from .errors import (
    ConfigurationError,
    DescriptorFormatError,
    ErrorCategory,
    LocationResolutionError,
    PersistwireError,
    ProviderInstantiationError,
    RegistryError,
    ResourceError,
    StartupFailure,
)

__all__ = [
    "ErrorCategory",
    "PersistwireError",
    "RegistryError",
    "ConfigurationError",
    "ResourceError",
    "LocationResolutionError",
    "DescriptorFormatError",
    "ProviderInstantiationError",
    "StartupFailure",
]
