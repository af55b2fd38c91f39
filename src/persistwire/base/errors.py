"""Exception hierarchy for persistwire.

Every failure the registration pipeline can raise derives from
:class:`PersistwireError`. The categories follow the stage that detects the
problem:

    - **ResourceError**: a descriptor resource cannot be read, or a location
      reference inside it cannot be resolved to a URL
    - **DescriptorFormatError**: the document tree does not have the expected
      schema shape
    - **ConfigurationError**: a value is syntactically valid but not recognized
      (unknown enum member, invalid configuration entry)
    - **ProviderInstantiationError**: a named provider class cannot be loaded or
      constructed; raised when the provider singleton is first used
    - **RegistryError**: misuse of a registry or of the driver state machine

Data-source resolution has no error class: an unresolvable data
source is reported as ``None`` to the caller.

.. seealso::
   :class:`persistwire.container.driver.RegistrationDriver` : Propagates all fatal errors
"""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(Enum):
    """Stage of the pipeline an error belongs to."""

    RESOURCE = "resource"
    SCHEMA = "schema"
    CONFIGURATION = "configuration"
    PROVIDER = "provider"
    REGISTRY = "registry"


class PersistwireError(Exception):
    """Base exception for all persistwire errors.

    :param message: Human-readable error description
    :param technical_details: Additional debugging information
    """

    category: ErrorCategory = ErrorCategory.REGISTRY

    def __init__(self, message: str, technical_details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.technical_details = technical_details or {}

    @property
    def is_fatal(self) -> bool:
        """All persistwire errors abort startup."""
        return True


class RegistryError(PersistwireError):
    """Raised for registry misuse (frozen registry writes, state machine violations)."""

    category = ErrorCategory.REGISTRY


class ConfigurationError(PersistwireError):
    """Raised when configuration values are invalid or unrecognized."""

    category = ErrorCategory.CONFIGURATION


class ResourceError(PersistwireError):
    """Raised when a descriptor resource cannot be read."""

    category = ErrorCategory.RESOURCE


class LocationResolutionError(ResourceError):
    """Raised when a relative location reference cannot be resolved.

    :param reference: The offending reference as written in the descriptor
    :param root: The root location it was resolved against
    """

    def __init__(self, message: str, reference: str | None = None, root: str | None = None) -> None:
        super().__init__(message, {"reference": reference, "root": root})
        self.reference = reference
        self.root = root


class DescriptorFormatError(PersistwireError):
    """Raised when a descriptor document does not match the expected schema."""

    category = ErrorCategory.SCHEMA

    def __init__(self, message: str, location: str | None = None, technical_details: dict | None = None) -> None:
        super().__init__(message, technical_details)
        self.location = location


class ProviderInstantiationError(PersistwireError):
    """Raised on first use of a provider whose class cannot be loaded or built."""

    category = ErrorCategory.PROVIDER

    def __init__(self, message: str, class_name: str | None = None) -> None:
        super().__init__(message, {"class_name": class_name})
        self.class_name = class_name


@dataclass
class StartupFailure:
    """Summary of an aborted registration run, handed to the startup-failure channel.

    :param state: Name of the driver state in which the run failed
    :param error: The exception that aborted the run
    :param resource: URL of the descriptor resource being processed, if any
    """

    state: str
    error: BaseException
    resource: str | None = None

    def format(self) -> str:
        where = f" while processing {self.resource}" if self.resource else ""
        return f"Persistence unit registration failed in state {self.state}{where}: {self.error}"
