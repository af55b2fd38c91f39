"""persistwire: persistence unit descriptor resolution and provider binding.

Discovers persistence descriptors, merges them with the data-model classes
found by the component scanner, and registers immutable unit records and
backend providers as singletons in a host component registry.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]

# Subpackages are imported on demand, e.g. from persistwire.container.driver import RegistrationDriver
