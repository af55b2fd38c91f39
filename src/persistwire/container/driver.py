"""Registration driver.

Runs the pipeline once, at bootstrap, after component discovery:

1. **SCAN_COMPLETE**: optional package scan, then the managed-class registry is frozen
2. **PROVIDERS_SEEDED**: the provider resolver and every provider it knows are registered
3. **PREEXISTING_UNITS_BOUND**: providers for unit registrations made by the host are bound
4. **DESCRIPTORS_DISCOVERED**: descriptor resources are located
5. Per resource: **PARSE_UNIT**, **SYNTHESIZE**, **REGISTER_UNIT**, **BIND_PROVIDER**
6. **DONE**

Units are registered one resource at a time. A resource that fails to load,
parse or synthesize registers none of its units; units of earlier resources
stay registered. Every failure is logged, recorded as a
:class:`~persistwire.base.errors.StartupFailure` and re-raised.

Examples:
    >>> registry = ComponentRegistry()
    >>> driver = RegistrationDriver(registry, provider_resolver=ProviderResolver(use_config=False))
    >>> result = driver.run([DescriptorResource.from_path("META-INF/persistence.xml")])
    >>> [u.persistence_unit_name for u in result.units]
    ['orders']
"""

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from persistwire.base.errors import RegistryError, StartupFailure
from persistwire.container.registry import ComponentRegistry, SingletonRegistration
from persistwire.descriptors.parser import DescriptorParser
from persistwire.descriptors.resources import DescriptorResource, load_document
from persistwire.providers.binder import ProviderBinder
from persistwire.providers.resolver import ProviderResolver
from persistwire.scanning.managed_classes import ManagedClassRegistry
from persistwire.scanning.scanner import ComponentScanner
from persistwire.units.class_loading import ClassLoader, context_class_loader
from persistwire.units.datasources import RegistryBackedDataSourceResolver
from persistwire.units.info import DataSourceResolver, UnitInfo
from persistwire.units.synthesizer import UnitInfoSynthesizer
from persistwire.utils.config import get_config_value
from persistwire.utils.logger import get_logger

logger = get_logger("driver")

DEFAULT_DESCRIPTOR_RESOURCES = ["META-INF/persistence.xml", "META-INF/persistence.yaml"]


class DriverState(Enum):
    SCAN_COMPLETE = "scan_complete"
    PROVIDERS_SEEDED = "providers_seeded"
    PREEXISTING_UNITS_BOUND = "preexisting_units_bound"
    DESCRIPTORS_DISCOVERED = "descriptors_discovered"
    PARSE_UNIT = "parse_unit"
    SYNTHESIZE = "synthesize"
    REGISTER_UNIT = "register_unit"
    BIND_PROVIDER = "bind_provider"
    DONE = "done"


_TRANSITIONS: dict[DriverState | None, frozenset[DriverState]] = {
    None: frozenset({DriverState.SCAN_COMPLETE}),
    DriverState.SCAN_COMPLETE: frozenset({DriverState.PROVIDERS_SEEDED}),
    DriverState.PROVIDERS_SEEDED: frozenset({DriverState.PREEXISTING_UNITS_BOUND}),
    DriverState.PREEXISTING_UNITS_BOUND: frozenset({DriverState.DESCRIPTORS_DISCOVERED}),
    DriverState.DESCRIPTORS_DISCOVERED: frozenset({DriverState.PARSE_UNIT, DriverState.DONE}),
    DriverState.PARSE_UNIT: frozenset({DriverState.SYNTHESIZE}),
    DriverState.SYNTHESIZE: frozenset({DriverState.REGISTER_UNIT}),
    DriverState.REGISTER_UNIT: frozenset({DriverState.BIND_PROVIDER}),
    DriverState.BIND_PROVIDER: frozenset({DriverState.PARSE_UNIT, DriverState.DONE}),
    DriverState.DONE: frozenset(),
}


@dataclass
class RegistrationResult:
    """What one run registered.

    :param units: Unit records, in resource then document order
    :param provider_registrations: Provider singletons registered by this run
    :param resources: URLs of the descriptor resources processed
    """

    units: list[UnitInfo] = field(default_factory=list)
    provider_registrations: list[SingletonRegistration] = field(default_factory=list)
    resources: list[str] = field(default_factory=list)


class RegistrationDriver:
    """Drive one registration pass into ``registry``.

    :param registry: Host registry receiving units and providers
    :param managed_classes: Managed-class registry filled by the scanner (a new one by default)
    :param provider_resolver: Source of globally known providers
    :param class_loader: Loader used to locate descriptors and given to synthesized units
    :param data_source_resolver: Resolver handed to every unit (registry-backed by default)
    :param resource_names: Descriptor resource names to look up; defaults to
        ``persistence.descriptor_resources`` from configuration
    :param scan_packages: Packages scanned before the run; defaults to
        ``persistence.scan_packages`` from configuration
    :param class_transformer_consumer: Receives class transformers that providers add to units
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        managed_classes: ManagedClassRegistry | None = None,
        provider_resolver: ProviderResolver | None = None,
        class_loader: ClassLoader | None = None,
        data_source_resolver: DataSourceResolver | None = None,
        resource_names: list[str] | None = None,
        scan_packages: list[str] | None = None,
        synthesizer: UnitInfoSynthesizer | None = None,
        parser: DescriptorParser | None = None,
        class_transformer_consumer: Callable[[Any], None] | None = None,
    ):
        self.registry = registry
        self.managed_classes = managed_classes if managed_classes is not None else ManagedClassRegistry()
        self.provider_resolver = provider_resolver or ProviderResolver()
        self.class_loader = class_loader or context_class_loader()
        self.data_source_resolver = data_source_resolver or RegistryBackedDataSourceResolver(registry)
        self.resource_names = (
            resource_names
            if resource_names is not None
            else get_config_value("persistence.descriptor_resources", DEFAULT_DESCRIPTOR_RESOURCES)
        )
        self.scan_packages = (
            scan_packages if scan_packages is not None else get_config_value("persistence.scan_packages", [])
        )
        self.synthesizer = synthesizer or UnitInfoSynthesizer()
        self.parser = parser or DescriptorParser()
        self.class_transformer_consumer = class_transformer_consumer
        self.binder = ProviderBinder(registry)

        self.state: DriverState | None = None
        self.failure: StartupFailure | None = None
        self._current_resource: str | None = None

    def _advance(self, new_state: DriverState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            current = self.state.name if self.state else "START"
            raise RegistryError(f"Invalid driver transition {current} -> {new_state.name}")
        logger.debug(f"State {new_state.name}")
        self.state = new_state

    def run(self, resources: Iterable[DescriptorResource] | None = None) -> RegistrationResult:
        """Run the pipeline once.

        :param resources: Descriptor resources to process; located through the
            class loader when omitted
        :raises PersistwireError: Any pipeline failure, after it is logged
        :raises RegistryError: If the driver has already run
        """
        if self.state is not None:
            raise RegistryError(f"Registration driver already ran (state {self.state.name})")

        start_time = time.time()
        result = RegistrationResult()
        try:
            self._scan()
            known_providers = self._seed_providers(result)
            self._bind_preexisting(known_providers, result)

            self._advance(DriverState.DESCRIPTORS_DISCOVERED)
            resources = list(resources) if resources is not None else self.discover_resources()
            logger.info(f"Found {len(resources)} persistence descriptor resource(s)")

            for resource in resources:
                self._process_resource(resource, known_providers, result)

            self._current_resource = None
            self._advance(DriverState.DONE)
        except Exception as e:
            self.failure = StartupFailure(
                state=self.state.name if self.state else "START",
                error=e,
                resource=self._current_resource,
            )
            logger.error(self.failure.format())
            raise

        logger.success(
            f"Registered {len(result.units)} persistence unit(s) and "
            f"{len(result.provider_registrations)} provider(s)"
        )
        logger.timing(f"Registration completed in {time.time() - start_time:.2f}s")
        return result

    def discover_resources(self) -> list[DescriptorResource]:
        """Locate every configured descriptor resource through the class loader."""
        found = []
        for name in self.resource_names:
            found.extend(self.class_loader.get_resources(name))
        return found

    def _scan(self) -> None:
        if self.scan_packages:
            ComponentScanner(self.managed_classes, self.registry).scan(self.scan_packages)
        self.managed_classes.freeze()
        self._advance(DriverState.SCAN_COMPLETE)

    def _seed_providers(self, result: RegistrationResult) -> list:
        resolver = self.provider_resolver
        self.registry.register_singleton(ProviderResolver, lambda: resolver)

        known_providers = resolver.get_persistence_providers()
        result.provider_registrations.extend(self.binder.bind_known_providers(known_providers))
        self._advance(DriverState.PROVIDERS_SEEDED)
        return known_providers

    def _bind_preexisting(self, known_providers: list, result: RegistrationResult) -> None:
        preexisting = self.registry.get_registrations(UnitInfo)
        if preexisting:
            logger.info(f"Binding providers for {len(preexisting)} pre-existing unit registration(s)")
        result.provider_registrations.extend(self.binder.bind_preexisting(preexisting, known_providers))
        self._advance(DriverState.PREEXISTING_UNITS_BOUND)

    def _process_resource(self, resource: DescriptorResource, known_providers: list, result: RegistrationResult) -> None:
        self._current_resource = resource.url

        self._advance(DriverState.PARSE_UNIT)
        document = load_document(resource)
        root = resource.root
        raw_units = self.parser.parse(document, root)

        self._advance(DriverState.SYNTHESIZE)
        units = [
            self.synthesizer.synthesize(
                raw,
                self.managed_classes,
                root,
                self.data_source_resolver,
                class_loader=self.class_loader,
                class_transformer_consumer=self.class_transformer_consumer,
            )
            for raw in raw_units
        ]

        self._advance(DriverState.REGISTER_UNIT)
        for info in units:
            self.registry.register_singleton(
                UnitInfo,
                lambda info=info: info,
                qualifiers=[info.persistence_unit_name],
                description=info.describe(),
            )
            logger.info(f"Registered persistence unit '{info.persistence_unit_name}' from {resource.url}")
        result.units.extend(units)
        result.resources.append(resource.url)

        self._advance(DriverState.BIND_PROVIDER)
        for info in units:
            registration = self.binder.bind(info, known_providers)
            if registration is not None:
                result.provider_registrations.append(registration)


def register_persistence_units(
    registry: ComponentRegistry,
    resources: Iterable[DescriptorResource] | None = None,
    **kwargs,
) -> RegistrationResult:
    """Build a :class:`RegistrationDriver` over ``registry`` and run it once."""
    return RegistrationDriver(registry, **kwargs).run(resources)
