"""Persistence unit listing command.

Runs the registration pipeline against a fresh :class:`ComponentRegistry` and
shows what was registered:

    - persistence units with provider, transaction type and managed classes
    - provider singletons, and whether they were constructed yet
"""

import sys
from contextlib import nullcontext

import click
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from persistwire.base.errors import PersistwireError
from persistwire.cli.styles import Messages, Styles, console

PIPELINE_LOGGERS = ["scanner", "descriptors", "synthesizer", "providers", "registry", "driver", "CONFIG"]


@click.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Configuration file")
@click.option("--scan", "scan_packages", multiple=True, help="Package to scan for managed classes (repeatable)")
@click.option(
    "--path",
    "search_path",
    multiple=True,
    type=click.Path(exists=True, file_okay=False),
    help="Directory searched for descriptor resources (repeatable)",
)
@click.option(
    "--descriptor",
    "descriptors",
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Descriptor file to process instead of searching (repeatable)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show pipeline logs and extra columns")
def units(config_path, scan_packages, search_path, descriptors, verbose):
    """Register persistence units and display the result."""
    from persistwire.container.driver import RegistrationDriver
    from persistwire.container.registry import ComponentRegistry
    from persistwire.descriptors.resources import DescriptorResource
    from persistwire.units.class_loading import PathClassLoader
    from persistwire.utils.config import get_config_builder
    from persistwire.utils.log_filter import quiet_logger

    registry = ComponentRegistry()
    try:
        with nullcontext() if verbose else quiet_logger(PIPELINE_LOGGERS):
            if config_path:
                get_config_builder(config_path, set_as_default=True)

            driver = RegistrationDriver(
                registry,
                class_loader=PathClassLoader(search_path) if search_path else None,
                scan_packages=list(scan_packages) or None,
            )
            resources = [DescriptorResource.from_path(p) for p in descriptors] or None
            result = driver.run(resources)
    except PersistwireError as e:
        console.print(Messages.error(f"Registration failed: {e}"))
        sys.exit(1)

    console.print()
    console.print(Panel(Text("Persistence Units", style=Styles.HEADER), border_style=Styles.BORDER, expand=False))
    console.print()

    if result.units:
        _display_units_table(result.units, verbose)
    else:
        console.print(Messages.warning("No persistence units found"))
        console.print()

    providers = [r for r in registry.registrations if r.qualifiers and _is_provider(r)]
    if providers:
        _display_providers_table(providers)

    console.print(Messages.success(f"{len(result.units)} unit(s) from {len(result.resources)} resource(s)"))


def _is_provider(registration) -> bool:
    from persistwire.providers.base import PersistenceProvider

    return registration.provides(PersistenceProvider)


def _display_units_table(unit_infos, verbose: bool):
    table = Table(show_header=True, header_style=Styles.HEADER, border_style=Styles.DIM, expand=False)
    table.add_column("Name", style=Styles.ACCENT, no_wrap=True)
    table.add_column("Provider", style=Styles.VALUE)
    table.add_column("Transactions", style=Styles.VALUE)
    table.add_column("Classes", style=Styles.DIM)
    if verbose:
        table.add_column("Data Sources", style=Styles.DIM)
        table.add_column("Root", style=Styles.PATH)

    for info in unit_infos:
        row = [
            info.persistence_unit_name or "(unnamed)",
            info.persistence_provider_class_name or "-",
            info.transaction_type.name,
            "\n".join(info.managed_class_names) or "-",
        ]
        if verbose:
            names = [n for n in (info.jta_data_source_name, info.non_jta_data_source_name) if n]
            row.extend([", ".join(names) or "default", info.persistence_unit_root_url])
        table.add_row(*row)

    console.print(table)
    console.print()


def _display_providers_table(registrations):
    table = Table(show_header=True, header_style=Styles.HEADER, border_style=Styles.DIM, expand=False)
    table.add_column("Provider Class", style=Styles.ACCENT, no_wrap=True)
    table.add_column("State", style=Styles.VALUE)

    for registration in registrations:
        state = "instantiated" if registration.created else "lazy"
        table.add_row(", ".join(sorted(registration.qualifiers)), state)

    console.print(table)
    console.print()
