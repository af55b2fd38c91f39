"""Main CLI entry point.

Commands are imported when invoked, keeping ``persistwire --help`` free of
pipeline imports.
"""

import importlib
import sys

import click

from persistwire import __version__


class LazyGroup(click.Group):
    """Click group that imports subcommands only when invoked."""

    commands_by_name = {
        "units": "persistwire.cli.units_cmd",
    }

    def get_command(self, ctx, cmd_name):
        module_path = self.commands_by_name.get(cmd_name)
        if module_path is None:
            return None
        return getattr(importlib.import_module(module_path), cmd_name)

    def list_commands(self, ctx):
        return sorted(self.commands_by_name)


@click.group(cls=LazyGroup)
@click.version_option(version=__version__, prog_name="persistwire")
def cli():
    """persistwire: persistence unit registration.

    \b
      persistwire units                       Register and list persistence units
      persistwire units --scan myapp.model    Scan a package for managed classes first
    """


def main():
    """Entry point for the persistwire CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
