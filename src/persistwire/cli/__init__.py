"""Command line interface for persistwire."""

from .main import cli, main

__all__ = ["cli", "main"]
