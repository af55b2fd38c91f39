"""Shared console and style names for CLI output."""

from rich.console import Console
from rich.theme import Theme

persistwire_theme = Theme(
    {
        "success": "green",
        "error": "bold red",
        "warning": "yellow",
        "info": "cyan",
        "header": "bold cyan",
        "accent": "magenta",
        "value": "white",
        "dim": "dim",
        "path": "blue",
        "border": "cyan",
    }
)

console = Console(theme=persistwire_theme)


class Styles:
    """Style names defined in :data:`persistwire_theme`."""

    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HEADER = "header"
    ACCENT = "accent"
    VALUE = "value"
    DIM = "dim"
    PATH = "path"
    BORDER = "border"


class Messages:
    """Pre-formatted status messages."""

    @staticmethod
    def success(text: str) -> str:
        return f"[success]✓ {text}[/success]"

    @staticmethod
    def error(text: str) -> str:
        return f"[error]✗ {text}[/error]"

    @staticmethod
    def warning(text: str) -> str:
        return f"[warning]⚠️  {text}[/warning]"

    @staticmethod
    def header(text: str) -> str:
        return f"[header]{text}[/header]"


__all__ = ["console", "persistwire_theme", "Styles", "Messages"]
