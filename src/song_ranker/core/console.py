"""Shared Rich Console for CLI output.

Log records go to loguru sinks; everything meant for the person at the
terminal goes through this console.
"""

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Get or create the shared Rich Console instance."""
    global _console
    if _console is None:
        _console = Console(highlight=False)
    return _console


def safe_print(message: str, style: str | None = None) -> None:
    """Print using Rich Console with optional styling.

    Args:
        message: The message to print
        style: Optional Rich style string (e.g., "bold red", "green")
    """
    get_console().print(message, style=style)


def print_warning(message: str) -> None:
    safe_print(f"⚠ {message}", style="yellow")


def print_error(message: str) -> None:
    safe_print(f"Error: {message}", style="bold red")
