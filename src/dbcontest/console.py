"""
Input/output provider.

Everything dbcontest prints or asks goes through a ConsoleIO, so the
pipeline can be driven by canned input and its output captured.
"""

from __future__ import annotations

from typing import Protocol

from rich.console import Console


class ConsoleIO(Protocol):
    """Line-oriented terminal capability."""

    def echo(self, message: str = "", style: str | None = None) -> None:
        """Print one line of output."""
        ...

    def prompt(self, label: str, secret: bool = False) -> str:
        """Ask for one line of input. Returns the raw line without newline."""
        ...


class RichConsoleIO:
    """ConsoleIO backed by a rich Console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def echo(self, message: str = "", style: str | None = None) -> None:
        # Diagnostic output contains user data (grants, DSNs) that must not
        # be parsed as markup or wrapped at the terminal width.
        self.console.print(
            message,
            style=style,
            markup=False,
            highlight=False,
            soft_wrap=True,
        )

    def prompt(self, label: str, secret: bool = False) -> str:
        try:
            return self.console.input(f"{label}: ", password=secret)
        except EOFError:
            return ""
