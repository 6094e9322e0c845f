"""Console output formatting utilities for yadu."""

from __future__ import annotations

import traceback
from typing import Iterable, Optional, Tuple

import click


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False, color: Optional[bool] = None):
        """
        Initialize console formatter.

        Args:
            debug: If True, show debug messages and full stack traces
            color: Force ANSI styling on/off (None lets click decide per stream)
        """
        self.debug = debug
        self.color = color

    def _echo(self, message: str = "", err: bool = False) -> None:
        click.echo(message, err=err, color=self.color)

    def print_unit_header(self, name: str) -> None:
        """Print the banner shown right before a unit's script starts."""
        title = click.style(name, fg="bright_blue", bold=True)
        bar = click.style("=====", fg="bright_white", bold=True)
        self._echo(f"{bar} {title} {bar}")

    def print_environment_header(self, name: str) -> None:
        """Print environment start message."""
        self._echo(f"Applying environment: {click.style(name, fg='bright_blue', bold=True)}")

    def print_environment_unit(self, name: str) -> None:
        """Print the unit an environment is about to apply."""
        self._echo(f"Applying unit from environment: {name}")

    def print_units(self, units: Iterable[Tuple[str, str]]) -> None:
        """Print `name: description` lines."""
        for name, description in units:
            self._echo(f"{click.style(name, fg='bright_blue', bold=True)}: {description}")

    def print_environments(self, environments: Iterable[Tuple[str, list[str]]], active: str = "") -> None:
        """Print environments and the units they list, marking the active one."""
        for name, units in environments:
            marker = "*" if name == active else " "
            title = click.style(name, fg="bright_blue", bold=True)
            self._echo(f"{marker} {title}: {' '.join(units)}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        self._echo(f"\n{click.style('ERROR:', fg='red', bold=True)} {title}", err=True)
        self._echo(message, err=True)
        if details:
            for detail in details:
                self._echo(f"  {detail}", err=True)
        if suggestion:
            self._echo(f"\n{suggestion}", err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            self._echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
        else:
            self._echo(f"Error: {exc}", err=True)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._echo(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            self._echo(f"[DEBUG] {message}", err=True)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
