"""Shared utility functions for stencil.

Provides the Rich consoles used for progress and diagnostics, async shell
execution, answer value formatting, and small formatting helpers.
"""

from __future__ import annotations

import asyncio
import math
import os
from collections.abc import Iterable
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()
err_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_shell(
    command: str,
    cwd: str | Path | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Run a single shell command, streaming its output to our own streams.

    The child inherits stdout/stderr, so output appears as it is produced.
    There is no timeout: the call blocks until the process exits.

    Args:
        command: Command line handed to the system shell.
        cwd: Working directory for the child process.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        The process exit code.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    process = await asyncio.create_subprocess_shell(
        command,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )
    return await process.wait()


# ---------------------------------------------------------------------------
# Answer values
# ---------------------------------------------------------------------------


def parse_number(text: str) -> int | float:
    """Parse *text* as an integer, falling back to floating point.

    Raises:
        ValueError: If the text is neither, or is NaN or infinite.

    Examples::

        parse_number("42")   -> 42
        parse_number("4.2")  -> 4.2
        parse_number("four") -> ValueError
        parse_number("nan")  -> ValueError
    """
    stripped = text.strip()
    try:
        return int(stripped)
    except ValueError:
        value = float(stripped)
    if not math.isfinite(value):
        raise ValueError(f"not a finite number: {text!r}")
    return value


def format_value(value: bool | int | float | str) -> str:
    """Render an answer value the way it is substituted into text.

    Booleans are lower-case (``true``/``false``); everything else uses ``str``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(escape(message), style="bold green", soft_wrap=True)


def print_error(message: str) -> None:
    """Print a red error message to stderr. *message* is plain text, not markup."""
    err_console.print(escape(message), style="bold red", soft_wrap=True)


def print_warning(message: str) -> None:
    """Print a yellow warning message to stderr."""
    err_console.print(escape(message), style="bold yellow", soft_wrap=True)


def print_diagnostics(diagnostics: Iterable[object]) -> None:
    """Print build diagnostics as warnings, one per line."""
    for diagnostic in diagnostics:
        err_console.print(
            f"[yellow]warning:[/yellow] {escape(str(diagnostic))}",
            highlight=False,
            soft_wrap=True,
        )


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
