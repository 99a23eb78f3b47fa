"""Shell command execution for ``run`` actions.

A multi-line command body is split into lines and every non-empty line runs
as its own shell invocation, in order, from the project root.  The first
non-zero exit stops the body and raises ``CommandError``.
"""

from __future__ import annotations

from pathlib import Path

from rich.markup import escape

from stencil.actions.errors import ActionError, CommandError
from stencil.utils import console, run_shell


def split_commands(text: str) -> list[str]:
    """Return the non-empty lines of a command body, stripped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def display_name(text: str, name: str | None = None) -> str:
    """Name shown while running: explicit name, whole command, or first line."""
    if name:
        return name
    lines = split_commands(text)
    if len(lines) > 1:
        return lines[0]
    return text.strip()


class ShellRunner:
    """Runs command bodies with the project root as working directory."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    async def run(self, text: str, name: str | None = None) -> list[str]:
        """Run every line of *text* sequentially.

        *text* must already have its injections applied.

        Returns:
            The command lines that were executed.

        Raises:
            CommandError: On the first line exiting non-zero.  Later lines
                do not run.
        """
        commands = split_commands(text)
        label = display_name(text, name)
        console.print(f"⋅ Running: [bold]{escape(label)}[/bold]", highlight=False)

        executed: list[str] = []
        for command in commands:
            try:
                returncode = await run_shell(command, cwd=self.root)
            except OSError as exc:
                raise ActionError(f"Failed to start command '{command}': {exc}") from exc
            executed.append(command)
            if returncode != 0:
                console.print(f"└─ [red]✗[/red] {escape(command)}", highlight=False)
                raise CommandError(command, returncode)
            console.print(f"└─ [green]✓[/green] {escape(command)}", highlight=False)
        return executed
