"""Exceptions raised while executing actions.

Every exception here is fatal for the run: the engine stops at the first one
and leaves already-applied effects in place.
"""

from __future__ import annotations

from pathlib import Path


class ActionError(Exception):
    """Raised when an action cannot complete."""


class ContainmentError(ActionError):
    """Raised when a path or pattern would resolve outside the project root."""

    def __init__(self, path: str, root: str | Path) -> None:
        self.path = path
        self.root = str(root)
        super().__init__(f"'{path}' resolves outside the project root {self.root}")


class CommandError(ActionError):
    """Raised when a shell command exits with a non-zero status."""

    def __init__(self, command: str, returncode: int) -> None:
        self.command = command
        self.returncode = returncode
        super().__init__(f"Command failed (exit {returncode}): {command}")


class PromptCancelledError(ActionError):
    """Raised when the operator cancels or interrupts a prompt."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Prompt for '{key}' was cancelled")
