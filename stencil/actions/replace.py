"""Placeholder replacement in files and injection into single strings.

A placeholder is an answer key wrapped in braces: ``{repo_name}``.
Replacement is plain text substitution with no templating logic.

Two entry points:

* ``ReplacementEngine.replace`` rewrites every file matched by a glob.
* ``inject`` rewrites a single string (a ``run`` command or ``echo``
  message), touching only the keys explicitly listed, so that other brace
  sequences such as shell ``${VAR}`` survive verbatim.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from rich.markup import escape

from stencil.actions.answers import AnswerStore
from stencil.actions.errors import ActionError
from stencil.actions.paths import escapes, match
from stencil.utils import console, print_warning

ALL_FILES = "**/*"


def placeholder(key: str) -> str:
    """Return the placeholder text for *key*."""
    return "{" + key + "}"


def inject(text: str, keys: Iterable[str], store: AnswerStore) -> str:
    """Substitute the placeholders of *keys* that have answers.

    Keys without an answer, and every brace sequence not named in *keys*, are
    left untouched.
    """
    result = text
    for key in keys:
        value = store.text(key)
        if value is not None:
            result = result.replace(placeholder(key), value)
    return result


@dataclass
class ReplaceReport:
    """What a single ``replace`` action did."""

    applied: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    files_changed: list[Path] = field(default_factory=list)
    files_skipped: list[Path] = field(default_factory=list)


def _rewrite(path: Path, substitutions: list[tuple[str, str]]) -> tuple[bool, bool]:
    """Apply substitutions to one file.

    Returns:
        ``(changed, skipped)`` where *skipped* means the file is not UTF-8
        text and was left alone.
    """
    try:
        original = path.read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        return False, True

    content = original
    for needle, value in substitutions:
        content = content.replace(needle, value)

    if content == original:
        return False, False
    # Bytes in and out: line endings are kept exactly as found.
    path.write_bytes(content.encode("utf-8"))
    return True, False


class ReplacementEngine:
    """Applies answer placeholders to files under a project root."""

    def __init__(self, root: str | Path, store: AnswerStore) -> None:
        self.root = Path(root).resolve()
        self.store = store

    async def replace(self, keys: Iterable[str], scope: str | None = None) -> ReplaceReport:
        """Replace the placeholders of *keys* in every file matched by *scope*.

        Args:
            keys: Answer keys whose placeholders should be substituted.
            scope: Glob relative to the root.  ``None`` or ``"all"`` selects
                every file.

        Returns:
            A ``ReplaceReport``.  Keys without an answer end up in
            ``missing`` and produce a warning; they are not an error.

        Raises:
            ActionError: If a matched file cannot be read or written.  Files
                rewritten before the failure stay rewritten.
        """
        report = ReplaceReport()
        substitutions: list[tuple[str, str]] = []
        for key in keys:
            value = self.store.text(key)
            if value is None:
                report.missing.append(key)
            else:
                report.applied.append(key)
                substitutions.append((placeholder(key), value))

        pattern = ALL_FILES if scope in (None, "all") else scope
        console.print(f"⋅ Applying replacements: [dim]{escape(pattern)}[/dim]", highlight=False)

        if substitutions:
            for path in match(self.root, pattern):
                if not path.is_file() or escapes(path, self.root):
                    continue
                try:
                    changed, skipped = await asyncio.to_thread(_rewrite, path, substitutions)
                except OSError as exc:
                    raise ActionError(
                        f"Failed to apply replacements to '{path.relative_to(self.root)}': {exc}"
                    ) from exc
                if changed:
                    report.files_changed.append(path)
                if skipped:
                    report.files_skipped.append(path)

        for key in report.applied:
            console.print(f"└─ [green]✓[/green] ╌ {key}", highlight=False)
        for key in report.missing:
            console.print(f"└─ [red]✗[/red] ╌ {key}", highlight=False)
            print_warning(f"No answer for '{key}'; replacement skipped.")
        return report
