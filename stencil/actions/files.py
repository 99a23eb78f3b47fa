"""Copy, move and remove actions confined to the project root.

Sources are globs; destinations are single relative directories.  Each match
keeps its path relative to the pattern's literal base directory, so
``cp from=".template/**/*.md" to="docs"`` turns ``.template/a/b.md`` into
``docs/a/b.md``.  Every source and target is validated before the first
filesystem change, so a containment failure leaves the tree untouched.
"""

from __future__ import annotations

import asyncio
import shutil
from pathlib import Path

from rich.markup import escape

from stencil.actions.errors import ActionError
from stencil.actions.paths import (
    ensure_within,
    match,
    prune_nested,
    relative_to_base,
    resolve_within,
)
from stencil.utils import console


def _remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _copy_entry(source: Path, target: Path, overwrite: bool) -> None:
    if source.is_dir() and not source.is_symlink():
        def _copy_file(src: str, dst: str) -> None:
            if overwrite or not Path(dst).exists():
                shutil.copy2(src, dst)

        shutil.copytree(source, target, copy_function=_copy_file, dirs_exist_ok=True)
        return

    if target.exists() and not overwrite:
        return
    if target.is_dir() and not target.is_symlink():
        raise ActionError(f"Cannot overwrite directory '{target}' with a file")
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, target)


def _move_entry(source: Path, target: Path, overwrite: bool) -> None:
    if target.exists() or target.is_symlink():
        if source.is_dir() and target.is_dir() and not target.is_symlink():
            # Merge directory contents into the existing directory.
            for child in sorted(source.iterdir()):
                _move_entry(child, target / child.name, overwrite)
            if not any(source.iterdir()):
                source.rmdir()
            return
        if not overwrite:
            return
        _remove_path(target)

    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(target))


class FileOperationRunner:
    """Executes ``cp``, ``mv`` and ``rm`` actions under a project root."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    # -- Planning ----------------------------------------------------------

    def _plan(self, source: str, destination: str) -> list[tuple[Path, Path]]:
        """Resolve and validate every ``(match, target)`` pair up front."""
        target_dir = resolve_within(self.root, destination)
        plan: list[tuple[Path, Path]] = []
        for path in prune_nested(match(self.root, source)):
            ensure_within(path, self.root, source)
            target = target_dir / relative_to_base(path, self.root, source)
            ensure_within(target, self.root, destination)
            if target != path and path in target.parents:
                raise ActionError(f"Cannot place '{self._show(path)}' inside itself")
            plan.append((path, target))
        return plan

    def _show(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)

    # -- Operations --------------------------------------------------------

    async def copy(self, source: str, destination: str, overwrite: bool = True) -> list[Path]:
        """Copy everything matched by *source* under *destination*.

        Returns:
            The target paths that were written (or merged into).
        """
        console.print(
            f"⋅ Copying: [dim]{escape(source)} ╌╌ {escape(destination)}[/dim]", highlight=False
        )
        plan = self._plan(source, destination)

        done: list[Path] = []
        for path, target in plan:
            if path == target:
                continue
            try:
                await asyncio.to_thread(_copy_entry, path, target, overwrite)
            except OSError as exc:
                raise ActionError(
                    f"Failed to copy '{self._show(path)}' to '{self._show(target)}': {exc}"
                ) from exc
            console.print(
                f"└─ {escape(self._show(path))} ╌╌ {escape(self._show(target))}",
                highlight=False,
            )
            done.append(target)
        return done

    async def move(self, source: str, destination: str, overwrite: bool = True) -> list[Path]:
        """Move everything matched by *source* under *destination*."""
        console.print(
            f"⋅ Moving: [dim]{escape(source)} ╌╌ {escape(destination)}[/dim]", highlight=False
        )
        plan = self._plan(source, destination)
        for path, target in plan:
            if target in path.parents:
                raise ActionError(
                    f"Cannot move '{self._show(path)}' onto its own parent directory"
                )

        done: list[Path] = []
        for path, target in plan:
            if path == target:
                continue
            try:
                await asyncio.to_thread(_move_entry, path, target, overwrite)
            except OSError as exc:
                raise ActionError(
                    f"Failed to move '{self._show(path)}' to '{self._show(target)}': {exc}"
                ) from exc
            console.print(
                f"└─ {escape(self._show(path))} ╌╌ {escape(self._show(target))}",
                highlight=False,
            )
            done.append(target)
        return done

    async def remove(self, pattern: str) -> list[Path]:
        """Delete every file and directory matched by *pattern*.

        A matched symlink is unlinked without touching what it points to.
        An entry reached through a symlink that leaves the root is refused.
        """
        console.print(f"⋅ Deleting: [dim]{escape(pattern)}[/dim]", highlight=False)
        targets = prune_nested(match(self.root, pattern))
        for path in targets:
            ensure_within(path.parent, self.root, pattern)
            if not path.is_symlink():
                ensure_within(path, self.root, pattern)

        for path in targets:
            try:
                await asyncio.to_thread(_remove_path, path)
            except OSError as exc:
                raise ActionError(f"Failed to delete '{self._show(path)}': {exc}") from exc
            console.print(f"└─ {escape(self._show(path))}", highlight=False)
        return targets
