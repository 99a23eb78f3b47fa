"""Root-confined path resolution and glob matching.

Patterns and destinations are always relative to the project root.  ``*``
matches within one path segment, ``**`` across segments, and hidden entries
are matched like any other.  No ``~`` or ``$VAR`` expansion takes place.
A pattern or destination that would resolve outside the root raises
``ContainmentError``.
"""

from __future__ import annotations

import posixpath
import re
from pathlib import Path, PurePosixPath

from stencil.actions.errors import ActionError, ContainmentError

_MAGIC = re.compile(r"[*?\[]")


def has_magic(pattern: str) -> bool:
    """Return ``True`` if *pattern* contains glob wildcards."""
    return _MAGIC.search(pattern) is not None


def _normalize(relative: str, root: Path) -> str:
    """Lexically normalise *relative* and reject anything escaping *root*."""
    if not relative or not relative.strip():
        raise ActionError("Empty path or pattern")

    candidate = relative.replace("\\", "/")
    if PurePosixPath(candidate).is_absolute() or re.match(r"^[A-Za-z]:", candidate):
        raise ContainmentError(relative, root)

    normalized = posixpath.normpath(candidate)
    if normalized == ".." or normalized.startswith("../"):
        raise ContainmentError(relative, root)
    return normalized


def escapes(path: Path, root: Path) -> bool:
    """Return ``True`` if *path*, with symlinks followed, lies outside *root*."""
    resolved_root = root.resolve()
    resolved = path.resolve()
    return resolved != resolved_root and resolved_root not in resolved.parents


def ensure_within(path: Path, root: Path, original: str) -> Path:
    """Return *path* if it resolves inside *root*, else raise ``ContainmentError``."""
    if escapes(path, root):
        raise ContainmentError(original, root)
    return path


def resolve_within(root: Path, relative: str) -> Path:
    """Resolve a relative destination path under *root*.

    ``"."`` resolves to the root itself.
    """
    normalized = _normalize(relative, root)
    target = root if normalized == "." else root / normalized
    return ensure_within(target, root, relative)


def pattern_base(pattern: str) -> PurePosixPath:
    """Return the literal directory a pattern is anchored at.

    For ``".template/**/*.md"`` that is ``.template``; for a wildcard-free
    pattern it is the pattern's parent, so ``"docs/README.md"`` -> ``docs``.
    """
    parts = PurePosixPath(pattern).parts
    if not has_magic(pattern):
        return PurePosixPath(*parts[:-1]) if len(parts) > 1 else PurePosixPath(".")

    literal: list[str] = []
    for part in parts:
        if has_magic(part):
            break
        literal.append(part)
    return PurePosixPath(*literal) if literal else PurePosixPath(".")


def match(root: Path, pattern: str) -> list[Path]:
    """Return the entries under *root* matched by *pattern*, sorted.

    A pattern matching nothing (including one whose directory no longer
    exists) yields an empty list.  The root itself is never returned.

    Matches are not resolved: a symlink inside the root that points outside
    it is returned as-is, and callers decide whether to skip it, unlink it
    or refuse it.

    Raises:
        ContainmentError: If the pattern, or its literal base directory,
            escapes the root.
    """
    normalized = _normalize(pattern, root)
    if normalized == ".":
        return []
    ensure_within(root / pattern_base(normalized), root, pattern)

    if has_magic(normalized):
        matches = sorted(root.glob(normalized))
    else:
        candidate = root / normalized
        matches = [candidate] if candidate.exists() or candidate.is_symlink() else []

    resolved_root = root.resolve()
    result: list[Path] = []
    for path in matches:
        if path.resolve() == resolved_root:
            continue
        result.append(path)
    return result


def prune_nested(paths: list[Path]) -> list[Path]:
    """Drop every path that lies inside another path of the list."""
    selected = set(paths)
    return [
        path for path in paths
        if not any(parent in selected for parent in path.parents)
    ]


def relative_to_base(path: Path, root: Path, pattern: str) -> Path:
    """Path of a match relative to its pattern's literal base directory."""
    base = root / pattern_base(_normalize(pattern, root))
    try:
        return path.relative_to(base)
    except ValueError:
        return Path(path.name)
