"""Shared pytest fixtures for the stencil test suite.

Provides reusable fixtures for:
- Temporary project directories
- Writing action documents into a project
- A scripted prompt surface that answers from a queue
- In-memory template tarballs
"""

from __future__ import annotations

import io
import tarfile
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from stencil.actions.prompts import PromptSurface
from stencil.document.models import AnswerValue, PromptAction

# Returned by ScriptedSurface to accept the prompt's default.
USE_DEFAULT = object()


# ---------------------------------------------------------------------------
# Fake prompt surface
# ---------------------------------------------------------------------------


class ScriptedSurface(PromptSurface):
    """Answers prompts from a queue, in order.

    Queue entries are returned as the answer, except:
    - ``USE_DEFAULT`` returns the prompt's default.
    - An exception instance or class is raised instead.
    """

    def __init__(self, answers: list[Any] | None = None) -> None:
        self.answers = list(answers or [])
        self.asked: list[PromptAction] = []

    def ask(self, prompt: PromptAction) -> AnswerValue:
        self.asked.append(prompt)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt for '{prompt.key}'")
        value = self.answers.pop(0)
        if value is USE_DEFAULT:
            return prompt.default
        if isinstance(value, BaseException) or (
            isinstance(value, type) and issubclass(value, BaseException)
        ):
            raise value
        return value


@pytest.fixture
def scripted_surface() -> Callable[..., ScriptedSurface]:
    """Factory: ``scripted_surface("my-app", True)``."""

    def _make(*answers: Any) -> ScriptedSurface:
        return ScriptedSurface(list(answers))

    return _make


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Empty project directory (auto-cleanup)."""
    root = tmp_path / "project"
    root.mkdir()
    yield root


@pytest.fixture
def write_files(project_root: Path) -> Callable[[dict[str, str]], Path]:
    """Factory writing ``{relative_path: content}`` into the project root."""

    def _write(files: dict[str, str]) -> Path:
        for relative, content in files.items():
            target = project_root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return project_root

    return _write


@pytest.fixture
def write_document(project_root: Path) -> Callable[..., Path]:
    """Factory writing a dedented ``stencil.yaml`` into the project root."""

    def _write(text: str, name: str = "stencil.yaml") -> Path:
        path = project_root / name
        path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Archives
# ---------------------------------------------------------------------------


def make_tarball(
    files: dict[str, bytes],
    prefix: str = "widget-main",
    modes: dict[str, int] | None = None,
) -> bytes:
    """Build a gzipped tarball with every entry under ``prefix/``."""
    modes = modes or {}
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        top = tarfile.TarInfo(prefix)
        top.type = tarfile.DIRTYPE
        top.mode = 0o755
        archive.addfile(top)
        for name, data in files.items():
            info = tarfile.TarInfo(f"{prefix}/{name}")
            info.size = len(data)
            info.mode = modes.get(name, 0o644)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def template_tarball() -> bytes:
    """A small template archive with a document and a placeholder file."""
    document = textwrap.dedent(
        """
        actions:
          - echo: Scaffolding finished
        """
    ).lstrip()
    return make_tarball(
        {
            "stencil.yaml": document.encode(),
            "README.md": b"# {repo_name}\n",
            "bin/setup.sh": b"#!/bin/sh\necho setup\n",
        },
        modes={"bin/setup.sh": 0o755},
    )


@pytest.fixture
def tarball_factory() -> Callable[..., bytes]:
    """Expose ``make_tarball`` to tests."""
    return make_tarball


@pytest.fixture
def use_default() -> object:
    """Sentinel making ``ScriptedSurface`` accept the prompt default."""
    return USE_DEFAULT
