"""Unit tests for root-confined path handling (stencil.actions.paths).

Tests cover:
- has_magic
- pattern_base for literal and wildcard patterns
- resolve_within (".", nested, escaping, absolute)
- match: sorting, hidden entries, missing directories, symlink escapes
- prune_nested and relative_to_base
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from stencil.actions.errors import ActionError, ContainmentError
from stencil.actions.paths import (
    has_magic,
    match,
    pattern_base,
    prune_nested,
    relative_to_base,
    resolve_within,
)


class TestHasMagic:
    @pytest.mark.unit
    @pytest.mark.parametrize("pattern", ["*.md", "src/**", "file?.txt", "[ab].txt"])
    def test_magic(self, pattern: str):
        assert has_magic(pattern)

    @pytest.mark.unit
    @pytest.mark.parametrize("pattern", ["README.md", ".template", "src/main.py"])
    def test_literal(self, pattern: str):
        assert not has_magic(pattern)


class TestPatternBase:
    @pytest.mark.unit
    def test_wildcard_pattern(self):
        assert pattern_base(".template/**/*.md") == PurePosixPath(".template")
        assert pattern_base("a/b/*.txt") == PurePosixPath("a/b")

    @pytest.mark.unit
    def test_leading_wildcard(self):
        assert pattern_base("**/*.md") == PurePosixPath(".")

    @pytest.mark.unit
    def test_literal_pattern_uses_parent(self):
        assert pattern_base("docs/README.md") == PurePosixPath("docs")
        assert pattern_base("README.md") == PurePosixPath(".")


class TestResolveWithin:
    @pytest.mark.unit
    def test_dot_is_root(self, project_root: Path):
        assert resolve_within(project_root, ".") == project_root

    @pytest.mark.unit
    def test_nested(self, project_root: Path):
        assert resolve_within(project_root, "docs/api") == project_root / "docs" / "api"

    @pytest.mark.unit
    def test_inner_parent_reference_allowed(self, project_root: Path):
        assert resolve_within(project_root, "docs/../src") == project_root / "src"

    @pytest.mark.unit
    @pytest.mark.parametrize("relative", ["..", "../elsewhere", "docs/../../x", "/etc", "C:/x"])
    def test_escape_rejected(self, project_root: Path, relative: str):
        with pytest.raises(ContainmentError) as exc_info:
            resolve_within(project_root, relative)
        assert exc_info.value.path == relative

    @pytest.mark.unit
    def test_empty_rejected(self, project_root: Path):
        with pytest.raises(ActionError, match="Empty path"):
            resolve_within(project_root, "  ")


class TestMatch:
    @pytest.mark.unit
    def test_sorted_glob_matches(self, project_root: Path, write_files):
        write_files({"b.md": "", "a.md": "", "c.txt": ""})
        assert match(project_root, "*.md") == [project_root / "a.md", project_root / "b.md"]

    @pytest.mark.unit
    def test_hidden_entries_match(self, project_root: Path, write_files):
        write_files({".template/README.md": "", ".env": ""})
        names = [p.relative_to(project_root).as_posix() for p in match(project_root, "*")]
        assert ".template" in names
        assert ".env" in names

    @pytest.mark.unit
    def test_recursive(self, project_root: Path, write_files):
        write_files({"a/b/c.md": "", "a/d.md": "", "e.md": ""})
        found = {p.relative_to(project_root).as_posix() for p in match(project_root, "**/*.md")}
        assert found == {"a/b/c.md", "a/d.md", "e.md"}

    @pytest.mark.unit
    def test_literal_existing_and_missing(self, project_root: Path, write_files):
        write_files({"README.md": ""})
        assert match(project_root, "README.md") == [project_root / "README.md"]
        assert match(project_root, "MISSING.md") == []

    @pytest.mark.unit
    def test_missing_directory_is_empty(self, project_root: Path):
        assert match(project_root, ".template/**/*") == []

    @pytest.mark.unit
    def test_root_never_matched(self, project_root: Path):
        assert match(project_root, ".") == []

    @pytest.mark.unit
    def test_escaping_pattern_rejected(self, project_root: Path):
        with pytest.raises(ContainmentError):
            match(project_root, "../*")

    @pytest.mark.unit
    def test_symlink_escape_rejected(self, tmp_path: Path, project_root: Path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_text("secret", encoding="utf-8")
        (project_root / "link").symlink_to(outside, target_is_directory=True)

        with pytest.raises(ContainmentError):
            match(project_root, "link/*")

    @pytest.mark.unit
    def test_link_leaving_the_root_returned_unresolved(self, tmp_path: Path, project_root: Path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (project_root / "link").symlink_to(outside, target_is_directory=True)

        assert match(project_root, "*") == [project_root / "link"]


class TestPruneNested:
    @pytest.mark.unit
    def test_children_of_selected_dirs_dropped(self, project_root: Path):
        paths = [
            project_root / "a",
            project_root / "a" / "b.txt",
            project_root / "a" / "c" / "d.txt",
            project_root / "e.txt",
        ]
        assert prune_nested(paths) == [project_root / "a", project_root / "e.txt"]


class TestRelativeToBase:
    @pytest.mark.unit
    def test_relative_to_wildcard_base(self, project_root: Path):
        path = project_root / ".template" / "a" / "b.md"
        assert relative_to_base(path, project_root, ".template/**/*.md") == Path("a/b.md")

    @pytest.mark.unit
    def test_literal_keeps_name(self, project_root: Path):
        path = project_root / "docs" / "README.md"
        assert relative_to_base(path, project_root, "docs/README.md") == Path("README.md")
