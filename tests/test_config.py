"""Unit tests for configuration models (stencil.config).

Tests cover:
- Config defaults and validation
- overrides() mapping onto OptionsOverrides
- from_env parsing, including invalid booleans
- save / load round trip
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from stencil.config import Config
from stencil.document.models import OptionsOverrides

ENV_VARS = (
    "STENCIL_DOCUMENT",
    "STENCIL_DELETE",
    "STENCIL_IGNORE_ACTIONS",
    "STENCIL_TIMEOUT",
    "STENCIL_EDITOR",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ---------------------------------------------------------------------------
# Config - Defaults
# ---------------------------------------------------------------------------


class TestConfigDefaults:
    @pytest.mark.unit
    def test_defaults(self):
        config = Config()
        assert config.document_name == "stencil.yaml"
        assert config.delete is None
        assert config.ignore_actions is False
        assert config.request_timeout == 30.0
        assert config.editor is None

    @pytest.mark.unit
    def test_timeout_below_minimum_rejected(self):
        with pytest.raises(ValidationError):
            Config(request_timeout=0.5)

    @pytest.mark.unit
    def test_timeout_exactly_minimum_accepted(self):
        assert Config(request_timeout=1).request_timeout == 1


# ---------------------------------------------------------------------------
# Config.overrides
# ---------------------------------------------------------------------------


class TestConfigOverrides:
    @pytest.mark.unit
    def test_no_override_by_default(self):
        assert Config().overrides() == OptionsOverrides(delete=None)

    @pytest.mark.unit
    def test_delete_override(self):
        assert Config(delete=False).overrides().delete is False


# ---------------------------------------------------------------------------
# Config.from_env
# ---------------------------------------------------------------------------


class TestConfigFromEnv:
    @pytest.mark.unit
    def test_empty_environment(self, clean_env):
        assert Config.from_env() == Config()

    @pytest.mark.unit
    def test_all_variables(self, clean_env):
        clean_env.setenv("STENCIL_DOCUMENT", "scaffold.yml")
        clean_env.setenv("STENCIL_DELETE", "no")
        clean_env.setenv("STENCIL_IGNORE_ACTIONS", "1")
        clean_env.setenv("STENCIL_TIMEOUT", "12.5")
        clean_env.setenv("STENCIL_EDITOR", "nano")

        config = Config.from_env()

        assert config.document_name == "scaffold.yml"
        assert config.delete is False
        assert config.ignore_actions is True
        assert config.request_timeout == 12.5
        assert config.editor == "nano"

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["true", "YES", " on ", "1"])
    def test_truthy_values(self, clean_env, raw: str):
        clean_env.setenv("STENCIL_DELETE", raw)
        assert Config.from_env().delete is True

    @pytest.mark.unit
    def test_blank_value_ignored(self, clean_env):
        clean_env.setenv("STENCIL_DELETE", "  ")
        assert Config.from_env().delete is None

    @pytest.mark.unit
    def test_invalid_boolean(self, clean_env):
        clean_env.setenv("STENCIL_DELETE", "maybe")
        with pytest.raises(ValueError, match="STENCIL_DELETE"):
            Config.from_env()

    @pytest.mark.unit
    def test_invalid_timeout(self, clean_env):
        clean_env.setenv("STENCIL_TIMEOUT", "0")
        with pytest.raises(ValidationError):
            Config.from_env()


# ---------------------------------------------------------------------------
# Config.save / Config.load
# ---------------------------------------------------------------------------


class TestConfigSaveLoad:
    @pytest.mark.unit
    def test_round_trip(self, tmp_path: Path):
        config = Config(document_name="x.yaml", delete=True, editor="vim")
        saved = config.save(tmp_path / "nested" / "config.json")

        assert saved.exists()
        assert Config.load(saved) == config

    @pytest.mark.unit
    def test_load_invalid(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text('{"request_timeout": -1}', encoding="utf-8")
        with pytest.raises(ValidationError):
            Config.load(path)
