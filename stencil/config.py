"""stencil configuration.

Typed configuration for the command line.  Values can come from flags,
environment variables or a saved JSON file; document options are then merged
with the overrides this configuration produces.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from stencil.document.models import OptionsOverrides

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_bool(name: str) -> Optional[bool]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return None
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


class Config(BaseModel):
    """Global stencil configuration.

    Instances are created once by the CLI entry point and passed to the
    fetch/unpack and execution steps.
    """

    document_name: str = Field(
        default="stencil.yaml", description="File name of the action document"
    )
    delete: Optional[bool] = Field(
        default=None,
        description="Override for the document's delete option; None keeps the document value",
    )
    ignore_actions: bool = Field(
        default=False, description="Unpack only; do not run the document"
    )
    request_timeout: float = Field(
        default=30.0, ge=1, description="Archive download timeout in seconds"
    )
    editor: Optional[str] = Field(
        default=None, description="Editor command for editor prompts"
    )

    def overrides(self) -> OptionsOverrides:
        """Options overrides derived from this configuration."""
        return OptionsOverrides(delete=self.delete)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            STENCIL_DOCUMENT, STENCIL_DELETE, STENCIL_IGNORE_ACTIONS,
            STENCIL_TIMEOUT, STENCIL_EDITOR.
        """
        kwargs: dict[str, object] = {}
        if os.environ.get("STENCIL_DOCUMENT"):
            kwargs["document_name"] = os.environ["STENCIL_DOCUMENT"]
        delete = _env_bool("STENCIL_DELETE")
        if delete is not None:
            kwargs["delete"] = delete
        ignore = _env_bool("STENCIL_IGNORE_ACTIONS")
        if ignore is not None:
            kwargs["ignore_actions"] = ignore
        if os.environ.get("STENCIL_TIMEOUT"):
            kwargs["request_timeout"] = float(os.environ["STENCIL_TIMEOUT"])
        if os.environ.get("STENCIL_EDITOR"):
            kwargs["editor"] = os.environ["STENCIL_EDITOR"]
        return cls(**kwargs)
