"""Pydantic v2 models for stencil documents.

Defines the typed model the builder produces from the node tree: the run
``Options``, the closed set of action variants, and the ``ActionSet`` that is
either a flat list of actions or a list of named suites.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

AnswerValue = Union[bool, int, float, str]


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class PromptKind(str, Enum):
    """Interactive prompt flavours."""
    INPUT = "input"
    EDITOR = "editor"
    SELECT = "select"
    NUMBER = "number"
    CONFIRM = "confirm"


class ActionSetForm(str, Enum):
    """Shape of the ``actions`` node."""
    FLAT = "flat"
    SUITES = "suites"
    EMPTY = "empty"


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class OptionsOverrides(BaseModel):
    """Command-line values that take precedence over document options."""
    delete: Optional[bool] = Field(default=None, description="Override for Options.delete")


class Options(BaseModel):
    """Document options. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    delete: bool = Field(
        default=True, description="Delete the document after a successful run"
    )

    def merged(self, overrides: OptionsOverrides | None) -> "Options":
        """Return a copy with every non-``None`` override applied."""
        if overrides is None:
            return self
        updates = overrides.model_dump(exclude_none=True)
        return self.model_copy(update=updates)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

class _ActionBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class EchoAction(_ActionBase):
    """Print a message."""
    kind: Literal["echo"] = "echo"
    text: str
    trim: bool = True
    inject: tuple[str, ...] = ()


class RunAction(_ActionBase):
    """Run one or more shell command lines."""
    kind: Literal["run"] = "run"
    text: str
    name: Optional[str] = None
    inject: tuple[str, ...] = ()


class CopyAction(_ActionBase):
    """Copy glob matches under a destination directory."""
    kind: Literal["cp"] = "cp"
    source: str = Field(..., description="Glob selecting what to copy")
    destination: str = Field(..., description="Relative destination directory")
    overwrite: bool = True


class MoveAction(_ActionBase):
    """Move glob matches under a destination directory."""
    kind: Literal["mv"] = "mv"
    source: str = Field(..., description="Glob selecting what to move")
    destination: str = Field(..., description="Relative destination directory")
    overwrite: bool = True


class RemoveAction(_ActionBase):
    """Delete glob matches."""
    kind: Literal["rm"] = "rm"
    pattern: str


class ReplaceAction(_ActionBase):
    """Substitute answer placeholders in files."""
    kind: Literal["replace"] = "replace"
    keys: tuple[str, ...]
    scope: Optional[str] = Field(
        default=None, description="Glob limiting the files; None means all files"
    )


class PromptAction(_ActionBase):
    """Ask the operator a question and store the answer under ``key``."""
    kind: Literal["prompt"] = "prompt"
    prompt_kind: PromptKind
    key: str
    hint: str
    default: Optional[AnswerValue] = None
    choices: tuple[str, ...] = ()

    @property
    def required(self) -> bool:
        return self.default is None


Action = Annotated[
    Union[
        EchoAction,
        RunAction,
        CopyAction,
        MoveAction,
        RemoveAction,
        ReplaceAction,
        PromptAction,
    ],
    Field(discriminator="kind"),
]

ACTION_KINDS: tuple[str, ...] = ("echo", "run", "cp", "mv", "rm", "replace", "prompt")


# ---------------------------------------------------------------------------
# Action sets
# ---------------------------------------------------------------------------

class Suite(BaseModel):
    """A named, ordered group of actions."""
    model_config = ConfigDict(frozen=True)

    name: str
    actions: tuple[Action, ...] = ()


class ActionSet(BaseModel):
    """Either a flat list of actions or a list of suites, never both."""
    model_config = ConfigDict(frozen=True)

    form: ActionSetForm = ActionSetForm.EMPTY
    actions: tuple[Action, ...] = ()
    suites: tuple[Suite, ...] = ()

    @classmethod
    def flat(cls, actions: list[Action]) -> "ActionSet":
        return cls(form=ActionSetForm.FLAT, actions=tuple(actions))

    @classmethod
    def of_suites(cls, suites: list[Suite]) -> "ActionSet":
        return cls(form=ActionSetForm.SUITES, suites=tuple(suites))

    @classmethod
    def empty(cls) -> "ActionSet":
        return cls()

    def count(self) -> int:
        """Number of actions across the whole set."""
        if self.form is ActionSetForm.SUITES:
            return sum(len(suite.actions) for suite in self.suites)
        return len(self.actions)

    def groups(self) -> list[tuple[Optional[str], tuple[Action, ...]]]:
        """Return ``(suite_name, actions)`` pairs in execution order.

        Every suite is its own group, even when it is empty or shares its
        name with the previous one.  A flat set is a single group named
        ``None``; an empty set has no groups.
        """
        if self.form is ActionSetForm.SUITES:
            return [(suite.name, suite.actions) for suite in self.suites]
        if self.form is ActionSetForm.FLAT:
            return [(None, self.actions)]
        return []


# ---------------------------------------------------------------------------
# Build diagnostics
# ---------------------------------------------------------------------------

class Diagnostic(BaseModel):
    """A recoverable problem found while building; the node was dropped."""
    location: str = Field(..., description="Path of the offending node, e.g. 'actions/cp'")
    message: str

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"
