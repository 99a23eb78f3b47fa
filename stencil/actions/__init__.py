"""stencil action runners.

Each runner executes one family of actions against a project root:

* ``PromptRunner`` -- interactive prompts writing into the ``AnswerStore``
* ``ReplacementEngine`` / ``inject`` -- placeholder substitution
* ``FileOperationRunner`` -- ``cp``, ``mv`` and ``rm``
* ``ShellRunner`` -- ``run``
"""

from stencil.actions.answers import AnswerStore
from stencil.actions.errors import (
    ActionError,
    CommandError,
    ContainmentError,
    PromptCancelledError,
)
from stencil.actions.files import FileOperationRunner
from stencil.actions.prompts import PromptRunner, PromptSurface, RichPromptSurface
from stencil.actions.replace import ReplaceReport, ReplacementEngine, inject, placeholder
from stencil.actions.shell import ShellRunner

__all__ = [
    "ActionError",
    "AnswerStore",
    "CommandError",
    "ContainmentError",
    "FileOperationRunner",
    "PromptCancelledError",
    "PromptRunner",
    "PromptSurface",
    "ReplaceReport",
    "ReplacementEngine",
    "RichPromptSurface",
    "ShellRunner",
    "inject",
    "placeholder",
]
