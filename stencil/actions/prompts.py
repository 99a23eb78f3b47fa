"""Interactive prompts and the runner that records their answers.

``PromptSurface`` is the boundary to the terminal: given a ``PromptAction``
it returns a typed answer, or raises ``KeyboardInterrupt``/``EOFError`` when
the operator cancels.  ``RichPromptSurface`` is the default implementation
built on ``rich.prompt``.  ``PromptRunner`` validates the answer and writes it
into the ``AnswerStore``.
"""

from __future__ import annotations

import math
import os
import shlex
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Union

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, InvalidResponse, Prompt, PromptBase

from stencil.actions.answers import AnswerStore
from stencil.actions.errors import ActionError, PromptCancelledError
from stencil.document.models import AnswerValue, PromptAction, PromptKind
from stencil.utils import console as default_console
from stencil.utils import parse_number

REQUIRED_MESSAGE = "[prompt.invalid]This field is required."


# ---------------------------------------------------------------------------
# rich prompt flavours
# ---------------------------------------------------------------------------


class RequiredPrompt(Prompt):
    """Text prompt that rejects empty answers."""

    def process_response(self, value: str) -> str:
        if not value.strip():
            raise InvalidResponse(REQUIRED_MESSAGE)
        return super().process_response(value)


class NumberPrompt(PromptBase[Union[int, float]]):
    """Prompt accepting an integer or a floating point number."""

    validate_error_message = "[prompt.invalid]Please enter a valid number"

    def process_response(self, value: str) -> Union[int, float]:
        if not value.strip():
            raise InvalidResponse(REQUIRED_MESSAGE)
        try:
            return parse_number(value)
        except ValueError:
            raise InvalidResponse(self.validate_error_message) from None


# ---------------------------------------------------------------------------
# Surfaces
# ---------------------------------------------------------------------------


class PromptSurface(ABC):
    """Something that can put a question to the operator."""

    @abstractmethod
    def ask(self, prompt: PromptAction) -> AnswerValue:
        """Return the answer for *prompt*.

        Raises:
            KeyboardInterrupt | EOFError: When the operator cancels.
        """


class RichPromptSurface(PromptSurface):
    """Terminal prompts rendered with Rich.

    Args:
        console: Console to prompt on.  Defaults to the shared stencil console.
        editor: Editor command for ``editor`` prompts.  Falls back to
            ``$VISUAL``, then ``$EDITOR``, then ``vi``.
    """

    def __init__(self, console: Console | None = None, editor: str | None = None) -> None:
        self.console = console or default_console
        self.editor = editor

    def ask(self, prompt: PromptAction) -> AnswerValue:
        self.console.print(
            f"[dim]The answer will be mapped to: {prompt.key}[/dim]", highlight=False
        )
        handlers = {
            PromptKind.INPUT: self._input,
            PromptKind.EDITOR: self._editor,
            PromptKind.SELECT: self._select,
            PromptKind.NUMBER: self._number,
            PromptKind.CONFIRM: self._confirm,
        }
        return handlers[prompt.prompt_kind](prompt)

    def _kwargs(self, prompt: PromptAction) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"console": self.console}
        if prompt.default is not None:
            kwargs["default"] = prompt.default
        return kwargs

    def _input(self, prompt: PromptAction) -> str:
        if prompt.required:
            return RequiredPrompt.ask(prompt.hint, console=self.console)
        return Prompt.ask(prompt.hint, **self._kwargs(prompt))

    def _select(self, prompt: PromptAction) -> str:
        return Prompt.ask(prompt.hint, choices=list(prompt.choices), **self._kwargs(prompt))

    def _number(self, prompt: PromptAction) -> Union[int, float]:
        return NumberPrompt.ask(prompt.hint, **self._kwargs(prompt))

    def _confirm(self, prompt: PromptAction) -> bool:
        return Confirm.ask(prompt.hint, **self._kwargs(prompt))

    def _editor(self, prompt: PromptAction) -> str:
        self.console.print(f"[bold]{escape(prompt.hint)}[/bold] [dim](opening editor)[/dim]")
        while True:
            text = self.edit(str(prompt.default or ""))
            if text.strip() or not prompt.required:
                return text
            self.console.print(REQUIRED_MESSAGE)

    def edit(self, initial: str) -> str:
        """Open the configured editor on a scratch file and return what was saved."""
        command = (
            self.editor
            or os.environ.get("VISUAL")
            or os.environ.get("EDITOR")
            or "vi"
        )
        with tempfile.NamedTemporaryFile(
            "w", suffix=".txt", delete=False, encoding="utf-8"
        ) as handle:
            handle.write(initial)
            scratch = Path(handle.name)

        try:
            returncode = subprocess.call([*shlex.split(command), str(scratch)])
            if returncode != 0:
                raise ActionError(f"Editor '{command}' exited with status {returncode}")
            return scratch.read_text(encoding="utf-8").rstrip("\n")
        finally:
            scratch.unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


def _check_answer(prompt: PromptAction, value: Any) -> AnswerValue:
    """Reject answers of the wrong shape instead of coercing them."""
    kind = prompt.prompt_kind
    if kind is PromptKind.CONFIRM:
        valid = isinstance(value, bool)
    elif kind is PromptKind.NUMBER:
        valid = (
            isinstance(value, (int, float))
            and not isinstance(value, bool)
            and math.isfinite(value)
        )
    else:
        valid = isinstance(value, str)
        if valid and kind is PromptKind.SELECT:
            valid = value in prompt.choices
        if valid and kind in (PromptKind.INPUT, PromptKind.EDITOR) and prompt.required:
            valid = bool(value.strip())
    if not valid:
        raise ActionError(f"Invalid answer {value!r} for {kind.value} prompt '{prompt.key}'")
    return value


class PromptRunner:
    """Asks prompts through a surface and stores the answers."""

    def __init__(self, surface: PromptSurface, store: AnswerStore) -> None:
        self.surface = surface
        self.store = store

    def ask(self, prompt: PromptAction) -> AnswerValue:
        """Ask *prompt*, store the answer under its key and return it.

        An existing answer for the same key is overwritten.

        Raises:
            PromptCancelledError: If the operator cancels.
            ActionError: If the surface returns an answer of the wrong shape.
        """
        try:
            value = self.surface.ask(prompt)
        except (KeyboardInterrupt, EOFError) as exc:
            raise PromptCancelledError(prompt.key) from exc

        answer = _check_answer(prompt, value)
        self.store.set(prompt.key, answer)
        return answer
