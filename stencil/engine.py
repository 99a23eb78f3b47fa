"""stencil execution engine.

Walks an ``ActionSet`` in document order and dispatches every action to its
runner:

    prompt  -> PromptRunner       (writes the AnswerStore)
    replace -> ReplacementEngine  (reads the AnswerStore)
    cp/mv/rm -> FileOperationRunner
    run     -> ShellRunner        (after injection)
    echo    -> console            (after injection)

State machine: ``idle -> running -> completed | failed``.  The first failing
action moves the engine to ``failed``; nothing after it runs and nothing
before it is undone.  Actions are never retried and never run concurrently.

Usage::

    engine = ExecutionEngine(project_root, result.actions)
    outcome = await engine.run()
    sys.exit(0 if outcome.success else 1)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from rich.markup import escape
from rich.panel import Panel

from stencil.actions.answers import AnswerStore
from stencil.actions.errors import ActionError
from stencil.actions.files import FileOperationRunner
from stencil.actions.prompts import PromptRunner, PromptSurface, RichPromptSurface
from stencil.actions.replace import ReplacementEngine, inject
from stencil.actions.shell import ShellRunner
from stencil.document.builder import build_document
from stencil.document.models import (
    ActionSet,
    ActionSetForm,
    CopyAction,
    EchoAction,
    MoveAction,
    Options,
    OptionsOverrides,
    PromptAction,
    RemoveAction,
    ReplaceAction,
    RunAction,
)
from stencil.document.nodes import load_document
from stencil.utils import (
    console,
    format_duration,
    format_value,
    print_diagnostics,
    print_error,
    print_success,
    print_summary_table,
)

# ---------------------------------------------------------------------------
# Exceptions and results
# ---------------------------------------------------------------------------


class ExecutionError(Exception):
    """Raised when the engine itself is misused (e.g. run twice)."""


class RunState(str, Enum):
    """Lifecycle of one engine run."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class RunResult:
    """Outcome of ``ExecutionEngine.run``."""

    state: RunState
    executed: int
    total: int
    answers: dict[str, Any] = field(default_factory=dict)
    error: Exception | None = None
    failed_action: str | None = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.state is RunState.COMPLETED


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class ExecutionEngine:
    """Sequential interpreter for an ``ActionSet``.

    Attributes:
        root: Project root every action is confined to.
        actions: The read-only action set to execute.
        store: Answers collected so far; owned by this engine.
        state: Current ``RunState``.
    """

    _HANDLERS: dict[str, str] = {
        "echo": "_run_echo",
        "run": "_run_command",
        "cp": "_run_copy",
        "mv": "_run_move",
        "rm": "_run_remove",
        "replace": "_run_replace",
        "prompt": "_run_prompt",
    }

    def __init__(
        self,
        root: str | Path,
        actions: ActionSet,
        prompt_surface: PromptSurface | None = None,
        store: AnswerStore | None = None,
    ) -> None:
        self.root = Path(root).resolve()
        self.actions = actions
        self.store = store if store is not None else AnswerStore()
        self.state = RunState.IDLE

        self.prompts = PromptRunner(prompt_surface or RichPromptSurface(), self.store)
        self.replacements = ReplacementEngine(self.root, self.store)
        self.files = FileOperationRunner(self.root)
        self.shell = ShellRunner(self.root)

    # -- Public API --------------------------------------------------------

    async def run(self) -> RunResult:
        """Execute every action in order until completion or first failure.

        Returns:
            A ``RunResult``.  Action failures are reported on the result
            (``state == FAILED``) rather than raised.

        Raises:
            ExecutionError: If this engine has already run.
        """
        if self.state is not RunState.IDLE:
            raise ExecutionError(f"Engine cannot run from state '{self.state.value}'")

        self.state = RunState.RUNNING
        started = time.monotonic()
        total = self.actions.count()
        executed = 0

        if self.actions.form is ActionSetForm.EMPTY or total == 0:
            console.print("[dim]No actions found.[/dim]")

        for suite_name, actions in self.actions.groups():
            if suite_name is not None:
                console.print(
                    f"[bold blue]◆ Running suite:[/bold blue] [green]{escape(suite_name)}[/green]\n",
                    highlight=False,
                )

            for action in actions:
                handler = getattr(self, self._HANDLERS[action.kind])
                try:
                    await handler(action)
                except ActionError as exc:
                    self.state = RunState.FAILED
                    print_error(f"Action '{action.kind}' failed: {exc}")
                    return self._result(executed, total, started, error=exc, failed=action.kind)
                except BaseException:
                    self.state = RunState.FAILED
                    raise

                executed += 1
                console.print()

        self.state = RunState.COMPLETED
        return self._result(executed, total, started)

    def _result(
        self,
        executed: int,
        total: int,
        started: float,
        error: Exception | None = None,
        failed: str | None = None,
    ) -> RunResult:
        return RunResult(
            state=self.state,
            executed=executed,
            total=total,
            answers=self.store.as_dict(),
            error=error,
            failed_action=failed,
            duration_seconds=time.monotonic() - started,
        )

    # -- Handlers ----------------------------------------------------------

    async def _run_echo(self, action: EchoAction) -> None:
        console.print(inject(action.text, action.inject, self.store), markup=False, highlight=False)

    async def _run_command(self, action: RunAction) -> None:
        command = inject(action.text, action.inject, self.store)
        await self.shell.run(command, name=action.name)

    async def _run_copy(self, action: CopyAction) -> None:
        await self.files.copy(action.source, action.destination, overwrite=action.overwrite)

    async def _run_move(self, action: MoveAction) -> None:
        await self.files.move(action.source, action.destination, overwrite=action.overwrite)

    async def _run_remove(self, action: RemoveAction) -> None:
        await self.files.remove(action.pattern)

    async def _run_replace(self, action: ReplaceAction) -> None:
        await self.replacements.replace(action.keys, action.scope)

    async def _run_prompt(self, action: PromptAction) -> None:
        self.prompts.ask(action)


# ---------------------------------------------------------------------------
# Document-level entry point
# ---------------------------------------------------------------------------


async def execute_document(
    root: str | Path,
    document_name: str = "stencil.yaml",
    overrides: OptionsOverrides | None = None,
    prompt_surface: PromptSurface | None = None,
) -> RunResult | None:
    """Load, build and run the document found in *root*.

    Build diagnostics are printed as warnings.  When the run completes and
    the effective ``delete`` option is set, the document file is removed.

    Returns:
        The ``RunResult``, or ``None`` if *root* has no document.

    Raises:
        DocumentError: On syntax errors or structural build errors.  No
            action has run in that case.
    """
    project_root = Path(root).resolve()
    document_path = project_root / document_name
    if not document_path.is_file():
        console.print(f"[dim]No {document_name} found, nothing to run.[/dim]")
        return None

    built = build_document(load_document(document_path))
    print_diagnostics(built.diagnostics)
    options: Options = built.options.merged(overrides)

    console.print(
        Panel(
            f"Document : {document_path}\n"
            f"Actions  : {built.actions.count()}\n"
            f"Delete   : {'yes' if options.delete else 'no'}",
            title="[bold]stencil[/bold]",
            border_style="bright_cyan",
        )
    )

    engine = ExecutionEngine(project_root, built.actions, prompt_surface=prompt_surface)
    result = await engine.run()

    if result.answers:
        print_summary_table(
            {key: format_value(value) for key, value in result.answers.items()},
            title="Answers",
        )

    if result.success:
        if options.delete and document_path.exists():
            document_path.unlink()
            console.print(f"[dim]Removed {document_name}.[/dim]")
        print_success(
            f"Completed {result.executed} action(s) in {format_duration(result.duration_seconds)}"
        )
    else:
        print_error(
            f"Stopped after {result.executed} of {result.total} action(s); "
            "changes made so far were kept."
        )
    return result
