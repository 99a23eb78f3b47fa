"""Document model builder.

Turns the generic node tree into ``Options`` plus an ``ActionSet``.  The only
fatal problem is an ``actions`` node that mixes suites with single actions.
Everything else (unknown nodes, missing or mistyped fields) drops the
offending node and records a ``Diagnostic`` so one typo does not abort the
rest of the document.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from stencil.document.models import (
    Action,
    ActionSet,
    AnswerValue,
    CopyAction,
    Diagnostic,
    EchoAction,
    MoveAction,
    Options,
    PromptAction,
    PromptKind,
    RemoveAction,
    ReplaceAction,
    RunAction,
    Suite,
)
from stencil.document.nodes import DocumentError, Node
from stencil.utils import parse_number


class StructuralError(DocumentError):
    """Raised when the document cannot be built at all."""


class _SkipNode(Exception):
    """Internal signal: drop the current node and record why."""


@dataclass
class BuildResult:
    """Output of ``DocumentBuilder.build``."""

    options: Options
    actions: ActionSet
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.diagnostics)


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def trim_text(text: str) -> str:
    """Strip indentation common to all non-empty lines and surrounding blank lines.

    Relative indentation is preserved::

        trim_text("\\n    a\\n      b\\n") -> "a\\n  b"
    """
    lines = textwrap.dedent(text).splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines).rstrip()


def _unique(items: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for item in items:
        seen.setdefault(item, None)
    return tuple(seen)


# ---------------------------------------------------------------------------
# Field accessors.  Each raises _SkipNode when the value cannot be used.
# ---------------------------------------------------------------------------


def _required_arg(node: Node, what: str) -> str:
    value = node.arg(0)
    if value is None:
        raise _SkipNode(f"missing required {what}")
    if not isinstance(value, str) or not value.strip():
        raise _SkipNode(f"{what} must be a non-empty string, got {value!r}")
    return value


def _required_field(node: Node, key: str) -> str:
    value = node.get(key)
    if value is None:
        raise _SkipNode(f"missing required field '{key}'")
    if not isinstance(value, str) or not value.strip():
        raise _SkipNode(f"field '{key}' must be a non-empty string, got {value!r}")
    return value


def _optional_string(node: Node, key: str) -> str | None:
    value = node.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise _SkipNode(f"field '{key}' must be a string, got {value!r}")
    return value


def _optional_bool(node: Node, key: str, default: bool) -> bool:
    value = node.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise _SkipNode(f"field '{key}' must be a boolean, got {value!r}")
    return value


def _string_list(node: Node, key: str) -> list[str]:
    """Collect a list field given as a child node's arguments or a scalar prop."""
    values: list[Any] = []
    if key in node.props:
        values.append(node.props[key])
    child = node.child(key)
    if child is not None:
        values.extend(child.args)
    for value in values:
        if not isinstance(value, str):
            raise _SkipNode(f"entries of '{key}' must be strings, got {value!r}")
    return values


def _choice(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise _SkipNode(f"select options must be strings or numbers, got {value!r}")
    return str(value)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class DocumentBuilder:
    """Builds a typed document model from the node tree.

    A builder instance is single-use in spirit but stateless between calls:
    diagnostics are collected per ``build`` invocation.
    """

    def __init__(self) -> None:
        self._diagnostics: list[Diagnostic] = []
        self._action_builders: dict[str, Callable[[Node], Action]] = {
            "echo": self._build_echo,
            "run": self._build_run,
            "cp": self._build_copy,
            "mv": self._build_move,
            "rm": self._build_remove,
            "replace": self._build_replace,
            "input": self._build_prompt,
            "editor": self._build_prompt,
            "select": self._build_prompt,
            "number": self._build_prompt,
            "confirm": self._build_prompt,
        }

    # -- Public API --------------------------------------------------------

    def build(self, nodes: list[Node]) -> BuildResult:
        """Build ``Options`` and ``ActionSet`` from top-level nodes.

        Raises:
            StructuralError: If the ``actions`` node mixes suites and single
                actions.
        """
        self._diagnostics = []
        options = Options()
        actions = ActionSet.empty()
        seen: set[str] = set()

        for node in nodes:
            name = node.name.lower()
            if name in seen:
                self._warn(name, "duplicate top-level node ignored")
                continue
            if name == "options":
                options = self._build_options(node)
            elif name == "actions":
                actions = self._build_actions(node)
            else:
                self._warn(node.name, "unknown top-level node ignored")
                continue
            seen.add(name)

        return BuildResult(options=options, actions=actions, diagnostics=self._diagnostics)

    # -- Options -----------------------------------------------------------

    def _build_options(self, node: Node) -> Options:
        values: dict[str, Any] = dict(node.props)
        for child in node.children:
            values.setdefault(child.name, child.arg(0))

        options: dict[str, Any] = {}
        for raw_name, value in values.items():
            option = raw_name.lower()
            location = f"options/{raw_name}"
            if option == "delete":
                if isinstance(value, bool):
                    options["delete"] = value
                else:
                    self._warn(location, f"expected a boolean, got {value!r}; default kept")
            else:
                self._warn(location, "unknown option ignored")

        return Options(**options)

    # -- Actions -----------------------------------------------------------

    def _build_actions(self, node: Node) -> ActionSet:
        if node.args or node.props:
            self._warn("actions", "arguments on the actions node are ignored")

        children = node.children
        if not children:
            return ActionSet.flat([])

        suites = [child for child in children if child.name.lower() == "suite"]
        if suites and len(suites) != len(children):
            raise StructuralError(
                "actions must be either a list of suites or a flat list of actions, "
                "not a mix of both"
            )

        if suites:
            built: list[Suite] = []
            for index, child in enumerate(children):
                suite = self._build_suite(child, index)
                if suite is not None:
                    built.append(suite)
            return ActionSet.of_suites(built)

        return ActionSet.flat(self._build_action_list(children, "actions"))

    def _build_suite(self, node: Node, index: int) -> Suite | None:
        try:
            name = _required_arg(node, "suite name")
        except _SkipNode as exc:
            self._warn(f"actions/{index}:suite", f"{exc}; suite dropped")
            return None

        body = node.child("actions")
        children = body.children if body is not None else node.children
        actions = self._build_action_list(children, f"actions/suite:{name}")
        return Suite(name=name, actions=tuple(actions))

    def _build_action_list(self, nodes: list[Node], parent: str) -> list[Action]:
        actions: list[Action] = []
        for index, node in enumerate(nodes):
            location = f"{parent}/{index}:{node.name}"
            builder = self._action_builders.get(node.name.lower())
            if builder is None:
                self._warn(location, f"unknown action '{node.name}' skipped")
                continue
            try:
                actions.append(builder(node))
            except _SkipNode as exc:
                self._warn(location, f"{exc}; action skipped")
        return actions

    # -- Individual action kinds -------------------------------------------

    def _build_echo(self, node: Node) -> EchoAction:
        text = node.arg(0)
        if not isinstance(text, str):
            raise _SkipNode(f"echo requires a text argument, got {text!r}")
        trim = _optional_bool(node, "trim", True)
        return EchoAction(
            text=trim_text(text) if trim else text,
            trim=trim,
            inject=_unique(_string_list(node, "inject")),
        )

    def _build_run(self, node: Node) -> RunAction:
        text = trim_text(_required_arg(node, "command"))
        if not text:
            raise _SkipNode("command is empty")
        return RunAction(
            text=text,
            name=_optional_string(node, "name"),
            inject=_unique(_string_list(node, "inject")),
        )

    def _build_copy(self, node: Node) -> CopyAction:
        return CopyAction(
            source=_required_field(node, "from"),
            destination=_required_field(node, "to"),
            overwrite=_optional_bool(node, "overwrite", True),
        )

    def _build_move(self, node: Node) -> MoveAction:
        return MoveAction(
            source=_required_field(node, "from"),
            destination=_required_field(node, "to"),
            overwrite=_optional_bool(node, "overwrite", True),
        )

    def _build_remove(self, node: Node) -> RemoveAction:
        return RemoveAction(pattern=_required_arg(node, "pattern"))

    def _build_replace(self, node: Node) -> ReplaceAction:
        keys: list[str] = []
        for value in node.args:
            if not isinstance(value, str):
                raise _SkipNode(f"replacement keys must be strings, got {value!r}")
            keys.append(value)
        keys.extend(child.name for child in node.children if child.name != "in")
        if not keys:
            raise _SkipNode("replace requires at least one key")
        return ReplaceAction(keys=_unique(keys), scope=_optional_string(node, "in"))

    def _build_prompt(self, node: Node) -> PromptAction:
        kind = PromptKind(node.name.lower())
        key = _required_arg(node, "answer key")
        hint = _required_field(node, "hint")

        choices: tuple[str, ...] = ()
        if kind is PromptKind.SELECT:
            if not node.has("options"):
                raise _SkipNode("select prompts require an 'options' list")
            raw_choices: list[Any] = []
            if "options" in node.props:
                raw_choices.append(node.props["options"])
            options_node = node.child("options")
            if options_node is not None:
                raw_choices.extend(options_node.args)
            choices = tuple(_choice(value) for value in raw_choices)
            if not choices:
                raise _SkipNode("select prompts require a non-empty 'options' list")

        default = self._prompt_default(kind, node.get("default"), choices)
        return PromptAction(
            prompt_kind=kind, key=key, hint=hint, default=default, choices=choices
        )

    @staticmethod
    def _prompt_default(
        kind: PromptKind, value: Any, choices: tuple[str, ...]
    ) -> AnswerValue | None:
        if value is None:
            return None

        if kind is PromptKind.CONFIRM:
            if not isinstance(value, bool):
                raise _SkipNode(f"confirm default must be a boolean, got {value!r}")
            return value

        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise _SkipNode(f"invalid default {value!r}")

        if kind is PromptKind.NUMBER:
            if isinstance(value, str):
                try:
                    return parse_number(value)
                except ValueError:
                    raise _SkipNode(f"number default {value!r} is not a number") from None
            return value

        text = str(value)
        if kind is PromptKind.SELECT and text not in choices:
            raise _SkipNode(f"select default {text!r} is not one of the options")
        return text

    # -- Diagnostics -------------------------------------------------------

    def _warn(self, location: str, message: str) -> None:
        self._diagnostics.append(Diagnostic(location=location, message=message))


def build_document(nodes: list[Node]) -> BuildResult:
    """Convenience wrapper around ``DocumentBuilder().build``."""
    return DocumentBuilder().build(nodes)
