"""Unit tests for document models (stencil.document.models).

Tests cover:
- Options defaults, immutability and override merging
- Action variants: kinds, defaults, discriminated validation
- PromptAction.required
- ActionSet constructors, count and group order
- Diagnostic formatting
"""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from stencil.document.models import (
    ACTION_KINDS,
    Action,
    ActionSet,
    ActionSetForm,
    CopyAction,
    Diagnostic,
    EchoAction,
    MoveAction,
    Options,
    OptionsOverrides,
    PromptAction,
    PromptKind,
    RemoveAction,
    ReplaceAction,
    RunAction,
    Suite,
)


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class TestOptions:
    @pytest.mark.unit
    def test_delete_defaults_true(self):
        assert Options().delete is True

    @pytest.mark.unit
    def test_frozen(self):
        options = Options()
        with pytest.raises(ValidationError):
            options.delete = False

    @pytest.mark.unit
    def test_merged_applies_override(self):
        merged = Options(delete=True).merged(OptionsOverrides(delete=False))
        assert merged.delete is False

    @pytest.mark.unit
    def test_merged_none_keeps_document_value(self):
        options = Options(delete=False)
        assert options.merged(OptionsOverrides()).delete is False
        assert options.merged(None) is options


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


class TestActions:
    @pytest.mark.unit
    def test_kinds_match_registry(self):
        actions = [
            EchoAction(text="hi"),
            RunAction(text="ls"),
            CopyAction(source="a", destination="b"),
            MoveAction(source="a", destination="b"),
            RemoveAction(pattern="a"),
            ReplaceAction(keys=("k",)),
            PromptAction(prompt_kind=PromptKind.INPUT, key="k", hint="K"),
        ]
        assert tuple(action.kind for action in actions) == ACTION_KINDS

    @pytest.mark.unit
    def test_defaults(self):
        echo = EchoAction(text="hi")
        assert echo.trim is True
        assert echo.inject == ()
        assert RunAction(text="ls").name is None
        assert CopyAction(source="a", destination="b").overwrite is True
        assert ReplaceAction(keys=("k",)).scope is None

    @pytest.mark.unit
    def test_discriminated_union(self):
        adapter = TypeAdapter(Action)
        action = adapter.validate_python({"kind": "rm", "pattern": ".template"})
        assert isinstance(action, RemoveAction)

        with pytest.raises(ValidationError):
            adapter.validate_python({"kind": "teleport"})

    @pytest.mark.unit
    def test_actions_are_frozen(self):
        action = RemoveAction(pattern="a")
        with pytest.raises(ValidationError):
            action.pattern = "b"

    @pytest.mark.unit
    def test_prompt_required_without_default(self):
        prompt = PromptAction(prompt_kind=PromptKind.INPUT, key="name", hint="Name")
        assert prompt.required is True
        with_default = prompt.model_copy(update={"default": "demo"})
        assert with_default.required is False

    @pytest.mark.unit
    def test_prompt_answer_types_preserved(self):
        confirm = PromptAction(prompt_kind=PromptKind.CONFIRM, key="ok", hint="?", default=False)
        number = PromptAction(prompt_kind=PromptKind.NUMBER, key="n", hint="?", default=3)
        assert confirm.default is False
        assert number.default == 3
        assert isinstance(number.default, int)


# ---------------------------------------------------------------------------
# ActionSet
# ---------------------------------------------------------------------------


class TestActionSet:
    @pytest.mark.unit
    def test_empty(self):
        empty = ActionSet.empty()
        assert empty.form is ActionSetForm.EMPTY
        assert empty.count() == 0
        assert empty.groups() == []

    @pytest.mark.unit
    def test_flat_groups(self):
        first, second = EchoAction(text="1"), EchoAction(text="2")
        flat = ActionSet.flat([first, second])
        assert flat.form is ActionSetForm.FLAT
        assert flat.count() == 2
        assert flat.groups() == [(None, (first, second))]

    @pytest.mark.unit
    def test_suites_grouped_in_order(self):
        a, b, c = EchoAction(text="a"), EchoAction(text="b"), EchoAction(text="c")
        action_set = ActionSet.of_suites(
            [Suite(name="one", actions=(a,)), Suite(name="two", actions=(b, c))]
        )
        assert action_set.count() == 3
        assert action_set.groups() == [("one", (a,)), ("two", (b, c))]

    @pytest.mark.unit
    def test_empty_suite_counts_zero(self):
        action_set = ActionSet.of_suites([Suite(name="nothing")])
        assert action_set.count() == 0
        assert action_set.groups() == [("nothing", ())]

    @pytest.mark.unit
    def test_same_name_suites_stay_separate(self):
        a, b = EchoAction(text="a"), EchoAction(text="b")
        action_set = ActionSet.of_suites(
            [Suite(name="setup", actions=(a,)), Suite(name="setup", actions=(b,))]
        )
        assert action_set.groups() == [("setup", (a,)), ("setup", (b,))]


class TestDiagnostic:
    @pytest.mark.unit
    def test_str(self):
        diagnostic = Diagnostic(location="actions/0:cp", message="missing required field 'to'")
        assert str(diagnostic) == "actions/0:cp: missing required field 'to'"
