"""Tests for the manifest-driven question flow.

Covers:
- Visibility against static defaults, constants and live answers
- Skipped steps absent from the answer set
- Widget construction per step type
- Normalized answers for pick widgets
- Cancellation and expression failures
"""

from __future__ import annotations

import pytest

from qtcli.errors import AbortedError, ExpressionError
from qtcli.manifests import QuestionManifest
from qtcli.prompt import keys as k
from qtcli.prompt.keys import ScriptedKeys
from qtcli.prompt.questions import QuestionFlow, run_questions
from qtcli.prompt.widgets import InputPrompt, ListPrompt

pytestmark = pytest.mark.unit


def manifest(*steps: dict, consts: list[dict] | None = None) -> QuestionManifest:
    return QuestionManifest.model_validate({"steps": list(steps), "consts": consts or []})


FORM_STEPS = (
    {"id": "useForm", "type": "confirm", "question": "Form?", "default": False},
    {
        "id": "uiUsage",
        "type": "picker",
        "question": "Usage:",
        "when": "{{ useForm }}",
        "default": "pointer",
        "items": [{"text": "Pointer", "data": "pointer"}, {"text": "Member", "data": "member"}],
    },
    {"id": "note", "type": "input", "question": "Note about {{ uiUsage }}:"},
)


class TestVisibility:
    def test_skipped_step_is_absent(self, console):
        flow = QuestionFlow(
            manifest(*FORM_STEPS), keys=ScriptedKeys("n", "ok", k.ENTER), console=console
        )
        answers = flow.run()
        assert answers == {"useForm": False, "note": "ok"}

    def test_skipped_default_still_seeds_later_steps(self, console):
        flow = QuestionFlow(
            manifest(*FORM_STEPS), keys=ScriptedKeys("n", k.ENTER), console=console
        )
        flow.run()
        assert "Note about pointer:" in console.file.getvalue()

    def test_visible_step_is_answered(self, console):
        flow = QuestionFlow(
            manifest(*FORM_STEPS),
            keys=ScriptedKeys("y", k.DOWN, k.ENTER, k.ENTER),
            console=console,
        )
        answers = flow.run()
        assert answers == {"useForm": True, "uiUsage": "member", "note": ""}
        assert "Note about member:" in console.file.getvalue()

    def test_when_false_literal(self, console):
        flow = QuestionFlow(
            manifest({"id": "hidden", "type": "input", "when": False}),
            keys=ScriptedKeys(),
            console=console,
        )
        assert flow.run() == {}


class TestConstants:
    def test_constants_are_answers(self, console):
        flow = QuestionFlow(
            manifest(
                {"id": "name", "type": "input", "question": "Name ({{ prefix }}):"},
                consts=[{"prefix": "q"}, {"suffix": "x"}],
            ),
            keys=ScriptedKeys("a", k.ENTER),
            console=console,
        )
        assert flow.run() == {"prefix": "q", "suffix": "x", "name": "a"}
        assert "Name (q):" in console.file.getvalue()

    def test_constants_override_defaults_in_seed(self):
        m = manifest({"id": "mode", "type": "input", "default": "a"}, consts=[{"mode": "b"}])
        assert m.extract_defaults() == {"mode": "b"}


class TestWidgetConstruction:
    def test_input_with_rules(self, console):
        m = manifest({
            "id": "cls",
            "type": "input",
            "value": "Widget",
            "rules": [{"required": True}, {"match": "^[A-Z]"}],
        })
        widget = QuestionFlow(m).build_widget(m.steps[0], {})
        assert isinstance(widget, InputPrompt)
        assert widget.buffer == "Widget"
        assert len(widget.validator) == 2

    def test_input_without_rules_has_no_validator(self):
        m = manifest({"id": "cls", "type": "input"})
        assert QuestionFlow(m).build_widget(m.steps[0], {}).validator is None

    @pytest.mark.parametrize("default, expected", [(True, "y"), ("yes", "y"), (False, "n"), (None, "n")])
    def test_confirm_default(self, default, expected):
        m = manifest({"id": "ok", "type": "confirm", "default": default})
        widget = QuestionFlow(m).build_widget(m.steps[0], {})
        assert widget.default == expected

    def test_items_are_rendered_against_context(self):
        m = manifest({
            "id": "mods",
            "type": "choices",
            "items": [
                {"text": "Ui::{{ cls }}", "description": "for {{ cls }}"},
                {"text": ""},
                {"text": "Svg", "checked": "{{ qParseFloat(qt) >= 6.5 }}"},
            ],
        })
        widget = QuestionFlow(m).build_widget(m.steps[0], {"cls": "Dialog", "qt": "6.8"})
        assert isinstance(widget, ListPrompt)
        assert widget.multi_select
        assert [item.text for item in widget.items] == ["Ui::Dialog", "", "Svg"]
        assert widget.items[0].description == "for Dialog"
        assert widget.items[1].is_separator
        assert widget.items[2].checked is True


class TestAnswers:
    def test_live_answer_feeds_later_items(self, console):
        m = manifest(
            {"id": "cls", "type": "input"},
            {"id": "usage", "type": "picker", "items": [{"text": "Ui::{{ cls }}"}]},
        )
        answers = QuestionFlow(
            m, keys=ScriptedKeys("Dialog", k.ENTER, k.ENTER), console=console
        ).run()
        assert answers["usage"] == "Ui::Dialog"

    def test_choices_answer_is_joined(self, console):
        m = manifest({
            "id": "mods",
            "type": "choices",
            "items": [
                {"text": "Network"},
                {"text": "Svg", "checked": True},
                {"text": "Multimedia", "data": "mm"},
            ],
        })
        answers = QuestionFlow(
            m, keys=ScriptedKeys(k.SPACE, k.DOWN, k.DOWN, k.SPACE, k.ENTER), console=console
        ).run()
        assert answers == {"mods": "Network;Svg;mm"}

    def test_run_questions_wrapper(self, console):
        m = manifest({"id": "ok", "type": "confirm", "default": True})
        assert run_questions(m, keys=ScriptedKeys(k.ENTER), console=console) == {"ok": True}


class TestFailures:
    def test_cancel_raises_aborted(self, console):
        flow = QuestionFlow(manifest(*FORM_STEPS), keys=ScriptedKeys("y", "q"), console=console)
        with pytest.raises(AbortedError):
            flow.run()

    def test_bad_expression(self, console):
        flow = QuestionFlow(
            manifest({"id": "x", "type": "input", "when": "{{ oops("}),
            keys=ScriptedKeys(),
            console=console,
        )
        with pytest.raises(ExpressionError, match="steps:x"):
            flow.run()
