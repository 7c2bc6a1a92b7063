"""Manifest-driven question flow.

Walks the steps of a :class:`QuestionManifest` in order.  Every expression
of a step (visibility, question, description, item labels and check
states) is rendered against the static defaults of all steps and the
manifest constants, overlaid with the answers collected so far.  Skipped
steps never appear in the returned answers; cancelling any widget aborts
the whole flow.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from rich.console import Console

from qtcli.errors import AbortedError
from qtcli.expression import ExpressionEvaluator
from qtcli.manifests import QuestionManifest, QuestionStep
from qtcli.prompt.keys import KeyReader
from qtcli.prompt.validators import create_validator
from qtcli.prompt.widgets import ListItem, Widget, choices, confirm, picker, text_input
from qtcli.utils import merge, to_bool

logger = logging.getLogger(__name__)


class QuestionFlow:
    """Runs the questions of one manifest and returns the answer set."""

    def __init__(
        self,
        manifest: QuestionManifest,
        evaluator: ExpressionEvaluator | None = None,
        keys: KeyReader | None = None,
        console: Console | None = None,
    ) -> None:
        self.manifest = manifest
        self.evaluator = evaluator or ExpressionEvaluator()
        self.keys = keys
        self.console = console

    def run(self) -> dict[str, Any]:
        """Ask every visible question.

        Returns:
            The manifest constants plus one entry per answered step.

        Raises:
            AbortedError: If the user cancels a widget.
            ExpressionError: If a step expression fails to render.
        """
        seed = self.manifest.extract_defaults()
        answers = self.manifest.constants()

        for step in self.manifest.steps:
            context = merge(seed, answers)
            name = f"steps:{step.id}"

            if not self.evaluator.render_bool(step.when, context, True, name=name):
                logger.debug("skipping step '%s', condition not satisfied", step.id)
                continue

            widget = self.build_widget(step, context)
            result = widget.run()
            if not result.done:
                raise AbortedError()

            answers[step.id] = result.value_normalized()

        return answers

    def build_widget(self, step: QuestionStep, context: Mapping[str, Any]) -> Widget:
        """Render the step's texts against *context* and construct its widget."""
        name = f"steps:{step.id}"
        render = self.evaluator.render
        question = render(step.question, context, name)
        description = render(step.description, context, name)
        io = {"keys": self.keys, "console": self.console}

        if step.widget == "input":
            validator = create_validator(step.rules)
            return text_input(
                widget_id=step.id,
                question=question,
                description=description,
                value=step.value,
                validator=validator if len(validator) else None,
                **io,
            )

        if step.widget == "confirm":
            default = "y" if to_bool(step.default, False) else "n"
            return confirm(widget_id=step.id, question=question, default=default, **io)

        items = self._build_items(step, context)
        if step.widget == "picker":
            return picker(widget_id=step.id, question=question, items=items, **io)
        return choices(widget_id=step.id, question=question, items=items, **io)

    def _build_items(self, step: QuestionStep, context: Mapping[str, Any]) -> list[ListItem]:
        name = f"steps:{step.id}"
        items: list[ListItem] = []
        for entry in step.items:
            items.append(
                ListItem(
                    text=self.evaluator.render(entry.text, context, name),
                    description=self.evaluator.render(entry.description, context, name),
                    data=entry.data,
                    checked=self.evaluator.render_bool(entry.checked, context, False, name=name),
                )
            )
        return items


def run_questions(
    manifest: QuestionManifest,
    evaluator: ExpressionEvaluator | None = None,
    keys: KeyReader | None = None,
    console: Console | None = None,
) -> dict[str, Any]:
    """Convenience wrapper around :class:`QuestionFlow`."""
    return QuestionFlow(manifest, evaluator=evaluator, keys=keys, console=console).run()
