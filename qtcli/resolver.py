"""Preset resolution.

Turns a target kind and an optional preset name into a concrete preset:

* ``@dir`` names a built-in template directory of that kind;
* any other name is a user preset of that kind;
* no name runs an interactive selector over user presets and built-ins,
  with a trailing entry that configures a built-in template by hand and
  can save the answers as a new user preset.

Single files have a shortcut: a file name with a known extension resolves
straight to the template registered for that extension.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from rich.console import Console

from qtcli.errors import AbortedError, NotFoundError
from qtcli.expression import ExpressionEvaluator
from qtcli.library import BUILTIN_PREFIX, TemplateLibrary
from qtcli.manifests import TargetKind
from qtcli.presets import Preset, PresetData, PresetStore
from qtcli.prompt.flow import Flow
from qtcli.prompt.keys import KeyReader
from qtcli.prompt.questions import QuestionFlow
from qtcli.prompt.validators import ValidatorChain, not_in_rule, required_rule
from qtcli.prompt.widgets import ListItem, Widget, confirm, picker, text_input

logger = logging.getLogger(__name__)

MANUAL_SELECT_LABEL = "[Manually select features]"


class PresetResolver:
    """Resolves presets against a user store and the built-in templates.

    Args:
        store: The user preset store; saved here only when the user asks to
            keep a manually configured preset.
        library: Built-in template discovery.
        evaluator: Expression evaluator used by question flows.
        keys: Key reader handed to every widget (``None`` means terminal).
        console: Console handed to every widget.
    """

    def __init__(
        self,
        store: PresetStore,
        library: TemplateLibrary,
        evaluator: ExpressionEvaluator | None = None,
        keys: KeyReader | None = None,
        console: Console | None = None,
    ) -> None:
        self.store = store
        self.library = library
        self.evaluator = evaluator or ExpressionEvaluator()
        self.keys = keys
        self.console = console

    @property
    def _io(self) -> dict[str, Any]:
        return {"keys": self.keys, "console": self.console}

    # -- Entry points ------------------------------------------------------

    def resolve(self, kind: TargetKind, name: str | None = None) -> Preset:
        """Return the preset named *name*, or let the user pick one.

        Raises:
            NotFoundError: If *name* matches nothing of *kind*.
            AbortedError: If the user cancels the selector.
        """
        if name:
            return self.find_by_name(kind, name)
        return self.run_selector(kind)

    def find_by_name(self, kind: TargetKind, name: str) -> Preset:
        if name.startswith(BUILTIN_PREFIX):
            return self.library.find_builtin(kind, name[len(BUILTIN_PREFIX):])
        return self.store.find(kind, name)

    def resolve_by_extension(self, extension: str) -> PresetData:
        """Resolve a single-file request from its extension.

        Only the question manifest of the extension's template is run; no
        selector is shown.
        """
        template_dir = self.library.file_type_dir(extension)
        options = self.run_questions(template_dir)
        return PresetData(
            name=extension.lstrip("."),
            type_name=TargetKind.FILE.value,
            template_dir=template_dir,
            options=options,
        )

    def run_questions(self, template_dir: str) -> dict[str, Any]:
        """Ask the questions of *template_dir*.

        A template without a question manifest has nothing to ask and
        yields an empty answer set.
        """
        manifest = self.library.load_question_manifest(template_dir)
        if manifest is None:
            return {}
        return QuestionFlow(manifest, evaluator=self.evaluator, **self._io).run()

    # -- Interactive selection ---------------------------------------------

    def run_selector(self, kind: TargetKind) -> Preset:
        candidates: list[Preset] = [*self.store.items_of_kind(kind), *self.library.find_builtins(kind)]
        items = _picker_items(candidates)
        items.append(ListItem(text=MANUAL_SELECT_LABEL))

        result = picker(question="Pick a preset", items=items, **self._io).run()
        if not result.done:
            raise AbortedError()

        selected = result.value_as_item()
        if selected is None:
            raise AbortedError()
        if selected.index == len(items) - 1:
            return self.run_manual_config(kind)
        return selected.data

    def run_manual_config(self, kind: TargetKind) -> PresetData:
        """Pick a built-in template, answer its questions, optionally save."""
        builtins = self.library.find_builtins(kind)
        if not builtins:
            raise NotFoundError(f"no built-in template of kind '{kind.value}'")

        result = picker(
            question="Pick an item to use:", items=_picker_items(builtins), **self._io
        ).run()
        selected = result.value_as_item()
        if not result.done or selected is None:
            raise AbortedError()

        chosen = selected.data
        preset = PresetData(
            name=chosen.name,
            type_name=kind.value,
            template_dir=chosen.template_dir,
            options=self.run_questions(chosen.template_dir),
        )

        new_name = self.ask_preset_name()
        if new_name:
            preset = preset.model_copy(update={"name": new_name})
            self.store.add(preset)
            self.store.save()
            logger.debug("saved preset '%s' for '%s'", new_name, preset.template_dir)
        return preset

    def ask_preset_name(self) -> str:
        """Ask whether to save, then for a name.  Empty when declined."""
        name_validator = ValidatorChain([
            required_rule,
            not_in_rule(self.store.names(), "preset already exists"),
        ])
        flow = Flow([
            confirm("confirm", "Save for later use?", default="y", **self._io),
            text_input("name", "Enter the preset name:", validator=name_validator, **self._io),
        ])

        def on_done(widget: Widget, result: Any) -> None:
            if widget.identify() == "confirm" and not result.value_as_bool(False):
                flow.abort()
                return
            flow.default_done_handler(widget, result)

        flow.set_done_handler(on_done)
        flow.run()

        if flow.aborted:
            return ""
        answer = flow.get_result("name")
        if answer is None or not isinstance(answer.value, str):
            return ""
        return answer.value.strip()

    def ask_file_name(self) -> str:
        """Ask for the name of the file to create."""
        result = text_input(
            question="Enter the file name:",
            validator=ValidatorChain([required_rule]),
            **self._io,
        ).run()
        if not result.done:
            raise AbortedError()
        return str(result.value).strip()


def _picker_items(presets: Sequence[Preset]) -> list[ListItem]:
    return [
        ListItem(text=preset.name, description=preset.description, data=preset)
        for preset in presets
    ]
