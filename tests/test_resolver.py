"""Tests for preset resolution.

Covers:
- Explicit names: ``@dir`` built-ins and user presets
- The interactive selector and its manual-configuration entry
- Saving a manually configured preset (and declining to)
- Resolution by file extension
"""

from __future__ import annotations

import pytest

from qtcli.errors import AbortedError, NotFoundError
from qtcli.library import BuiltinPreset
from qtcli.manifests import TargetKind
from qtcli.presets import PresetData
from qtcli.prompt import keys as k
from qtcli.prompt.keys import ScriptedKeys
from qtcli.resolver import PresetResolver

pytestmark = pytest.mark.unit


@pytest.fixture
def user_preset(store) -> PresetData:
    data = PresetData(
        name="mine", type_name="project", template_dir="projects/demo",
        options={"className": "Mine", "withNotes": True},
    )
    store.add(data)
    return data


def resolver_for(store, library, console, *keys: str) -> PresetResolver:
    return PresetResolver(store, library, keys=ScriptedKeys(*keys), console=console)


# ---------------------------------------------------------------------------
# Explicit names
# ---------------------------------------------------------------------------


class TestExplicitName:
    def test_builtin_marker(self, store, library, console):
        found = resolver_for(store, library, console).resolve(TargetKind.PROJECT, "@projects/demo")
        assert isinstance(found, BuiltinPreset)
        assert found.options == {"className": "App", "withNotes": False}

    def test_unknown_builtin(self, store, library, console):
        with pytest.raises(NotFoundError):
            resolver_for(store, library, console).resolve(TargetKind.PROJECT, "@widgets")

    def test_builtin_of_other_kind(self, store, library, console):
        with pytest.raises(NotFoundError):
            resolver_for(store, library, console).resolve(TargetKind.PROJECT, "@types/h")

    def test_user_preset(self, store, library, console, user_preset):
        found = resolver_for(store, library, console).resolve(TargetKind.PROJECT, "mine")
        assert found is user_preset

    def test_unknown_user_preset(self, store, library, console):
        with pytest.raises(NotFoundError, match="given = 'nobody'"):
            resolver_for(store, library, console).resolve(TargetKind.PROJECT, "nobody")


# ---------------------------------------------------------------------------
# Selector
# ---------------------------------------------------------------------------


class TestSelector:
    def test_cancel(self, store, library, console, user_preset):
        resolver = resolver_for(store, library, console, "q")
        with pytest.raises(AbortedError):
            resolver.resolve(TargetKind.PROJECT)

    def test_pick_user_preset(self, store, library, console, user_preset):
        found = resolver_for(store, library, console, k.ENTER).resolve(TargetKind.PROJECT)
        assert found is user_preset
        assert "Pick a preset mine" in console.file.getvalue()

    def test_pick_builtin(self, store, library, console, user_preset):
        found = resolver_for(store, library, console, k.DOWN, k.ENTER).resolve(TargetKind.PROJECT)
        assert isinstance(found, BuiltinPreset)
        assert found.template_dir == "projects/demo"


# ---------------------------------------------------------------------------
# Manual configuration
# ---------------------------------------------------------------------------


class TestManualConfig:
    def test_answers_without_saving(self, store, library, console):
        keys = (
            k.DOWN, k.ENTER,                    # sentinel
            k.ENTER,                            # projects/demo
            k.CLEAR_LINE, "Dialog", k.ENTER,    # className
            "y",                                # withNotes
            "n",                                # save for later use?
        )
        found = resolver_for(store, library, console, *keys).resolve(TargetKind.PROJECT)

        assert isinstance(found, PresetData)
        assert found.template_dir == "projects/demo"
        assert found.kind is TargetKind.PROJECT
        assert found.options == {"className": "Dialog", "withNotes": True}
        assert len(store) == 0

    def test_saves_named_preset(self, store, library, console):
        keys = (k.DOWN, k.ENTER, k.ENTER, k.ENTER, "n", k.ENTER, "fresh", k.ENTER)
        found = resolver_for(store, library, console, *keys).resolve(TargetKind.PROJECT)

        assert found.name == "fresh"
        saved = type(store).open(store.path).find(TargetKind.PROJECT, "fresh")
        assert saved.options == {"className": "App", "withNotes": False}

    def test_name_must_be_new(self, store, library, console, user_preset):
        keys = (
            k.DOWN, k.DOWN, k.ENTER, k.ENTER, k.ENTER, "n",
            k.ENTER,                      # save: default yes
            "mine", k.ENTER,              # rejected, already taken
            k.CLEAR_LINE, "other", k.ENTER,
        )
        found = resolver_for(store, library, console, *keys).resolve(TargetKind.PROJECT)
        assert found.name == "other"
        assert store.names() == ["mine", "other"]

    def test_cancelled_questions_abort(self, store, library, console):
        keys = (k.DOWN, k.ENTER, k.ENTER, k.INTERRUPT)
        with pytest.raises(AbortedError):
            resolver_for(store, library, console, *keys).resolve(TargetKind.PROJECT)

    def test_cancelled_save_keeps_answers(self, store, library, console):
        keys = (k.DOWN, k.ENTER, k.ENTER, k.ENTER, "n", k.INTERRUPT)
        found = resolver_for(store, library, console, *keys).resolve(TargetKind.PROJECT)
        assert found.options == {"className": "App", "withNotes": False}
        assert len(store) == 0

    def test_no_builtins_of_kind(self, store, library, console):
        (library.root / "types" / "h" / "templates.yml").unlink()
        resolver = resolver_for(store, library, console, k.ENTER)
        with pytest.raises(NotFoundError):
            resolver.resolve(TargetKind.FILE)


# ---------------------------------------------------------------------------
# Extension shortcut and helpers
# ---------------------------------------------------------------------------


class TestByExtension:
    def test_runs_only_the_type_questions(self, store, library, console):
        found = resolver_for(store, library, console, "y").resolve_by_extension(".h")
        assert found.template_dir == "types/h"
        assert found.kind is TargetKind.FILE
        assert found.options == {"usePragmaOnce": True}

    def test_unsupported_extension(self, store, library, console):
        with pytest.raises(NotFoundError):
            resolver_for(store, library, console).resolve_by_extension(".txt")

    def test_template_without_questions(self, store, library, console, make_tree):
        make_tree(library.root, {"types/txt/templates.yml": "type: file\nfiles: []\n"})
        found = resolver_for(store, library, console).resolve_by_extension("txt")
        assert found.options == {}


class TestAskFileName:
    def test_required(self, store, library, console):
        resolver = resolver_for(store, library, console, k.ENTER, "main.cpp", k.ENTER)
        assert resolver.ask_file_name() == "main.cpp"

    def test_cancel(self, store, library, console):
        with pytest.raises(AbortedError):
            resolver_for(store, library, console, k.INTERRUPT).ask_file_name()
