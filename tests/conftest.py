"""Shared pytest fixtures for the qtcli test suite.

Provides reusable fixtures for:
- A small template asset tree in a temporary directory
- Settings, template library and preset store bound to that tree
- Expression evaluators with a fake environment
- Plain rich consoles that capture widget output
"""

from __future__ import annotations

import io
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest
from rich.console import Console

from qtcli.config import Settings
from qtcli.expression import ExpressionEvaluator, default_functions
from qtcli.library import TemplateLibrary
from qtcli.presets import PresetStore


# ---------------------------------------------------------------------------
# Template tree
# ---------------------------------------------------------------------------

DEMO_TEMPLATES_YML = """\
version: "1"
type: project
files:
  - in: main.cpp.tmpl
  - in: app.h
    out: "{{ className | lower }}.h"
  - in: notes.txt
    when: "{{ withNotes }}"
  - in: raw.txt
    bypass: true
  - in: "@/shared/LICENSE"
    out: LICENSE
    bypass: true
"""

DEMO_PROMPT_YML = """\
version: "1"
steps:
  - id: className
    type: input
    question: "Class name:"
    value: App
    default: App
    rules:
      - required: true
  - id: withNotes
    type: confirm
    question: "Add notes?"
    default: false
"""

HEADER_TEMPLATES_YML = """\
version: "1"
type: file
files:
  - in: header.h
    out: "{{ name }}.h"
"""

HEADER_PROMPT_YML = """\
version: "1"
steps:
  - id: usePragmaOnce
    type: confirm
    question: "Use #pragma once?"
    default: false
"""


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write ``{relative path: text}`` under *root* and return *root*."""
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def make_tree() -> Callable[[Path, dict[str, str]], Path]:
    return write_tree


@pytest.fixture
def template_root(tmp_path: Path) -> Path:
    """A template asset root with one project and one file template.

    ``@projects/demo`` produces ``main.cpp.tmpl``, ``<class>.h``, an
    optional ``notes.txt``, a bypassed ``raw.txt`` and a root-relative
    ``LICENSE``.  ``@types/h`` produces ``<name>.h``.
    """
    return write_tree(
        tmp_path / "assets",
        {
            "projects/demo/templates.yml": DEMO_TEMPLATES_YML,
            "projects/demo/prompt.yml": DEMO_PROMPT_YML,
            "projects/demo/main.cpp.tmpl": textwrap.dedent(
                """\


                #include "{{ className | lower }}.h"
                // {{ fileName }}
                int main() { return 0; }
                """
            ),
            "projects/demo/app.h": "class {{ className }} {};\n",
            "projects/demo/notes.txt": "notes for {{ name }}\n",
            "projects/demo/raw.txt": "{{ not rendered }}\n",
            "types/h/templates.yml": HEADER_TEMPLATES_YML,
            "types/h/prompt.yml": HEADER_PROMPT_YML,
            "types/h/header.h": (
                "{% if usePragmaOnce %}#pragma once{% else %}"
                "#ifndef {{ name | upper }}_H{% endif %}\n"
            ),
            "shared/LICENSE": "MIT\n",
        },
    )


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(template_root: Path, tmp_path: Path) -> Settings:
    return Settings(
        templates_dir=template_root,
        preset_file=tmp_path / "home" / ".qtcli.preset",
    )


@pytest.fixture
def library(settings: Settings) -> TemplateLibrary:
    return TemplateLibrary(settings)


@pytest.fixture
def store(settings: Settings) -> PresetStore:
    return PresetStore.open(settings.preset_file)


@pytest.fixture
def packaged_settings(tmp_path: Path) -> Settings:
    """Settings using the built-in templates shipped with the package."""
    return Settings(preset_file=tmp_path / "home" / ".qtcli.preset")


@pytest.fixture
def fake_env() -> dict[str, str]:
    return {"QT_DIR": "/opt/qt", "EMPTY": ""}


@pytest.fixture
def evaluator(fake_env: dict[str, str]) -> ExpressionEvaluator:
    return ExpressionEvaluator(default_functions(getenv=fake_env.get))


@pytest.fixture
def console() -> Console:
    """A console writing to memory; read it back with ``console.file.getvalue()``."""
    return Console(file=io.StringIO(), width=100, color_system=None)
