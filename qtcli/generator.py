"""Template generation pipeline.

Turns a resolved preset and an output base name into files on disk:

1. load the template manifest of the preset's template directory;
2. evaluate every rule's visibility against the preset answers plus
   ``name``, and resolve the input and output path of each visible rule;
3. pre-flight the complete result: every input exists, no output exists,
   no output is emitted twice;
4. copy or render every input to its output.

Nothing is written unless step 3 passes for every rule.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from rich.console import Console

from qtcli.errors import (
    InputMissingError,
    OutputConflictError,
    QtCliError,
    RenderError,
)
from qtcli.expression import ExpressionEvaluator
from qtcli.library import TemplateLibrary
from qtcli.manifests import ROOT_MARKER, TargetKind, TemplateRule
from qtcli.presets import Preset
from qtcli.utils import merge, print_summary_table, write_file

logger = logging.getLogger(__name__)

LEADING_WHITESPACE = " \t\r\n"


# ---------------------------------------------------------------------------
# Render result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RenderItem:
    """One visible file rule with its resolved paths.

    ``output_path`` is relative to the directory the command runs in; for
    project templates it starts with the project directory.
    """

    rule: TemplateRule
    input_path: Path
    output_path: PurePosixPath


@dataclass
class RenderResult:
    """Every file a render produces, computed before anything is written."""

    template_dir: str
    base_dir: Path
    items: list[RenderItem] = field(default_factory=list)
    written: bool = False

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[RenderItem]:
        return iter(self.items)

    def destination(self, item: RenderItem) -> Path:
        return self.base_dir / item.output_path

    def outputs(self) -> list[str]:
        return [item.output_path.as_posix() for item in self.items]

    def print(self, out: Console | None = None) -> None:
        """Print an ``input -> output`` table of the result."""
        rows = [(item.rule.input, item.output_path.as_posix()) for item in self.items]
        print_summary_table(
            rows,
            title=f"@{self.template_dir}",
            columns=("Input", "Output"),
            out=out,
        )


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class Generator:
    """Renders built-in templates with a preset's answers.

    Args:
        library: Source of template manifests and template files.
        evaluator: Expression evaluator for visibility, output names and
            file bodies.
    """

    def __init__(
        self,
        library: TemplateLibrary,
        evaluator: ExpressionEvaluator | None = None,
    ) -> None:
        self.library = library
        self.evaluator = evaluator or ExpressionEvaluator()

    # -- Public API --------------------------------------------------------

    def render(
        self,
        preset: Preset,
        name: str,
        base_dir: Path = Path("."),
        dry_run: bool = False,
    ) -> RenderResult:
        """Generate the files of *preset* named after *name*.

        Args:
            preset: Resolved preset; its answers parametrize every rule.
            name: Output base name, injected into the answers as ``name``.
            base_dir: Directory the outputs are created under.
            dry_run: Compute and pre-flight the result without writing.

        Returns:
            The render result, with ``written`` set unless *dry_run*.

        Raises:
            RenderError: Or one of its subclasses, wrapping the first failure.
        """
        context = merge(preset.options, {"name": name})
        try:
            result = self.plan(preset, context, base_dir)
            self.check(result)
            if not dry_run:
                self.write(result, context)
        except RenderError:
            raise
        except (QtCliError, OSError, ValueError) as exc:
            raise RenderError(
                f"cannot render '@{preset.template_dir}': {exc}", cause=exc
            ) from exc
        return result

    # -- Stages ------------------------------------------------------------

    def plan(
        self, preset: Preset, context: dict[str, Any], base_dir: Path = Path(".")
    ) -> RenderResult:
        """Evaluate visibility and resolve paths for every file rule."""
        manifest = self.library.load_template_manifest(preset.template_dir)
        output_dir = PurePosixPath(".")
        if preset.kind == TargetKind.PROJECT:
            output_dir = PurePosixPath(context["name"])

        result = RenderResult(template_dir=preset.template_dir, base_dir=Path(base_dir))
        for rule in manifest.files:
            label = f"files:{rule.input}"
            if not self.evaluator.render_bool(rule.when, context, True, name=label):
                logger.debug("skipping '%s', condition not satisfied", rule.input)
                continue

            result.items.append(
                RenderItem(
                    rule=rule,
                    input_path=self._input_path(preset.template_dir, rule),
                    output_path=output_dir / self._output_name(rule, context, label),
                )
            )
        return result

    def check(self, result: RenderResult) -> None:
        """Pre-flight *result* as a whole.

        Raises:
            InputMissingError: If a template input does not exist.
            OutputConflictError: If an output exists or is emitted twice.
        """
        seen: set[str] = set()
        for item in result:
            if not item.input_path.is_file():
                raise InputMissingError(f"template file does not exist, file = '{item.input_path}'")
            output_key = posixpath.normpath(item.output_path.as_posix())
            if output_key in seen:
                raise OutputConflictError(f"output emitted twice, file = '{item.output_path}'")
            seen.add(output_key)
            if result.destination(item).exists():
                raise OutputConflictError(f"file already exists, file = '{item.output_path}'")

    def write(self, result: RenderResult, context: dict[str, Any]) -> None:
        for item in result:
            content = item.input_path.read_bytes()
            if item.rule.bypass:
                write_file(result.destination(item), content)
                continue

            file_context = merge(context, {"fileName": item.output_path.as_posix()})
            rendered = self.evaluator.render(
                content.decode("utf-8"), file_context, name=item.rule.input
            )
            write_file(result.destination(item), rendered.lstrip(LEADING_WHITESPACE))
            logger.debug("wrote '%s'", item.output_path)
        result.written = True

    # -- Helpers -----------------------------------------------------------

    def _input_path(self, template_dir: str, rule: TemplateRule) -> Path:
        if rule.is_root_relative:
            return self.library.root / rule.input[len(ROOT_MARKER):]
        return self.library.root / template_dir / rule.input

    def _output_name(self, rule: TemplateRule, context: dict[str, Any], label: str) -> str:
        if not rule.out.strip():
            return PurePosixPath(rule.input).name
        output = self.evaluator.render(rule.out, context, name=label).strip()
        if not output:
            raise RenderError(f"output name of '{rule.input}' renders empty")
        return output
