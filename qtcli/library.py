"""Built-in template discovery.

Every directory under the template asset root that contains a template
manifest is a built-in template.  Its path relative to the root is its
public identifier: ``@projects/cpp/qwidget`` names the directory
``<root>/projects/cpp/qwidget``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from qtcli.config import Settings
from qtcli.errors import ManifestError, ManifestNotFoundError, NotFoundError
from qtcli.manifests import (
    QuestionManifest,
    TargetKind,
    TemplateManifest,
    load_question_manifest,
    load_template_manifest,
)
from qtcli.presets import PresetData

logger = logging.getLogger(__name__)

BUILTIN_PREFIX = "@"


class BuiltinPreset:
    """A built-in template used as a preset.

    Its answers are not stored: :attr:`options` re-reads the template's
    question manifest and returns the static defaults each time.
    """

    def __init__(self, library: "TemplateLibrary", kind: TargetKind, template_dir: str) -> None:
        self.library = library
        self._kind = kind
        self.template_dir = template_dir
        self.name = f"[Default] {BUILTIN_PREFIX}{template_dir}"

    def __repr__(self) -> str:
        return f"BuiltinPreset({self.template_dir!r}, kind={self._kind.value!r})"

    @property
    def kind(self) -> TargetKind:
        return self._kind

    @property
    def description(self) -> str:
        return ""

    @property
    def options(self) -> dict[str, Any]:
        return self.library.default_answers(self.template_dir)

    def to_preset_data(self, options: dict[str, Any] | None = None) -> PresetData:
        return PresetData(
            name=self.name,
            type_name=self.kind.value,
            template_dir=self.template_dir,
            options=self.options if options is None else options,
        )


class TemplateLibrary:
    """Read-only view of the template asset tree."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.root = Path(settings.templates_dir)

    # -- Paths -------------------------------------------------------------

    def template_manifest_path(self, template_dir: str) -> Path:
        return self.root / template_dir / self.settings.template_file_name

    def question_manifest_path(self, template_dir: str) -> Path:
        return self.root / template_dir / self.settings.prompt_file_name

    # -- Manifests ---------------------------------------------------------

    def load_template_manifest(self, template_dir: str) -> TemplateManifest:
        """Load the file rules of *template_dir*.

        Raises:
            ManifestNotFoundError: If the directory has no template manifest.
        """
        if not template_dir:
            raise ManifestNotFoundError("cannot determine a template manifest path")
        path = self.template_manifest_path(template_dir)
        if not path.is_file():
            raise ManifestNotFoundError(
                f"template definition does not exist, dir = '{template_dir}'"
            )
        return load_template_manifest(path)

    def load_question_manifest(self, template_dir: str) -> QuestionManifest | None:
        """Load the questions of *template_dir*, or ``None`` when it asks none."""
        path = self.question_manifest_path(template_dir)
        if not path.is_file():
            return None
        return load_question_manifest(path)

    def default_answers(self, template_dir: str) -> dict[str, Any]:
        manifest = self.load_question_manifest(template_dir)
        if manifest is None:
            return {}
        return manifest.extract_defaults()

    # -- Discovery ---------------------------------------------------------

    def discover(self) -> list[tuple[str, TargetKind]]:
        """Return ``(template_dir, kind)`` for every built-in template."""
        found: list[tuple[str, TargetKind]] = []
        if not self.root.is_dir():
            return found

        for manifest_path in sorted(self.root.rglob(self.settings.template_file_name)):
            directory = manifest_path.parent
            if directory == self.root:
                continue
            try:
                manifest = load_template_manifest(manifest_path)
            except ManifestError as exc:
                logger.warning("ignoring template '%s': %s", directory, exc)
                continue
            found.append((directory.relative_to(self.root).as_posix(), manifest.kind))
        return found

    def find_builtins(self, kind: TargetKind) -> list[BuiltinPreset]:
        return [
            BuiltinPreset(self, found_kind, template_dir)
            for template_dir, found_kind in self.discover()
            if found_kind == kind
        ]

    def all_builtins(self) -> list[BuiltinPreset]:
        return self.find_builtins(TargetKind.PROJECT) + self.find_builtins(TargetKind.FILE)

    def find_builtin(self, kind: TargetKind, template_dir: str) -> BuiltinPreset:
        for preset in self.find_builtins(kind):
            if preset.template_dir == template_dir:
                return preset
        raise NotFoundError(f"cannot find default preset, given = '{template_dir}'")

    def find_builtin_any(self, template_dir: str) -> BuiltinPreset:
        for preset in self.all_builtins():
            if preset.template_dir == template_dir:
                return preset
        raise NotFoundError(f"cannot find the given preset, name = '@{template_dir}'")

    def has_file_type(self, extension: str) -> bool:
        ext_name = extension.lstrip(".")
        if not ext_name:
            return False
        return self.template_manifest_path(f"{self.settings.file_types_dir}/{ext_name}").is_file()

    def file_type_dir(self, extension: str) -> str:
        """Return the template directory registered for a file extension.

        Args:
            extension: Extension with or without its leading dot.

        Raises:
            NotFoundError: If no template exists for the extension.
        """
        if not self.has_file_type(extension):
            raise NotFoundError(f"not supported file format, given = '{extension}'")
        return f"{self.settings.file_types_dir}/{extension.lstrip('.')}"
