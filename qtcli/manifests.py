"""Pydantic v2 models and YAML loaders for template directories.

Each built-in template directory holds a template manifest
(``templates.yml``) listing file rules and, optionally, a question
manifest (``prompt.yml``) listing the questions whose answers parametrize
those files.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from qtcli.errors import ManifestError
from qtcli.utils import merge

logger = logging.getLogger(__name__)

WIDGET_TYPES = ("input", "confirm", "picker", "choices")


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TargetKind(str, Enum):
    """What a template produces: a whole project directory or a single file."""
    PROJECT = "project"
    FILE = "file"

    @classmethod
    def from_string(cls, value: str | None) -> "TargetKind":
        if (value or "").strip().lower() == "project":
            return cls.PROJECT
        return cls.FILE


def _as_expression(value: Any) -> Any:
    """Let manifests write ``when: false`` or ``value: 3`` unquoted."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    return value


# ---------------------------------------------------------------------------
# Question manifest
# ---------------------------------------------------------------------------

class QuestionItem(BaseModel):
    """A pick-list entry.  ``text``, ``description`` and ``checked`` are expressions."""

    text: str = ""
    data: Any = None
    description: str = ""
    checked: str = ""

    @field_validator("text", "description", "checked", mode="before")
    @classmethod
    def _expression(cls, value: Any) -> Any:
        return _as_expression(value)


class QuestionStep(BaseModel):
    """One question of a question manifest."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    widget: str = Field(default="input", alias="type")
    question: str = ""
    description: str = ""
    value: str = Field(default="", description="Initial buffer of an input widget")
    default: Any = Field(default=None, description="Static default seeded into expressions")
    when: str = ""
    items: list[QuestionItem] = Field(default_factory=list)
    rules: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("question", "description", "value", "when", mode="before")
    @classmethod
    def _expression(cls, value: Any) -> Any:
        return _as_expression(value)

    @field_validator("widget")
    @classmethod
    def _check_widget(cls, value: str) -> str:
        widget = value.strip().lower()
        if widget not in WIDGET_TYPES:
            raise ValueError(f"invalid type, given = '{value}'")
        return widget


class QuestionManifest(BaseModel):
    """Ordered questions plus constant answer blocks."""

    version: str = "1"
    steps: list[QuestionStep] = Field(default_factory=list)
    consts: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _version_str(cls, value: Any) -> str:
        return str(value)

    @model_validator(mode="after")
    def _unique_ids(self) -> "QuestionManifest":
        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"duplicate step id '{step.id}'")
            seen.add(step.id)
        return self

    def extract_defaults(self) -> dict[str, Any]:
        """Every step's static default merged with the constant blocks."""
        defaults: dict[str, Any] = {step.id: step.default for step in self.steps}
        return merge(defaults, *self.consts)

    def constants(self) -> dict[str, Any]:
        return merge({}, *self.consts)


# ---------------------------------------------------------------------------
# Template manifest
# ---------------------------------------------------------------------------

ROOT_MARKER = "@/"


class TemplateRule(BaseModel):
    """One file produced by a template."""

    model_config = ConfigDict(populate_by_name=True)

    input: str = Field(..., alias="in", min_length=1)
    out: str = ""
    when: str = ""
    bypass: bool = False

    @field_validator("out", "when", mode="before")
    @classmethod
    def _expression(cls, value: Any) -> Any:
        return _as_expression(value)

    @property
    def is_root_relative(self) -> bool:
        return self.input.startswith(ROOT_MARKER)


class TemplateManifest(BaseModel):
    """Kind tag plus the ordered file rules of one template."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = "1"
    type_name: str = Field(default="file", alias="type")
    files: list[TemplateRule] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _version_str(cls, value: Any) -> str:
        return str(value)

    @property
    def kind(self) -> TargetKind:
        return TargetKind.from_string(self.type_name)


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------

def load_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; an empty file yields an empty dict.

    Raises:
        ManifestError: If the file cannot be read or is not a YAML mapping.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
        data = yaml.safe_load(raw)
    except (OSError, yaml.YAMLError) as exc:
        raise ManifestError(f"cannot read '{path}': {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ManifestError(f"'{path}' must contain a mapping")
    return data


def load_question_manifest(path: Path) -> QuestionManifest:
    logger.debug("reading prompt definition, file = '%s'", path)
    try:
        return QuestionManifest.model_validate(load_yaml(path))
    except pydantic.ValidationError as exc:
        raise ManifestError(f"invalid question manifest '{path}': {exc}") from exc


def load_template_manifest(path: Path) -> TemplateManifest:
    logger.debug("reading template definition, file = '%s'", path)
    try:
        return TemplateManifest.model_validate(load_yaml(path))
    except pydantic.ValidationError as exc:
        raise ManifestError(f"invalid template manifest '{path}': {exc}") from exc
