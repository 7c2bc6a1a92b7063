"""User presets and their on-disk store.

A preset binds a template directory to a set of answers.  User presets are
saved in one YAML file in the home directory; the whole file is read when
the store is opened and rewritten on every explicit :meth:`PresetStore.save`.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Protocol

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field

from qtcli.errors import NotFoundError, PersistenceError, PresetExistsError
from qtcli.manifests import TargetKind

logger = logging.getLogger(__name__)

STORE_VERSION = "1"


class Preset(Protocol):
    """Anything the generator can render: a template directory plus answers."""

    name: str
    template_dir: str

    @property
    def kind(self) -> TargetKind: ...

    @property
    def description(self) -> str: ...

    @property
    def options(self) -> dict[str, Any]: ...


class PresetData(BaseModel):
    """A preset with a frozen answer set, as stored in the preset file."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type_name: str = Field(default=TargetKind.FILE.value, alias="type")
    template_dir: str = Field(..., alias="template")
    options: dict[str, Any] = Field(default_factory=dict)

    @property
    def kind(self) -> TargetKind:
        return TargetKind.from_string(self.type_name)

    @property
    def description(self) -> str:
        return self.template_dir

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.model_dump(by_alias=True), sort_keys=False, allow_unicode=True
        )


class PresetFile(BaseModel):
    """Layout of the preset store file."""

    version: str = STORE_VERSION
    items: list[PresetData] = Field(default_factory=list)


class PresetStore:
    """The user preset store.

    Constructed once per process and passed to whoever needs it.  Mutating
    methods only change memory; callers persist with :meth:`save`.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.version = STORE_VERSION
        self.items: list[PresetData] = []

    @classmethod
    def open(cls, path: Path) -> "PresetStore":
        """Load the store at *path*, creating an empty one when missing."""
        store = cls(path)
        if not store.path.exists():
            store.save()
        store.load()
        return store

    # -- Persistence -------------------------------------------------------

    def load(self) -> None:
        logger.debug("reading user presets, file = '%s'", self.path)
        try:
            raw = self.path.read_text(encoding="utf-8")
            contents = PresetFile.model_validate(yaml.safe_load(raw) or {})
        except (OSError, yaml.YAMLError, pydantic.ValidationError) as exc:
            raise PersistenceError(f"cannot read presets from '{self.path}': {exc}") from exc

        self.version = contents.version
        self.items = list(contents.items)

    def save(self) -> None:
        """Rewrite the store file as a whole.

        The new contents go to a sibling temporary file first, so a failed
        write leaves the previous file untouched.
        """
        contents = PresetFile(version=self.version, items=self.items)
        text = yaml.safe_dump(
            contents.model_dump(by_alias=True), sort_keys=False, allow_unicode=True
        )
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(text, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as exc:
            if tmp.exists():
                tmp.unlink()
            raise PersistenceError(f"cannot save presets to '{self.path}': {exc}") from exc
        logger.debug("saved %d user preset(s) to '%s'", len(self.items), self.path)

    # -- Queries -----------------------------------------------------------

    def __len__(self) -> int:
        return len(self.items)

    def names(self) -> list[str]:
        return [item.name for item in self.items]

    def contains(self, name: str) -> bool:
        return any(item.name == name for item in self.items)

    def find_by_name(self, name: str) -> PresetData:
        for item in self.items:
            if item.name == name:
                return item
        raise NotFoundError(f"not found, given = '{name}'")

    def find(self, kind: TargetKind, name: str) -> PresetData:
        for item in self.items:
            if item.name == name and item.kind == kind:
                return item
        raise NotFoundError(f"not found, given = '{name}'")

    def items_of_kind(self, kind: TargetKind) -> list[PresetData]:
        return [item for item in self.items if item.kind == kind]

    # -- Mutations ---------------------------------------------------------

    def add(self, preset: PresetData) -> None:
        if self.contains(preset.name):
            raise PresetExistsError(f"preset already exists, given = '{preset.name}'")
        self.items.append(preset)

    def remove(self, name: str) -> None:
        for index, item in enumerate(self.items):
            if item.name == name:
                del self.items[index]
                return
        raise NotFoundError(f"not found, given = '{name}'")

    def remove_all(self) -> None:
        self.items = []

    def rename(self, old: str, new: str) -> None:
        source = self.find_by_name(old)
        if self.contains(new):
            raise PresetExistsError(f"cannot rename, already exists, given = '{new}'")
        index = self.items.index(source)
        self.items[index] = source.model_copy(update={"name": new})
