"""Values produced by the pick widgets.

A single pick commits a :class:`Single` holding zero or one item; a multi
pick commits a :class:`Multi` holding the checked items in list order.
Both convert to the canonical string form substituted into expressions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

SELECTION_DELIMITER = ";"


@dataclass(frozen=True)
class SelectionItem:
    """One committed list entry: its position, label and opaque payload."""

    index: int
    text: str
    data: Any = None

    def __str__(self) -> str:
        if isinstance(self.data, str):
            return self.data
        return self.text

    def data_or_text(self) -> Any:
        """Return the payload when one is set, otherwise the label."""
        if self.data is not None:
            return self.data
        return self.text


@dataclass(frozen=True)
class Single:
    """Result of a single-pick widget."""

    item: SelectionItem | None = None

    def __str__(self) -> str:
        return "" if self.item is None else str(self.item)

    def normalized(self) -> Any:
        return "" if self.item is None else self.item.data_or_text()


@dataclass(frozen=True)
class Multi:
    """Result of a multi-pick widget."""

    items: tuple[SelectionItem, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return SELECTION_DELIMITER.join(str(item) for item in self.items)

    def __len__(self) -> int:
        return len(self.items)

    def normalized(self) -> str:
        return str(self)


Selection = Union[Single, Multi]
