"""The value a widget returns when it finishes running."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from qtcli.prompt.selection import Multi, SelectionItem, Single
from qtcli.utils import to_bool


@dataclass
class PromptResult:
    """Outcome of one widget run.

    ``done`` is ``False`` when the user cancelled; ``value`` is then
    whatever the widget held at the time and must not be used.
    """

    id: str
    value: Any
    done: bool

    def value_normalized(self) -> Any:
        """Value as stored in an answer set.

        Single picks become their payload-or-label, multi picks their
        joined canonical string; other values pass through.
        """
        if isinstance(self.value, (Single, Multi)):
            return self.value.normalized()
        return self.value

    def value_as_bool(self, default: bool = False) -> bool:
        return to_bool(self.value, default)

    def value_as_item(self) -> SelectionItem | None:
        """Return the picked item of a single-pick result, if any."""
        if isinstance(self.value, Single):
            return self.value.item
        return None
