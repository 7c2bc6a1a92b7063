"""Interactive input widgets.

Every widget satisfies the :class:`Widget` protocol: ``identify()`` returns
the answer id and ``run()`` collects exactly one value, returning a
:class:`PromptResult` whose ``done`` flag is ``False`` on cancellation.

Two implementations cover the four widget kinds:

* :class:`InputPrompt` -- free text (``text_input``) and yes/no
  (``confirm``), differing only in their key handler and value builder.
* :class:`ListPrompt` -- single pick (``picker``) and multi pick
  (``choices``).

Key handling is a strategy function taking the widget and a key name and
returning ``True`` when it consumed the key.  The interrupt-to-cancel
behaviour shared by all variants lives in :func:`cancel_on_interrupt`.
Widgets can be driven one key at a time through ``handle_key``; ``run``
only adds the terminal loop around it.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Protocol

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.text import Text

from qtcli.errors import ValidationError
from qtcli.prompt import keys as k
from qtcli.prompt import styles
from qtcli.prompt.keys import KeyReader, TerminalKeys
from qtcli.prompt.result import PromptResult
from qtcli.prompt.selection import Multi, SelectionItem, Single
from qtcli.utils import console as default_console

INPUT_CHAR_LIMIT = 160
CONFIRM_CHAR_LIMIT = 1

PICKER_HELP = "Use the arrow keys to move, Enter to select."
CHOICES_HELP = "Use the space key to toggle selection, Enter key to finish."


class WidgetState(str, Enum):
    """Lifecycle of a widget."""

    EDITING = "editing"
    BROWSING = "browsing"
    DONE = "done"
    CANCELLED = "cancelled"


class Widget(Protocol):
    """Capability set shared by all widgets."""

    def identify(self) -> str: ...

    def run(self) -> PromptResult: ...


# ---------------------------------------------------------------------------
# Shared key handling
# ---------------------------------------------------------------------------


def cancel_on_interrupt(widget: "InputPrompt | ListPrompt", key: str) -> bool:
    if key == k.INTERRUPT:
        widget.state = WidgetState.CANCELLED
        return True
    return False


def _run_widget(widget: "InputPrompt | ListPrompt") -> PromptResult:
    """Drive *widget* with its key reader until it finishes."""
    reader = widget.keys or TerminalKeys()
    out = widget.console or default_console
    widget.reset()

    with Live(
        widget.view(), console=out, transient=True, auto_refresh=False
    ) as live:
        while not widget.finished:
            widget.handle_key(reader.read())
            live.update(widget.view(), refresh=True)

    if widget.state is WidgetState.DONE:
        out.print(widget.view())
    return widget.result()


# ---------------------------------------------------------------------------
# Text and confirm
# ---------------------------------------------------------------------------

InputKeyHandler = Callable[["InputPrompt", str], bool]


def input_key_handler(widget: "InputPrompt", key: str) -> bool:
    """Enter commits a valid buffer, interrupt cancels."""
    if cancel_on_interrupt(widget, key):
        return True
    if key == k.ENTER:
        widget.submit()
        return True
    return False


def confirm_key_handler(widget: "InputPrompt", key: str) -> bool:
    """``y``/``n`` commit immediately; Enter commits the default or a typed yes/no."""
    if cancel_on_interrupt(widget, key):
        return True
    if key in ("y", "Y"):
        widget.commit("y")
        return True
    if key in ("n", "N"):
        widget.commit("n")
        return True
    if key == k.ENTER:
        typed = widget.buffer.strip().lower()
        answer = ""
        if not typed:
            answer = widget.default.strip().lower()
        elif typed in ("yes", "no"):
            answer = typed
        if answer:
            widget.commit(answer)
        return True
    return False


def _text_value(raw: str) -> Any:
    return raw


def _text_summary(raw: str) -> str:
    return raw


def _confirm_value(raw: str) -> Any:
    return raw.strip().lower().startswith("y")


def _confirm_summary(raw: str) -> str:
    answer = raw.strip().lower()
    if answer.startswith("y"):
        return "Yes"
    if answer.startswith("n"):
        return "No"
    return ""


class InputPrompt:
    """Single-line text entry.

    ``validator`` is called with the buffer on every edit and on Enter; a
    ``ValidationError`` it raises is shown inline and blocks completion.
    """

    def __init__(
        self,
        widget_id: str = "",
        question: str = "",
        description: str = "",
        help: str = "",
        value: str = "",
        default: str = "",
        validator: Callable[[str], None] | None = None,
        *,
        key_handler: InputKeyHandler = input_key_handler,
        char_limit: int = INPUT_CHAR_LIMIT,
        value_builder: Callable[[str], Any] = _text_value,
        summary_builder: Callable[[str], str] = _text_summary,
        keys: KeyReader | None = None,
        console: Console | None = None,
    ) -> None:
        self.widget_id = widget_id
        self.question = question
        self.description = description
        self.help = help
        self.initial_value = value
        self.default = default
        self.validator = validator
        self.key_handler = key_handler
        self.char_limit = char_limit
        self.value_builder = value_builder
        self.summary_builder = summary_builder
        self.keys = keys
        self.console = console
        self.reset()

    # -- Widget protocol ---------------------------------------------------

    def identify(self) -> str:
        return self.widget_id

    def run(self) -> PromptResult:
        return _run_widget(self)

    # -- State machine -----------------------------------------------------

    def reset(self) -> None:
        self.state = WidgetState.EDITING
        self.buffer = self.initial_value[: self.char_limit]
        self.error: str | None = None

    @property
    def finished(self) -> bool:
        return self.state in (WidgetState.DONE, WidgetState.CANCELLED)

    def handle_key(self, key: str) -> WidgetState:
        """Apply one key press and return the resulting state."""
        if self.finished:
            return self.state
        if not self.key_handler(self, key):
            self._edit(key)
        return self.state

    def submit(self) -> None:
        """Complete with the current buffer if it passes validation."""
        if self.validate():
            self.state = WidgetState.DONE

    def commit(self, text: str) -> None:
        """Replace the buffer and complete without validation."""
        self.buffer = text
        self.error = None
        self.state = WidgetState.DONE

    def validate(self) -> bool:
        if self.validator is None:
            self.error = None
            return True
        try:
            self.validator(self.buffer)
        except ValidationError as exc:
            self.error = str(exc)
            return False
        self.error = None
        return True

    def result(self) -> PromptResult:
        return PromptResult(
            id=self.widget_id,
            value=self.value_builder(self.buffer),
            done=self.state is WidgetState.DONE,
        )

    def _edit(self, key: str) -> None:
        if key == k.BACKSPACE:
            self.buffer = self.buffer[:-1]
        elif key == k.CLEAR_LINE:
            self.buffer = ""
        elif len(key) == 1 and key.isprintable():
            if len(self.buffer) >= self.char_limit:
                return
            self.buffer += key
        else:
            return
        self.validate()

    # -- Rendering ---------------------------------------------------------

    def view(self) -> RenderableType:
        if self.state is WidgetState.DONE:
            return Text.assemble(
                (styles.MARKING_DONE, styles.MARKER),
                (self.question, styles.QUESTION),
                " ",
                (self.summary_builder(self.buffer), styles.INPUT_DONE),
            )

        line = Text.assemble(
            (styles.MARKING_QUESTION, styles.MARKER),
            (self.question, styles.QUESTION),
        )
        if self.description:
            line.append(f" ({self.description})", styles.DESCRIPTION)
        line.append(" ")
        line.append(self.buffer, styles.INPUT_ACTIVE)

        parts: list[RenderableType] = [line]
        if self.help:
            parts.append(Text("  " + self.help, styles.HELP))
        if self.error:
            message = self.error[:1].upper() + self.error[1:]
            parts.append(Text("  " + styles.MARKING_ERROR + message, styles.ERROR))
        return Group(*parts)


def text_input(
    widget_id: str = "",
    question: str = "",
    description: str = "",
    value: str = "",
    validator: Callable[[str], None] | None = None,
    help: str = "",
    **io: Any,
) -> InputPrompt:
    """Build a free-text widget."""
    return InputPrompt(
        widget_id=widget_id,
        question=question,
        description=description,
        help=help,
        value=value,
        validator=validator,
        **io,
    )


def confirm(
    widget_id: str = "",
    question: str = "",
    default: str = "",
    description: str | None = None,
    **io: Any,
) -> InputPrompt:
    """Build a yes/no widget whose value is a boolean.

    *default* is ``"y"``, ``"n"`` or empty (Enter on an empty buffer is
    then ignored).  The description defaults to ``Y/n`` or ``y/N``.
    """
    if description is None:
        description = "Y/n" if default.lower().startswith("y") else "y/N"
    return InputPrompt(
        widget_id=widget_id,
        question=question,
        description=description,
        default=default,
        key_handler=confirm_key_handler,
        char_limit=CONFIRM_CHAR_LIMIT,
        value_builder=_confirm_value,
        summary_builder=_confirm_summary,
        **io,
    )


# ---------------------------------------------------------------------------
# Single and multi pick
# ---------------------------------------------------------------------------


@dataclass
class ListItem:
    """One pick-list entry.  An empty ``text`` marks a separator."""

    text: str
    description: str = ""
    data: Any = None
    checked: bool = False

    @property
    def is_separator(self) -> bool:
        return not self.text


def separator() -> ListItem:
    return ListItem(text="")


ListKeyHandler = Callable[["ListPrompt", str], bool]


def _move_highlight(widget: "ListPrompt", key: str) -> bool:
    if key in (k.UP, "k"):
        widget.index = max(widget.index - 1, 0)
        return True
    if key in (k.DOWN, "j"):
        widget.index = min(widget.index + 1, max(len(widget.items) - 1, 0))
        return True
    return False


def _cancel_list(widget: "ListPrompt", key: str) -> bool:
    if key == "q":
        widget.state = WidgetState.CANCELLED
        return True
    return cancel_on_interrupt(widget, key)


def picker_key_handler(widget: "ListPrompt", key: str) -> bool:
    """Arrows move, Enter commits the highlighted non-separator item."""
    if _cancel_list(widget, key) or _move_highlight(widget, key):
        return True
    if key == k.ENTER:
        item = widget.current
        if item is not None and not item.is_separator:
            widget.selection = Single(
                SelectionItem(index=widget.index, text=item.text, data=item.data)
            )
            widget.state = WidgetState.DONE
        return True
    return False


def choices_key_handler(widget: "ListPrompt", key: str) -> bool:
    """Space toggles the highlighted item, Enter commits every checked item."""
    if _cancel_list(widget, key) or _move_highlight(widget, key):
        return True
    if key == k.SPACE:
        item = widget.current
        if item is not None and not item.is_separator:
            item.checked = not item.checked
        return True
    if key == k.ENTER:
        widget.selection = Multi(tuple(widget.checked_items()))
        widget.state = WidgetState.DONE
        return True
    return False


class ListPrompt:
    """Pick list, single or multi select.

    The items passed in are copied, so toggling never alters the caller's
    list.
    """

    def __init__(
        self,
        widget_id: str = "",
        question: str = "",
        items: Iterable[ListItem] = (),
        help: str = "",
        init_index: int = 0,
        multi_select: bool = False,
        *,
        key_handler: ListKeyHandler | None = None,
        keys: KeyReader | None = None,
        console: Console | None = None,
    ) -> None:
        self.widget_id = widget_id
        self.question = question
        self.items: list[ListItem] = [replace(item) for item in items]
        self.help = help
        self.init_index = init_index
        self.multi_select = multi_select
        self.key_handler = key_handler or (
            choices_key_handler if multi_select else picker_key_handler
        )
        self.keys = keys
        self.console = console
        self.reset()

    # -- Widget protocol ---------------------------------------------------

    def identify(self) -> str:
        return self.widget_id

    def run(self) -> PromptResult:
        return _run_widget(self)

    # -- State machine -----------------------------------------------------

    def reset(self) -> None:
        self.state = WidgetState.BROWSING
        self.index = self.init_index if 0 <= self.init_index < len(self.items) else 0
        self.selection: Single | Multi = Multi() if self.multi_select else Single()

    @property
    def finished(self) -> bool:
        return self.state in (WidgetState.DONE, WidgetState.CANCELLED)

    @property
    def current(self) -> ListItem | None:
        if 0 <= self.index < len(self.items):
            return self.items[self.index]
        return None

    def handle_key(self, key: str) -> WidgetState:
        """Apply one key press and return the resulting state."""
        if not self.finished:
            self.key_handler(self, key)
        return self.state

    def set_checked(self, index: int, checked: bool) -> None:
        if 0 <= index < len(self.items):
            self.items[index].checked = checked

    def set_checked_all(self, checked: bool) -> None:
        for item in self.items:
            item.checked = checked

    def checked_items(self) -> list[SelectionItem]:
        return [
            SelectionItem(index=index, text=item.text, data=item.data)
            for index, item in enumerate(self.items)
            if item.checked and not item.is_separator
        ]

    def result(self) -> PromptResult:
        return PromptResult(
            id=self.widget_id,
            value=self.selection,
            done=self.state is WidgetState.DONE,
        )

    # -- Rendering ---------------------------------------------------------

    def view(self) -> RenderableType:
        if self.state is WidgetState.DONE:
            return Text.assemble(
                (styles.MARKING_DONE, styles.MARKER),
                (self.question, styles.QUESTION),
                " ",
                (str(self.selection), styles.INPUT_DONE),
            )

        parts: list[RenderableType] = [
            Text.assemble(
                (styles.MARKING_QUESTION, styles.MARKER),
                (self.question, styles.QUESTION),
            ),
            Text(""),
        ]
        parts.extend(self._render_item(index, item) for index, item in enumerate(self.items))
        if self.help:
            parts.append(Text(""))
            parts.append(Text("  " + self.help, styles.HELP))
        return Group(*parts)

    def _render_item(self, index: int, item: ListItem) -> Text:
        if item.is_separator:
            return Text(
                "    " + styles.MARKING_SEPARATOR_CHAR * styles.SEPARATOR_WIDTH,
                styles.ITEM_SEPARATOR,
            )

        style = styles.ITEM_NORMAL
        check = ""
        if self.multi_select:
            if item.checked:
                check = styles.MARKING_CHECKBOX_CHECKED
                style = styles.ITEM_SELECTED
            else:
                check = styles.MARKING_CHECKBOX_EMPTY

        if index == self.index:
            line = Text("  " + styles.MARKING_ITEM_ARROW + check + item.text, styles.ITEM_CURRENT)
        else:
            line = Text("    " + check + item.text, style)

        if item.description:
            line.append(f" ({item.description})", styles.DESCRIPTION)
        return line


def picker(
    widget_id: str = "",
    question: str = "",
    items: Iterable[ListItem] = (),
    init_index: int = 0,
    **io: Any,
) -> ListPrompt:
    """Build a single-pick widget."""
    return ListPrompt(
        widget_id=widget_id,
        question=question,
        items=items,
        help=PICKER_HELP,
        init_index=init_index,
        multi_select=False,
        **io,
    )


def choices(
    widget_id: str = "",
    question: str = "",
    items: Iterable[ListItem] = (),
    **io: Any,
) -> ListPrompt:
    """Build a multi-pick widget."""
    return ListPrompt(
        widget_id=widget_id,
        question=question,
        items=items,
        help=CHOICES_HELP,
        multi_select=True,
        **io,
    )
