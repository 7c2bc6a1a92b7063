"""Ad hoc flows: a fixed list of widgets run in order.

Each completed widget goes through a done handler which decides whether to
record the answer and advance, or to abort the rest of the flow.  The
default handler records and advances.  Cancelling a widget aborts the flow
without raising; an exception raised by a widget propagates immediately.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

from qtcli.prompt.result import PromptResult
from qtcli.prompt.widgets import Widget

DoneHandler = Callable[[Widget, PromptResult], None]


class Flow:
    """Runs widgets one after another and keeps their results by id."""

    def __init__(self, widgets: Iterable[Widget] = ()) -> None:
        self.widgets: list[Widget] = list(widgets)
        self.results: dict[str, PromptResult] = {}
        self.current_index = 0
        self.aborted = False
        self._on_done: DoneHandler = self.default_done_handler

    def add(self, widget: Widget) -> None:
        self.widgets.append(widget)

    def add_all(self, widgets: Iterable[Widget]) -> None:
        self.widgets.extend(widgets)

    def get_result(self, widget_id: str) -> PromptResult | None:
        return self.results.get(widget_id)

    def save_result(self, result: PromptResult) -> None:
        if result.id:
            self.results[result.id] = result

    def abort(self) -> None:
        self.aborted = True

    def set_done_handler(self, handler: DoneHandler) -> None:
        self._on_done = handler

    def default_done_handler(self, widget: Widget, result: PromptResult) -> None:
        self.save_result(result)
        self.current_index += 1

    def run(self) -> None:
        while self.current_index < len(self.widgets) and not self.aborted:
            widget = self.widgets[self.current_index]
            result = widget.run()

            if not result.done:
                self.aborted = True
                break

            before = self.current_index
            self._on_done(widget, result)
            if self.current_index == before and not self.aborted:
                # the handler neither advanced nor aborted
                self.current_index += 1
