"""Interactive prompting for qtcli.

Widgets collect one value each; flows chain them.  A manifest-driven
:class:`QuestionFlow` asks the questions of a template's ``prompt.yml``,
while an ad hoc :class:`Flow` runs a hand-built list of widgets.

Quick usage::

    from qtcli.prompt import Flow, confirm, text_input

    flow = Flow([
        confirm("save", "Save for later use?", default="y"),
        text_input("name", "Enter the preset name:"),
    ])
    flow.run()
"""

from qtcli.prompt.flow import Flow
from qtcli.prompt.keys import ScriptedKeys, TerminalKeys
from qtcli.prompt.questions import QuestionFlow, run_questions
from qtcli.prompt.result import PromptResult
from qtcli.prompt.selection import Multi, SelectionItem, Single
from qtcli.prompt.widgets import (
    InputPrompt,
    ListItem,
    ListPrompt,
    Widget,
    WidgetState,
    choices,
    confirm,
    picker,
    separator,
    text_input,
)

__all__ = [
    "Flow",
    "InputPrompt",
    "ListItem",
    "ListPrompt",
    "Multi",
    "PromptResult",
    "QuestionFlow",
    "ScriptedKeys",
    "SelectionItem",
    "Single",
    "TerminalKeys",
    "Widget",
    "WidgetState",
    "choices",
    "confirm",
    "picker",
    "run_questions",
    "separator",
    "text_input",
]
