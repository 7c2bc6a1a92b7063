"""Rich styles and markers shared by the widgets."""

from __future__ import annotations

from rich.style import Style

MARKING_QUESTION = "? "
MARKING_DONE = "✔ "
MARKING_ITEM_ARROW = "→ "
MARKING_CHECKBOX_EMPTY = "[ ]  "
MARKING_CHECKBOX_CHECKED = "[x]  "
MARKING_SEPARATOR_CHAR = "─"
MARKING_ERROR = "! "

SEPARATOR_WIDTH = 30

MARKER = Style(color="#31be25")
QUESTION = Style(bold=True)
DESCRIPTION = Style(dim=True)
INPUT_DONE = Style(color="#00aaaa")
INPUT_ACTIVE = Style(color="#00aaaa")
HELP = Style(dim=True)
ERROR = Style(color="#d63cd3")

ITEM_NORMAL = Style()
ITEM_CURRENT = Style(color="#00bbbb")
ITEM_SELECTED = Style(color="#008888")
ITEM_SEPARATOR = Style(dim=True)
