"""Shared utility functions for qtcli.

Provides Rich-based console output, logging setup, value coercion used by
the expression evaluator and manifests, and small file-system helpers.
"""

from __future__ import annotations

import logging
import sys
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def setup_logging(level: str = "WARNING") -> None:
    """Configure the root logger.

    Installs a ``RichHandler`` on stderr when stderr is a terminal and a
    plain ``StreamHandler`` otherwise.

    Args:
        level: Logging level name ("DEBUG", "INFO", "WARNING", ...).
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    if sys.stderr.isatty():
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter("%(levelname)s - %(name)s - %(message)s")
        )

    handler.setLevel(numeric_level)
    root_logger.addHandler(handler)
    root_logger.debug("Logging configured: level=%s", level)


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def to_bool(value: Any, default: bool = False) -> bool:
    """Coerce an answer value to a boolean.

    * Booleans pass through.
    * Strings are true iff they equal ``"true"`` or ``"yes"`` (trimmed,
      case-insensitive).
    * Numbers are true when non-zero.
    * ``None`` is false.
    * Anything else yields *default*.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes")
    if isinstance(value, (int, float)):
        return value != 0
    if value is None:
        return False
    return default


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce an answer value to a float, falling back to *default*.

    Examples::

        to_float("1.5")   -> 1.5
        to_float("abc")   -> 0.0
        to_float(3)       -> 3.0
        to_float(None)    -> 0.0
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return 0.0
    return default


def merge(base: Mapping[str, Any], *others: Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a new dict with every mapping in *others* layered over *base*."""
    merged = dict(base)
    for other in others:
        if other:
            merged.update(other)
    return merged


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def write_file(path: Path, content: str | bytes) -> Path:
    """Create parent directories and write *content* to *path*."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def is_valid_dir_name(name: str) -> bool:
    """Return ``True`` if *name* can be created as a single directory.

    The check creates and removes the directory inside a scratch location,
    so whatever the host file system rejects is rejected here too.
    """
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        return False
    with tempfile.TemporaryDirectory() as scratch:
        try:
            (Path(scratch) / name).mkdir()
        except (OSError, ValueError):
            return False
    return True


def is_valid_file_name(name: str) -> bool:
    """Return ``True`` if *name* can be created as a single file."""
    if not name or name in (".", "..") or "/" in name or "\\" in name:
        return False
    with tempfile.TemporaryDirectory() as scratch:
        try:
            (Path(scratch) / name).touch()
        except (OSError, ValueError):
            return False
    return True


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(
    rows: list[tuple[str, str]],
    title: str = "Summary",
    columns: tuple[str, str] = ("Item", "Value"),
    out: Console | None = None,
) -> None:
    """Print a two-column table.

    Args:
        rows: ``(left, right)`` pairs, printed in order.
        title: Table title.
        columns: Column headers.
        out: Console to print to; defaults to the shared console.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column(columns[0], style="dim", no_wrap=True)
    table.add_column(columns[1])

    for left, right in rows:
        table.add_row(left, right)

    (out or console).print(table)


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
