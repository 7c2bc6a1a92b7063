"""Jinja2 expression evaluation against an answer set.

The evaluator renders question text, visibility conditions, output names
and whole file bodies.  Its only ways to reach outside the answer set are
the functions in the table it is constructed with; ``default_functions``
builds the standard table (``qEnv`` and ``qParseFloat``).
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from typing import Any

from jinja2 import Environment, TemplateError, select_autoescape

from qtcli.errors import ExpressionError
from qtcli.utils import to_bool, to_float

FunctionTable = Mapping[str, Callable[..., Any]]


# ---------------------------------------------------------------------------
# Function table
# ---------------------------------------------------------------------------


def default_functions(
    getenv: Callable[[str], str | None] = os.environ.get,
) -> dict[str, Callable[..., Any]]:
    """Return the standard helper table exposed to expressions.

    Args:
        getenv: Environment lookup; injected so tests can supply a fake
            environment.
    """

    def q_env(name: str) -> str:
        if not isinstance(name, str):
            raise TypeError(f"qEnv expects a string, got {type(name).__name__}")
        return getenv(name) or ""

    def q_parse_float(value: Any) -> float:
        return to_float(value, 0.0)

    return {
        "qEnv": q_env,
        "qParseFloat": q_parse_float,
    }


# ---------------------------------------------------------------------------
# ExpressionEvaluator
# ---------------------------------------------------------------------------


class ExpressionEvaluator:
    """Renders expressions with a fixed, enumerated function table.

    Args:
        functions: Callables made available as globals inside expressions.
            Defaults to :func:`default_functions`.
    """

    def __init__(self, functions: FunctionTable | None = None) -> None:
        self.functions = dict(default_functions() if functions is None else functions)
        self.env = Environment(
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.globals.update(self.functions)
        self.env.filters["snake_case"] = _snake_case_filter

    def render(
        self,
        expression: str,
        answers: Mapping[str, Any],
        name: str = "",
    ) -> str:
        """Render *expression* against *answers*.

        Args:
            expression: Jinja2 template source.
            answers: Answer set; never modified.
            name: Label used in error messages (step id, file name, ...).

        Raises:
            ExpressionError: On syntax errors, undefined-call errors, or
                helper functions rejecting their arguments.
        """
        if not expression:
            return ""
        try:
            template = self.env.from_string(expression)
            return template.render(**answers)
        except (TemplateError, TypeError, ValueError, ArithmeticError) as exc:
            raise ExpressionError(name, str(exc)) from exc

    def render_bool(
        self,
        expression: str | None,
        answers: Mapping[str, Any],
        default_if_empty: bool = True,
        name: str = "",
    ) -> bool:
        """Render *expression* and coerce the output to a boolean.

        An empty or whitespace-only expression yields *default_if_empty*
        without being evaluated.
        """
        expr = (expression or "").strip()
        if not expr:
            return default_if_empty
        return to_bool(self.render(expr, answers, name), default_if_empty)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing``, ``some-thing`` or ``some.thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", str(value))
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-.\s]+", "_", s2).lower()
