"""Validation rules for the text widget.

Rules are declared as an ordered list of one-entry mappings::

    rules:
      - required: true
      - match: "^[A-Za-z_][A-Za-z0-9_]*$"

Every rule is checked on each attempt, in declaration order, and the first
failing rule blocks completion with its message.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Collection, Iterable, Mapping
from typing import Any

from qtcli.errors import ManifestError, ValidationError

logger = logging.getLogger(__name__)

Rule = Callable[[str], None]

RULE_REQUIRED = "required"
RULE_MATCH = "match"


class ValidatorChain:
    """An ordered list of rules applied to the input buffer."""

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self.rules: list[Rule] = list(rules)

    def add(self, rule: Rule) -> "ValidatorChain":
        self.rules.append(rule)
        return self

    def __len__(self) -> int:
        return len(self.rules)

    def __call__(self, value: str) -> None:
        for rule in self.rules:
            rule(value)


def required_rule(value: str) -> None:
    if not value.strip():
        raise ValidationError("input cannot be empty")


def match_rule(pattern: str) -> Rule:
    try:
        compiled = re.compile(pattern)
    except re.error as exc:
        raise ManifestError(f"invalid pattern {pattern!r}: {exc}") from exc

    def _match(value: str) -> None:
        if compiled.search(value) is None:
            raise ValidationError("input doesn't match the required pattern")

    return _match


def not_in_rule(taken: Collection[str], message: str = "already exists") -> Rule:
    """Reject values (trimmed) that are already present in *taken*."""

    def _not_in(value: str) -> None:
        if value.strip() in taken:
            raise ValidationError(message)

    return _not_in


def create_rule(name: str, arg: Any) -> Rule | None:
    """Build one rule from its manifest name and argument.

    Unknown rule names are ignored.  ``required: false`` produces no rule.

    Raises:
        ManifestError: If the argument has the wrong type.
    """
    kind = name.strip().lower()
    if kind == RULE_REQUIRED:
        if not isinstance(arg, bool):
            raise ManifestError("invalid argument for 'required': boolean expected")
        return required_rule if arg else None
    if kind == RULE_MATCH:
        if not isinstance(arg, str):
            raise ManifestError("invalid argument for 'match': string expected")
        return match_rule(arg)

    logger.debug("ignoring unknown validation rule '%s'", name)
    return None


def create_validator(rules: Iterable[Mapping[str, Any]]) -> ValidatorChain:
    """Build a :class:`ValidatorChain` from manifest rule mappings."""
    chain = ValidatorChain()
    for entry in rules:
        for name, arg in entry.items():
            rule = create_rule(name, arg)
            if rule is not None:
                chain.add(rule)
    return chain
