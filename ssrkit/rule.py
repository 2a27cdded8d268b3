"""Regular-expression rules matched against host names."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Pattern

__all__ = ["Rule", "RuleError", "lookup_rule"]


class RuleError(ValueError):
    """Raised for a bad rule argument or a pattern that does not compile."""


class Rule:
    """A host-name rule built from one regular-expression pattern."""

    def __init__(self, pattern: Optional[str] = None) -> None:
        self.pattern = pattern
        self._compiled: Optional[Pattern[str]] = None

    def __repr__(self) -> str:
        return f"Rule({self.pattern!r})"

    def accept_arg(self, arg: str) -> None:
        """Take ``arg`` as the pattern; a rule takes only one argument."""
        if self.pattern is not None:
            raise RuleError(f"Unexpected table rule argument: {arg}")
        self.pattern = arg

    def init(self) -> None:
        """Compile the pattern, once."""
        if self._compiled is not None:
            return
        if self.pattern is None:
            raise RuleError("rule has no pattern")
        try:
            self._compiled = re.compile(self.pattern)
        except re.error as exc:
            offset = exc.pos if exc.pos is not None else 0
            raise RuleError(
                f"regex compilation failed at offset {offset}: {exc.msg}"
            ) from exc

    def matches(self, name: Optional[str]) -> bool:
        """Return whether the pattern matches anywhere in ``name``.

        ``None`` is treated as the empty name.
        """
        self.init()
        return self._compiled.search(name or "") is not None


def lookup_rule(rules: Iterable[Rule], name: Optional[str]) -> Optional[Rule]:
    """Return the first rule whose pattern matches ``name``, or ``None``."""
    for rule in rules:
        if rule.matches(name):
            return rule
    return None