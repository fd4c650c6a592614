import re
from typing import Iterable, Optional, Pattern

from integration_harness.models.diagnostics import IgnoreRuleSet


def compile_prefix_pattern(prefixes: Iterable[str]) -> Optional[Pattern[str]]:
    """Compiles literal prefixes into one anchored alternation.

    Every prefix is escaped, so characters such as ``(`` or ``*`` match
    themselves.

    Returns:
        The compiled pattern, or None when there are no prefixes.
    """
    escaped = [re.escape(prefix) for prefix in prefixes]
    if not escaped:
        return None
    return re.compile("^(?:" + "|".join(escaped) + ")")


class IgnorePatternMatcher:
    """Decides whether a rendered log message is covered by an ignore rule."""

    def __init__(self, prefixes: Iterable[str] = ()):
        self.rules = IgnoreRuleSet(prefixes=tuple(prefixes))
        self.pattern = compile_prefix_pattern(self.rules.prefixes)

    def matches(self, message: str) -> bool:
        return self.pattern is not None and self.pattern.match(message) is not None

    def __repr__(self) -> str:
        return f"IgnorePatternMatcher({list(self.rules.prefixes)!r})"
