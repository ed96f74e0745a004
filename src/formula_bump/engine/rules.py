"""Replacement rules and the ordered plans built from them."""

import re
from dataclasses import dataclass, field
from typing import Optional

from ..errors import PlanError


@dataclass(frozen=True)
class ReplacementRule:
    """
    One text substitution.

    A literal rule replaces every occurrence of ``search_pattern`` with
    ``replace_with`` verbatim. A regex rule compiles ``search_pattern`` with
    ``flags`` and treats ``replace_with`` as a template, so ``\\g<1>`` style
    back references are expanded.
    """

    search_pattern: Optional[str]
    replace_with: str
    is_regex: bool = False
    flags: int = 0

    def compile(self) -> "re.Pattern[str]":
        return re.compile(self.search_pattern, self.flags)

    def apply(self, text: str) -> tuple[str, int]:
        """Substitute every match. Returns the new text and the match count."""
        if self.is_regex:
            return self.compile().subn(self.replace_with, text)
        count = text.count(self.search_pattern)
        return text.replace(self.search_pattern, self.replace_with), count

    def describe(self) -> str:
        if self.is_regex:
            return f"replace /{self.search_pattern}/ with {self.replace_with!r}"
        return f"replace {self.search_pattern!r} with {self.replace_with!r}"


@dataclass
class MutationPlan:
    """Replacement rules in the order they must be applied."""

    rules: list[ReplacementRule] = field(default_factory=list)

    def add(self, rule: ReplacementRule) -> "MutationPlan":
        if not rule.search_pattern:
            raise PlanError(
                f"No old value for new value {rule.replace_with}! "
                "Did you pass the wrong arguments?"
            )
        self.rules.append(rule)
        return self

    def literal(self, old: Optional[str], new: str) -> "MutationPlan":
        return self.add(ReplacementRule(search_pattern=old, replace_with=new))

    def regex(self, pattern: str, template: str, flags: int = re.MULTILINE) -> "MutationPlan":
        return self.add(
            ReplacementRule(search_pattern=pattern, replace_with=template, is_regex=True, flags=flags)
        )

    def __iter__(self):
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)
