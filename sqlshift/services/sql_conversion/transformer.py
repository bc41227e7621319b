from typing import List, Sequence, Tuple

from .models import RuleMatch
from .rules import DEFAULT_RULES, Rule


class Transformer:
    """Applies an ordered rule table to a unit of text (document or line)."""

    def __init__(self, rules: Sequence[Rule] = DEFAULT_RULES):
        self.rules: Tuple[Rule, ...] = tuple(rules)

    def apply(self, text: str) -> str:
        return self.apply_with_count(text)[0]

    def apply_with_count(self, text: str) -> Tuple[str, int]:
        """Apply every rule in order; also return the total number of substitutions."""
        total = 0
        for rule in self.rules:
            text, n = rule.sub(text)
            total += n
        return text, total

    def count_matches(self, text: str) -> List[RuleMatch]:
        """Count matches per rule against *text* as given.

        Each rule is counted on the unmodified input, not on the output of the
        preceding rules, so a count may differ from what ``apply`` actually
        rewrote (e.g. ``[dbo].[T]`` counts for both bracket rules).
        """
        return [
            RuleMatch(rule.description, rule.pattern.pattern, rule.count(text))
            for rule in self.rules
        ]
