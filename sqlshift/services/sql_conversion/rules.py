"""
SQL Server -> MySQL rewrite rules.

The rule table is an ordered, immutable tuple. Order is part of the public
contract: rules are applied one after another, each as a global substitution
over the text produced by all earlier rules.

    1. [schema].[name]  -> name        (any number of bracketed qualifiers discarded)
    2. [name]           -> name
    3. GETDATE()        -> NOW()
    4. GETUTCDATE()     -> UTC_TIMESTAMP()
    5. NEWID()          -> UUID()
    6. LEN(             -> LENGTH(
    7. ISNULL(          -> IFNULL(
    8. TOP n            -> LIMIT n     (case-insensitive, replaced in place)

Rule 1 must run before rule 2, otherwise the schema token of a qualified name
would survive as ``schema.name``. Function rules (3-7) only match the exact
upper-case spelling; rule 8 matches ``top``/``Top`` as well.

Known limit: nested brackets are peeled one level per pass, so the table is
not idempotent on them (``[[a]]`` -> ``[a]`` -> ``a``). Bracketed names
without nested brackets reach a fixed point after one pass.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Pattern, Tuple

__all__ = ["Rule", "DEFAULT_RULES"]


@dataclass(frozen=True)
class Rule:
    description: str
    pattern: Pattern[str]
    replacement: str

    def sub(self, text: str) -> Tuple[str, int]:
        return self.pattern.subn(self.replacement, text)

    def count(self, text: str) -> int:
        return sum(1 for _ in self.pattern.finditer(text))


DEFAULT_RULES: Tuple[Rule, ...] = (
    Rule("Remove schema prefix [schema].[name] -> name",
         re.compile(r"(?:\[[^\]]+\]\.)+\[([^\]]+)\]"), r"\1"),
    Rule("Remove square brackets [name] -> name",
         re.compile(r"\[([^\]]+)\]"), r"\1"),
    Rule("GETDATE() -> NOW()",
         re.compile(r"GETDATE\(\)"), "NOW()"),
    Rule("GETUTCDATE() -> UTC_TIMESTAMP()",
         re.compile(r"GETUTCDATE\(\)"), "UTC_TIMESTAMP()"),
    Rule("NEWID() -> UUID()",
         re.compile(r"NEWID\(\)"), "UUID()"),
    Rule("LEN() -> LENGTH()",
         re.compile(r"\bLEN\("), "LENGTH("),
    Rule("ISNULL() -> IFNULL()",
         re.compile(r"\bISNULL\("), "IFNULL("),
    Rule("TOP n -> LIMIT n",
         re.compile(r"\bTOP\s+(\d+)\b", re.IGNORECASE), r"LIMIT \1"),
)
