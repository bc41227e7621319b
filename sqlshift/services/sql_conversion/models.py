from __future__ import annotations

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Dict, List, Optional


class ConversionMode(str, Enum):
    BUFFERED = "buffered"
    STREAMING = "streaming"


@dataclass(frozen=True)
class ConversionOutcome:
    """Result of a buffered conversion: provenance header plus converted body."""
    header: str
    body: str

    @property
    def text(self) -> str:
        return self.header + self.body


@dataclass(frozen=True)
class RuleMatch:
    description: str
    pattern: str
    count: int


@dataclass
class ConversionStats:
    original_line_count: int
    converted_line_count: int
    per_rule: List[RuleMatch] = field(default_factory=list)

    @property
    def applied(self) -> List[RuleMatch]:
        """Rules that matched at least once in the original text."""
        return [m for m in self.per_rule if m.count > 0]

    def to_dict(self) -> dict:
        return {
            "original_lines": self.original_line_count,
            "converted_lines": self.converted_line_count,
            "conversions_applied": [asdict(m) for m in self.applied],
        }


@dataclass
class StreamSummary:
    success: bool
    message: str
    lines_processed: int = 0
    lines_changed: int = 0


@dataclass
class FileOutcome:
    """What happened to one source file."""
    source: str
    destination: Optional[str]
    mode: Optional[ConversionMode]
    success: bool
    message: str
    stats: Optional[ConversionStats] = None
    preview: Optional[List[str]] = None
    preview_truncated: bool = False
    summary: Optional[StreamSummary] = None

    def to_dict(self) -> dict:
        return {
            "source_file": self.source,
            "output_file": self.destination,
            "mode": self.mode.value if self.mode else None,
            "status": "success" if self.success else "error",
            "message": self.message,
            "stats": self.stats.to_dict() if self.stats else None,
            "preview": self.preview,
            "preview_truncated": self.preview_truncated,
            "lines_processed": self.summary.lines_processed if self.summary else None,
            "lines_changed": self.summary.lines_changed if self.summary else None,
        }


@dataclass
class BatchReport:
    outcomes: Dict[str, FileOutcome] = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return sum(1 for o in self.outcomes.values() if o.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for o in self.outcomes.values() if not o.success)

    def record(self, outcome: FileOutcome) -> None:
        self.outcomes[outcome.source] = outcome
