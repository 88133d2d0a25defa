"""Report date value type."""
from dataclasses import dataclass, field
from datetime import date
from functools import total_ordering
from typing import Optional

from registrant_reports.utils.date_utils import parse_date


@total_ordering
@dataclass(frozen=True, eq=False)
class ReportDate:
    """
    A validated MM-DD-YY date.

    Ordering between ReportDate values is calendar based. Callers that need
    the sheet's lexicographic behaviour sort on ``raw`` instead.
    """

    raw: str
    value: date = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        """Validate the raw text and cache the parsed calendar date."""
        try:
            parsed = parse_date(self.raw)
        except ValueError as e:
            raise ValueError(f"Invalid MM-DD-YY date: {self.raw!r}") from e
        object.__setattr__(self, "value", parsed)

    @classmethod
    def parse(cls, text: str) -> Optional["ReportDate"]:
        """Return a ReportDate, or None when text is not a valid date."""
        try:
            return cls(text)
        except (ValueError, TypeError):
            return None

    def __eq__(self, other):
        if not isinstance(other, ReportDate):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other):
        if not isinstance(other, ReportDate):
            return NotImplemented
        return self.value < other.value

    def __hash__(self):
        return hash(self.value)

    def within(self, start: "ReportDate", end: "ReportDate") -> bool:
        """Inclusive calendar range check."""
        return start <= self <= end

    def __str__(self) -> str:
        return self.raw
