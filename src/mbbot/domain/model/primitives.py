"""Domain primitives: scalar aliases + small value objects."""

from __future__ import annotations

from dataclasses import dataclass

type Mbid = str
type LinkTypeId = int


@dataclass(frozen=True, slots=True)
class DateRange:
    """Partial date where a zero component means "unknown"."""

    year: int = 0
    month: int = 0
    day: int = 0

    def empty(self) -> bool:
        return self.year == 0 and self.month == 0 and self.day == 0

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
