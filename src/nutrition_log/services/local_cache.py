"""Client-side cache of day logs recorded while signed out."""

from dataclasses import dataclass, field
from typing import Protocol

from nutrition_log.domain.days import DayLog


class LocalDayCache(Protocol):
    """Offline store of day logs keyed by ISO date."""

    def get(self, day_date: str) -> DayLog | None:
        """Return the cached day for a date, if any."""

    def put(self, day_date: str, day: DayLog) -> None:
        """Store a day for a date, replacing any previous entry."""

    def remove(self, day_date: str) -> None:
        """Drop the entry for a date if present."""

    def dates(self) -> list[str]:
        """Return cached dates in ascending order."""


@dataclass
class InMemoryLocalDayCache(LocalDayCache):
    """Local day cache held in process memory."""

    entries: dict[str, DayLog] = field(default_factory=dict)

    def get(self, day_date: str) -> DayLog | None:
        """Return the cached day for a date, if any."""
        return self.entries.get(day_date)

    def put(self, day_date: str, day: DayLog) -> None:
        """Store a day for a date."""
        self.entries[day_date] = day

    def remove(self, day_date: str) -> None:
        """Drop the entry for a date."""
        self.entries.pop(day_date, None)

    def dates(self) -> list[str]:
        """Return cached dates in ascending order."""
        return sorted(self.entries)
