"""Local day cache stored as one JSON file per date."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from nutrition_log.domain.days import DayLog, day_log_from_payload, day_log_to_payload
from nutrition_log.services.local_cache import LocalDayCache

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileDayCache(LocalDayCache):
    """Stores days as ``<directory>/<date>.json``.

    Files holding a bare list of items are the legacy format and are read
    into the dinner bucket.
    """

    directory: Path

    def get(self, day_date: str) -> DayLog | None:
        """Return the cached day for a date, if the file exists and parses."""
        path = self._path(day_date)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8") or "[]")
            return day_log_from_payload(payload)
        except (OSError, ValueError):
            _logger.warning("Ignoring unreadable day cache file %s", path)
            return None

    def put(self, day_date: str, day: DayLog) -> None:
        """Write a day to its file."""
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(day_date).write_text(
            json.dumps(day_log_to_payload(day), indent=2), encoding="utf-8"
        )

    def remove(self, day_date: str) -> None:
        """Delete the file for a date if present."""
        self._path(day_date).unlink(missing_ok=True)

    def dates(self) -> list[str]:
        """Return cached dates in ascending order."""
        if not self.directory.exists():
            return []
        return sorted(path.stem for path in self.directory.glob("*.json"))

    def _path(self, day_date: str) -> Path:
        unsafe = day_date.startswith(".") or "/" in day_date or "\\" in day_date
        if not day_date or unsafe:
            raise ValueError(f"Invalid day date: {day_date!r}")
        return self.directory / f"{day_date}.json"
