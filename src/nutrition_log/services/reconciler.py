"""Reconciliation of offline day logs with the signed-in user's server log.

When a user signs in, each date they open is compared once against the server
copy. Matching or absent local data is adopted silently; differing data is
returned as a :class:`PendingConflict` that the caller must resolve with
:data:`IMPORT_LOCAL` or :data:`KEEP_SERVER`. Nothing is written before that
choice is made.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from nutrition_log.domain.days import MEAL_BUCKETS, DayLog
from nutrition_log.errors import NoPendingConflictError, StoreUnavailableError
from nutrition_log.services.local_cache import LocalDayCache

IDLE = "IDLE"
SERVER_FETCH_PENDING = "SERVER_FETCH_PENDING"
CLEAN = "CLEAN"
CONFLICT_PENDING = "CONFLICT_PENDING"
RESOLVED = "RESOLVED"

IMPORT_LOCAL = "import_local"
KEEP_SERVER = "keep_server"
RESOLUTIONS = frozenset({IMPORT_LOCAL, KEEP_SERVER})

_logger = logging.getLogger(__name__)


class DayStore(Protocol):
    """Authoritative per-user day storage."""

    async def fetch_day(self, user_id: UUID | None, day_date: str) -> DayLog:
        """Return the server day, creating it when missing."""

    async def replace_day(
        self, user_id: UUID | None, day_date: str, day: DayLog
    ) -> DayLog:
        """Overwrite the server day with the given log."""


@dataclass(frozen=True)
class CleanDay:
    """Server data adopted without a conflict."""

    day_date: str
    day: DayLog


@dataclass(frozen=True)
class PendingConflict:
    """Local and server data differ and the user has to choose."""

    day_date: str
    local: DayLog
    server: DayLog

    @property
    def local_count(self) -> int:
        return self.local.item_count()

    @property
    def server_count(self) -> int:
        return self.server.item_count()

    def bucket_counts(self) -> dict[str, dict[str, int]]:
        """Return per-bucket item counts for both versions."""
        return {
            "local": self.local.bucket_counts(),
            "server": self.server.bucket_counts(),
        }


@dataclass(frozen=True)
class UnavailableDay:
    """The server copy could not be loaded; an empty day is shown instead."""

    day_date: str
    reason: str
    day: DayLog = field(default_factory=DayLog.empty)


@dataclass(frozen=True)
class StaleResult:
    """The date was deselected or the session changed while fetching."""

    day_date: str


ReconcileOutcome = CleanDay | PendingConflict | UnavailableDay | StaleResult


def same_shape(local: DayLog, server: DayLog) -> bool:
    """Compare two days bucket by bucket on (food id, qty), order-sensitive."""
    return all(
        [(ref.food_id, ref.qty) for ref in local.bucket(meal)]
        == [(ref.food_id, ref.qty) for ref in server.bucket(meal)]
        for meal in MEAL_BUCKETS
    )


@dataclass
class DayLogReconciler:
    """Per-session state machine deciding which day log wins after sign-in."""

    store: DayStore
    local_cache: LocalDayCache
    user_id: UUID | None = None
    selected_date: str | None = None
    _session: int = 0
    _states: dict[str, str] = field(default_factory=dict)
    _working: dict[str, DayLog] = field(default_factory=dict)
    _pending: dict[str, PendingConflict] = field(default_factory=dict)
    _locks: dict[str, asyncio.Lock] = field(default_factory=dict)

    def handle_auth_transition(self, user_id: UUID | None) -> None:
        """Start a new session for a sign-in or sign-out."""
        self.user_id = user_id
        self._session += 1
        self._states.clear()
        self._working.clear()
        self._pending.clear()
        self._locks.clear()
        _logger.info("Reconciler session reset: signed_in=%s", user_id is not None)

    def select_date(self, day_date: str | None) -> None:
        """Mark which date the caller is currently showing."""
        self.selected_date = day_date

    def state_for(self, day_date: str) -> str:
        """Return the reconciliation state of a date."""
        return self._states.get(day_date, IDLE)

    def working_day(self, day_date: str) -> DayLog | None:
        """Return the adopted day for a date once it is clean or resolved."""
        return self._working.get(day_date)

    async def open_date(self, day_date: str) -> ReconcileOutcome:
        """Select a date and reconcile it on first open in this session."""
        self.select_date(day_date)
        async with self._lock_for(day_date):
            state = self.state_for(day_date)
            if state in {CLEAN, RESOLVED}:
                return CleanDay(day_date, self._working[day_date])
            if state == CONFLICT_PENDING:
                return self._pending[day_date]
            return await self._reconcile(day_date)

    async def resolve(self, day_date: str, choice: str) -> DayLog:
        """Apply the user's choice for a pending conflict and return the day."""
        if choice not in RESOLUTIONS:
            raise ValueError(f"Unknown resolution: {choice}")
        async with self._lock_for(day_date):
            state = self.state_for(day_date)
            if state == RESOLVED:
                _logger.info("Conflict already resolved: date=%s", day_date)
                return self._working[day_date]
            if state != CONFLICT_PENDING:
                raise NoPendingConflictError(f"No conflict pending for {day_date}")
            pending = self._pending[day_date]
            if choice == KEEP_SERVER:
                working = pending.server
            else:
                await self._import_local(pending)
                working = pending.local
            self.local_cache.remove(day_date)
            self._states[day_date] = RESOLVED
            self._working[day_date] = working
            del self._pending[day_date]
            _logger.info("Conflict resolved: date=%s choice=%s", day_date, choice)
            return working

    async def _reconcile(self, day_date: str) -> ReconcileOutcome:
        session = self._session
        self._states[day_date] = SERVER_FETCH_PENDING
        try:
            server = await self.store.fetch_day(self.user_id, day_date)
        except Exception as exc:
            _logger.exception("Fetching server day failed: date=%s", day_date)
            if session != self._session:
                return StaleResult(day_date)
            self._states.pop(day_date, None)
            if self._is_stale(session, day_date):
                return StaleResult(day_date)
            return UnavailableDay(day_date, reason=str(exc) or type(exc).__name__)

        if session != self._session:
            return StaleResult(day_date)
        if self._is_stale(session, day_date):
            self._states.pop(day_date, None)
            return StaleResult(day_date)

        local = self.local_cache.get(day_date)
        if local is None or same_shape(local, server):
            self._states[day_date] = CLEAN
            self._working[day_date] = server
            return CleanDay(day_date, server)

        pending = PendingConflict(day_date, local=local, server=server)
        self._states[day_date] = CONFLICT_PENDING
        self._pending[day_date] = pending
        _logger.info(
            "Day conflict: date=%s local_items=%s server_items=%s",
            day_date,
            pending.local_count,
            pending.server_count,
        )
        return pending

    async def _import_local(self, pending: PendingConflict) -> None:
        try:
            await self.store.replace_day(self.user_id, pending.day_date, pending.local)
        except (StoreUnavailableError, ValueError):
            raise
        except Exception as exc:
            raise StoreUnavailableError(
                f"Could not import local day {pending.day_date}"
            ) from exc

    def _is_stale(self, session: int, day_date: str) -> bool:
        return session != self._session or self.selected_date != day_date

    def _lock_for(self, day_date: str) -> asyncio.Lock:
        lock = self._locks.get(day_date)
        if lock is None:
            lock = self._locks[day_date] = asyncio.Lock()
        return lock
