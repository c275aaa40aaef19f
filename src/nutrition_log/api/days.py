"""Day log API endpoints, including offline reconciliation."""

from __future__ import annotations

import logging
from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Query, Request

from nutrition_log.api.auth import current_user
from nutrition_log.api.schemas import (
    AddItemRequest,
    DayBody,
    ReconcileRequest,
    day_body_payload,
)
from nutrition_log.domain.days import DayLog, day_log_from_payload, day_log_to_payload
from nutrition_log.domain.models import UserRecord  # noqa: TC001
from nutrition_log.errors import StoreUnavailableError
from nutrition_log.services.aggregation import aggregate
from nutrition_log.services.local_cache import InMemoryLocalDayCache
from nutrition_log.services.reconciler import (
    CleanDay,
    DayLogReconciler,
    PendingConflict,
    ReconcileOutcome,
    UnavailableDay,
)

if TYPE_CHECKING:
    from nutrition_log.containers import AppContainer

router = APIRouter(prefix="/days", tags=["days"])

_logger = logging.getLogger(__name__)


@router.get("")
async def list_days(
    request: Request,
    limit: int = Query(default=50, ge=1, le=366),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Return the user's logged dates, most recent first."""
    container: AppContainer = request.app.state.container
    records = await container.day_service.list_days(user.id, limit)
    return {
        "days": [{"id": str(record.id), "date": record.day_date} for record in records]
    }


@router.get("/all")
async def all_days(
    request: Request,
    limit: int = Query(default=100, ge=1, le=366),
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Return every stored day with its meals, keyed by date."""
    container: AppContainer = request.app.state.container
    days = await container.day_service.load_all_days(user.id, limit)
    return {
        "days": {day_date: day_log_to_payload(day) for day_date, day in days.items()}
    }


@router.get("/{day_date}")
async def get_day(
    day_date: date, request: Request, user: UserRecord = Depends(current_user)
) -> dict[str, object]:
    """Return one day with its totals; an empty day when it can't be loaded."""
    container: AppContainer = request.app.state.container
    key = day_date.isoformat()
    day = await container.day_service.load_day(user.id, key)
    return _day_response(container, key, day)


@router.put("/{day_date}")
async def put_day(
    day_date: date,
    body: DayBody,
    request: Request,
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Replace every item of a day."""
    container: AppContainer = request.app.state.container
    key = day_date.isoformat()
    day = day_log_from_payload(day_body_payload(body))
    saved = await container.day_service.replace_day(user.id, key, day)
    return _day_response(container, key, saved)


@router.post("/{day_date}/items")
async def add_item(
    day_date: date,
    body: AddItemRequest,
    request: Request,
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Append one food to a meal and remember it as recently used."""
    container: AppContainer = request.app.state.container
    key = day_date.isoformat()
    day = await container.day_service.add_item(
        user.id,
        key,
        body.food_id,
        qty=body.qty,
        meal=body.meal,
        serving_override=body.serving_override,
    )
    try:
        container.history_service.record_use(user.id, body.food_id)
    except StoreUnavailableError:
        _logger.exception("Recording food use failed: food_id=%s", body.food_id)
    return _day_response(container, key, day)


@router.post("/{day_date}/reconcile")
async def reconcile_day(
    day_date: date,
    body: ReconcileRequest,
    request: Request,
    user: UserRecord = Depends(current_user),
) -> dict[str, object]:
    """Compare an offline day with the stored one and apply a resolution.

    Without a resolution nothing is written: a differing local day is reported
    as a conflict with item counts for both versions.
    """
    container: AppContainer = request.app.state.container
    key = day_date.isoformat()
    local_cache = InMemoryLocalDayCache()
    if body.local is not None:
        local_cache.put(key, day_log_from_payload(day_body_payload(body.local)))
    reconciler = DayLogReconciler(
        store=container.day_service, local_cache=local_cache
    )
    reconciler.handle_auth_transition(user.id)
    outcome = await reconciler.open_date(key)
    if isinstance(outcome, PendingConflict) and body.resolution is not None:
        day = await reconciler.resolve(key, body.resolution)
        return {
            "status": "resolved",
            "resolution": body.resolution,
            "date": key,
            "meals": day_log_to_payload(day),
        }
    return _outcome_response(outcome)


def _day_response(container: AppContainer, key: str, day: DayLog) -> dict[str, object]:
    lookup = container.food_service.profile_lookup({ref.food_id for ref in day.items()})
    return {
        "date": key,
        "meals": day_log_to_payload(day),
        "item_count": day.item_count(),
        "totals": aggregate(day, lookup).as_dict(),
    }


def _outcome_response(outcome: ReconcileOutcome) -> dict[str, object]:
    if isinstance(outcome, CleanDay):
        return {
            "status": "clean",
            "date": outcome.day_date,
            "meals": day_log_to_payload(outcome.day),
        }
    if isinstance(outcome, PendingConflict):
        return {
            "status": "conflict",
            "date": outcome.day_date,
            "local_count": outcome.local_count,
            "server_count": outcome.server_count,
            "bucket_counts": outcome.bucket_counts(),
            "local": day_log_to_payload(outcome.local),
            "server": day_log_to_payload(outcome.server),
        }
    if isinstance(outcome, UnavailableDay):
        return {
            "status": "unavailable",
            "date": outcome.day_date,
            "reason": outcome.reason,
            "meals": day_log_to_payload(outcome.day),
        }
    return {"status": "stale", "date": outcome.day_date}
