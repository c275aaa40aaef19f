"""FastAPI application factory."""

import logging
from dataclasses import asdict
from datetime import date
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from nutrition_log.api.auth import current_user
from nutrition_log.api.days import router as days_router
from nutrition_log.api.schemas import RecentFoodRequest
from nutrition_log.app_logging import configure_logging
from nutrition_log.containers import AppContainer
from nutrition_log.domain.models import RecentFood, UserRecord, UserSettings
from nutrition_log.errors import (
    NoPendingConflictError,
    NotAuthenticatedError,
    StoreUnavailableError,
)
from nutrition_log.services.recommendations import RecommendationReport


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(debug=container.settings.debug)
    logger = logging.getLogger(__name__)

    app = FastAPI(title="Nutrition Log")
    app.state.container = container

    app.include_router(days_router)

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated(
        request: Request, exc: NotAuthenticatedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)}
        )

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable(
        request: Request, exc: StoreUnavailableError
    ) -> JSONResponse:
        logger.warning("Store unavailable: %s %s", request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.exception_handler(NoPendingConflictError)
    async def no_pending_conflict(
        request: Request, exc: NoPendingConflictError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(ValueError)
    async def invalid_value(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/foods/search")
    async def search_foods(
        request: Request,
        q: str = "",
        limit: int | None = Query(default=None, ge=1, le=50),
    ) -> dict[str, object]:
        """Search the food database by name."""
        state_container: AppContainer = request.app.state.container
        results = state_container.food_service.search(
            q, limit or state_container.settings.search_limit
        )
        return {"foods": [asdict(food) for food in results]}

    @app.get("/foods/{food_id}")
    async def get_food(food_id: str, request: Request) -> dict[str, object]:
        """Return the nutrient profile of one food."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.food_service.lookup(food_id)
        if profile is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Food not found"
            )
        return {"id": food_id.strip().lower(), **asdict(profile)}

    @app.get("/recommendations")
    async def recommendations(
        request: Request,
        day: date = Query(alias="date"),
        limit: int | None = Query(default=None, ge=1, le=50),
        user: UserRecord = Depends(current_user),
    ) -> dict[str, object]:
        """Return gaps, messages and ranked foods for a logged day."""
        state_container: AppContainer = request.app.state.container
        report = await state_container.recommendation_service.build_report(
            user.id,
            day.isoformat(),
            limit=limit or state_container.settings.recommendation_limit,
        )
        return {"date": day.isoformat(), **_format_report(report)}

    @app.get("/user-settings")
    async def get_user_settings(
        request: Request, user: UserRecord = Depends(current_user)
    ) -> dict[str, object]:
        """Return the user's goals, creating defaults on first access."""
        state_container: AppContainer = request.app.state.container
        return _format_settings(state_container.settings_service.get_settings(user.id))

    @app.put("/user-settings")
    async def update_user_settings(
        request: Request,
        updates: dict[str, Any] = Body(...),
        user: UserRecord = Depends(current_user),
    ) -> dict[str, object]:
        """Apply a partial settings update."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings_service.update_settings(user.id, updates)
        logger.info("Settings updated: user_id=%s keys=%s", user.id, sorted(updates))
        return _format_settings(settings)

    @app.get("/recent-foods")
    async def recent_foods(
        request: Request,
        limit: int = Query(default=20, ge=1, le=100),
        user: UserRecord = Depends(current_user),
    ) -> dict[str, object]:
        """Return the foods the user logged most recently."""
        state_container: AppContainer = request.app.state.container
        recent = state_container.history_service.list_recent(user.id, limit)
        return {"foods": [_format_recent(entry) for entry in recent]}

    @app.post("/recent-foods")
    async def record_recent_food(
        body: RecentFoodRequest,
        request: Request,
        user: UserRecord = Depends(current_user),
    ) -> dict[str, object]:
        """Record that the user picked a food."""
        state_container: AppContainer = request.app.state.container
        recorded = state_container.history_service.record_use(user.id, body.food_id)
        return {"recorded": recorded}

    return app


def _format_report(report: RecommendationReport) -> dict[str, object]:
    return {
        "totals": report.totals.as_dict(),
        "goals": report.goals,
        "gaps": {nutrient: asdict(gap) for nutrient, gap in report.gaps.items()},
        "messages": report.messages,
        "has_significant_gaps": report.has_significant_gaps,
        "recommendations": [asdict(rec) for rec in report.recommendations],
    }


def _format_settings(settings: UserSettings) -> dict[str, object]:
    return asdict(settings)


def _format_recent(entry: RecentFood) -> dict[str, object]:
    return {
        "food_id": entry.food_id,
        "last_used_at": entry.last_used_at.isoformat() if entry.last_used_at else None,
        "use_count": entry.use_count,
        "profile": asdict(entry.profile) if entry.profile else None,
    }
