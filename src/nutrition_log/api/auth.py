"""Bearer token authentication for API routes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Header, HTTPException, Request, status

from nutrition_log.domain.models import UserRecord  # noqa: TC001
from nutrition_log.errors import NotAuthenticatedError

if TYPE_CHECKING:
    from nutrition_log.containers import AppContainer


async def current_user(
    request: Request, authorization: str | None = Header(default=None)
) -> UserRecord:
    """Resolve the signed-in user from the Authorization header."""
    container: AppContainer = request.app.state.container
    try:
        return container.auth_service.authenticate(authorization)
    except NotAuthenticatedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
