"""User identity resolution."""

import logging
from dataclasses import dataclass
from typing import Protocol

from nutrition_log.domain.models import UserRecord
from nutrition_log.errors import NotAuthenticatedError

_logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    """Resolves access tokens to users."""

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user owning a token, or None when the token is invalid."""


@dataclass
class AuthService:
    """Application service for authenticating API callers."""

    provider: IdentityProvider

    def authenticate(self, authorization: str | None) -> UserRecord:
        """Return the user for an Authorization header value."""
        token = parse_bearer_token(authorization)
        if token is None:
            raise NotAuthenticatedError("Missing bearer token")
        try:
            user = self.provider.get_user(token)
        except Exception as exc:
            _logger.warning("Token verification failed: %s", exc)
            raise NotAuthenticatedError("Invalid token") from exc
        if user is None:
            raise NotAuthenticatedError("Invalid token")
        return user


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from a ``Bearer <token>`` header value."""
    if not authorization:
        return None
    value = authorization.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == "bearer":
        value = rest.strip()
    return value or None
