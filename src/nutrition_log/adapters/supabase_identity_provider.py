"""Supabase auth-backed identity provider."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_log.domain.models import UserRecord
from nutrition_log.services.users import IdentityProvider


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Verifies access tokens with Supabase auth."""

    client: Client

    def get_user(self, access_token: str) -> UserRecord | None:
        """Return the user owning an access token."""
        response = self.client.auth.get_user(access_token)
        user = getattr(response, "user", None)
        if user is None:
            return None
        return UserRecord(id=UUID(str(user.id)), email=getattr(user, "email", None))
