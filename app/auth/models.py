# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from pydantic import BaseModel
from uuid import UUID
from typing import Optional

from core.models.business import UserRole, Viewer


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the user info available from the token itself, without
    querying the database. The role comes from the `app_metadata.role`
    claim, which only the service key can set.
    """
    id: UUID
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole = UserRole.CONSUMER

    model_config = {"frozen": True}

    def to_viewer(self) -> Viewer:
        """The identity core services act on behalf of."""
        return Viewer(id=self.id, role=self.role)


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # User ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    app_metadata: dict = {}
    user_metadata: dict = {}

    def to_auth_user(self) -> AuthUser:
        raw_role = self.app_metadata.get("role", UserRole.CONSUMER.value)
        try:
            role = UserRole(raw_role)
        except ValueError:
            role = UserRole.CONSUMER
        return AuthUser(
            id=UUID(self.sub),
            email=self.email,
            display_name=self.user_metadata.get("full_name") or self.user_metadata.get("name"),
            avatar_url=self.user_metadata.get("avatar_url") or self.user_metadata.get("picture"),
            role=role,
        )
