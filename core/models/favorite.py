# =============================================================================
# core/models/favorite.py - Favorite Schemas
# =============================================================================

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class Favorite(BaseModel):
    """A (user, business) favorite pair."""

    id: UUID
    user_id: UUID
    business_id: UUID
    created_at: datetime | None = None
