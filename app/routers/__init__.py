# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# FastAPI routers organized by audience:
# - health.py: Health check endpoints
# - businesses.py: Public discovery (search, nearby, detail, ratings)
# - me.py: The signed-in user's favorites and ratings
# - supplier.py: Business management, media and verification submission
# - admin.py: Moderation and verification review
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import businesses
from . import me
from . import supplier
from . import admin

__all__ = [
    "health",
    "businesses",
    "me",
    "supplier",
    "admin",
]
