# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for data validation
# - services/: Discovery pipeline, lifecycle state machine, verification
#   workflow and the rating / favorite / media helpers
#
# Code in this package should NOT import from FastAPI routers.
# Services receive their store, storage gateway and settings explicitly.
# =============================================================================
