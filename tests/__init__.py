# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Lokolo API:
# - fakes.py: In-memory store and storage gateway used by the service tests
# - test_models.py / test_utils.py: Validation and helper unit tests
# - test_*_service.py: Service behaviour over the fakes
# - test_supabase_store.py / test_storage_service.py: Adapters over mocked clients
# - test_api.py: Routers through FastAPI's TestClient
#
# Run tests with: pytest
# =============================================================================
