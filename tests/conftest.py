# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Wires the real services to the in-memory store and storage fakes
# - Provides one viewer per role
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from uuid import uuid4

import pytest

from app.config import get_settings
from app.dependencies import build_services
from core.models.business import UserRole, Viewer
from tests.fakes import FakeStorageGateway, InMemoryStore


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def storage():
    return FakeStorageGateway()


@pytest.fixture
def services(store, storage, settings):
    """The full service graph over the fakes."""
    return build_services(store, storage, settings)


@pytest.fixture
def admin():
    return Viewer(id=uuid4(), role=UserRole.ADMIN)


@pytest.fixture
def supplier():
    return Viewer(id=uuid4(), role=UserRole.SUPPLIER)


@pytest.fixture
def other_supplier():
    return Viewer(id=uuid4(), role=UserRole.SUPPLIER)


@pytest.fixture
def consumer():
    return Viewer(id=uuid4(), role=UserRole.CONSUMER)
