# =============================================================================
# tests/test_api.py - HTTP Layer Tests
# =============================================================================
# Routing, auth gating and error bodies through FastAPI's TestClient.
# Services run over the in-memory fakes; auth dependencies are overridden.
#
# Run with: pytest tests/test_api.py -v
# =============================================================================

from uuid import uuid4

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.auth import AuthUser, get_current_user, get_current_user_optional
from app.dependencies import get_services
from app.main import app
from core.models import BusinessHoursEntry, BusinessStatus, DayOfWeek, UserRole


class Session:
    """Who the overridden auth dependencies say is calling."""

    def __init__(self):
        self.user: AuthUser | None = None

    def sign_in(self, viewer):
        self.user = AuthUser(id=viewer.id, role=viewer.role)

    async def current_user(self):
        if self.user is None:
            raise HTTPException(status_code=401, detail="Not authenticated")
        return self.user

    async def current_user_optional(self):
        return self.user


@pytest.fixture
def session():
    return Session()


@pytest.fixture
def client(services, session):
    app.dependency_overrides[get_services] = lambda: services
    app.dependency_overrides[get_current_user] = session.current_user
    app.dependency_overrides[get_current_user_optional] = session.current_user_optional
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestDiscovery:
    def test_search(self, client, store):
        business = store.add_business(name="Kasi Coffee")

        response = client.get("/api/v1/businesses/search", params={"latitude": -26.2, "longitude": 28.0})

        assert response.status_code == 200
        body = response.json()
        assert [result["id"] for result in body["results"]] == [str(business.id)]
        assert body["results"][0]["is_favorited"] is None
        assert body["pagination"] == {"page": 1, "limit": 20, "total": 1, "total_pages": 1}

    def test_invalid_coordinates_error_body(self, client):
        response = client.get("/api/v1/businesses/search", params={"latitude": 95, "longitude": 28.0})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "INVALID_COORDINATES"
        assert "detail" in body

    def test_malformed_query_is_validation_error(self, client):
        response = client.get("/api/v1/businesses/search", params={"latitude": "north"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_draft_detail_is_404(self, client, store):
        draft = store.add_business(status=BusinessStatus.DRAFT)

        response = client.get(f"/api/v1/businesses/{draft.id}")

        assert response.status_code == 404
        assert response.json()["code"] == "BUSINESS_NOT_FOUND"

    def test_nearby_requires_coordinates(self, client):
        response = client.get("/api/v1/businesses/nearby")

        assert response.status_code == 400

    def test_public_categories_and_hours(self, client, store):
        business = store.add_business()
        store.categories[business.id] = {"Coffee", "Bakery"}
        store.hours[business.id] = [
            BusinessHoursEntry(day_of_week=DayOfWeek.SUNDAY, is_closed=True),
            BusinessHoursEntry(day_of_week=DayOfWeek.MONDAY, opens_at="08:00", closes_at="17:00"),
        ]

        categories = client.get(f"/api/v1/businesses/{business.id}/categories")
        hours = client.get(f"/api/v1/businesses/{business.id}/hours")

        assert categories.status_code == 200
        assert categories.json() == ["Bakery", "Coffee"]
        assert hours.status_code == 200
        assert [entry["day_of_week"] for entry in hours.json()] == ["monday", "sunday"]

    def test_draft_categories_and_hours_are_404(self, client, store):
        draft = store.add_business(status=BusinessStatus.DRAFT)

        assert client.get(f"/api/v1/businesses/{draft.id}/categories").status_code == 404
        assert client.get(f"/api/v1/businesses/{draft.id}/hours").status_code == 404

    def test_owner_sees_own_draft_hours(self, client, session, store, supplier):
        draft = store.add_business(owner_id=supplier.id, status=BusinessStatus.DRAFT)
        session.sign_in(supplier)

        response = client.get(f"/api/v1/businesses/{draft.id}/hours")

        assert response.status_code == 200
        assert response.json() == []


class TestMe:
    def test_requires_authentication(self, client):
        assert client.get("/api/v1/me/favorites").status_code == 401

    def test_rate_and_favorite(self, client, session, store, consumer):
        business = store.add_business()
        session.sign_in(consumer)

        rated = client.put(f"/api/v1/me/ratings/{business.id}", json={"rating": 5, "review_text": "Great"})
        favorited = client.post(f"/api/v1/me/favorites/{business.id}")
        listed = client.get("/api/v1/me/favorites")

        assert rated.status_code == 200
        assert favorited.status_code == 201
        assert [item["id"] for item in listed.json()["items"]] == [str(business.id)]

    def test_out_of_range_rating(self, client, session, store, consumer):
        business = store.add_business()
        session.sign_in(consumer)

        response = client.put(f"/api/v1/me/ratings/{business.id}", json={"rating": 7})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_RATING"


class TestSupplier:
    def test_consumer_is_forbidden(self, client, session, consumer):
        session.sign_in(consumer)

        assert client.get("/api/v1/supplier/businesses").status_code == 403

    def test_create_and_publish(self, client, session, supplier):
        session.sign_in(supplier)

        created = client.post(
            "/api/v1/supplier/businesses",
            json={"name": "Kasi Coffee", "latitude": -26.2, "longitude": 28.0, "city": "Soweto"},
        )
        business_id = created.json()["id"]
        published = client.post(f"/api/v1/supplier/businesses/{business_id}/publish")

        assert created.status_code == 201
        assert created.json()["status"] == "draft"
        assert published.json()["status"] == "pending"

    def test_invalid_transition_is_conflict(self, client, session, store, supplier):
        business = store.add_business(owner_id=supplier.id, status=BusinessStatus.ACTIVE)
        session.sign_in(supplier)

        response = client.post(f"/api/v1/supplier/businesses/{business.id}/publish")

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_STATUS_TRANSITION"


class TestAdmin:
    def test_supplier_cannot_moderate(self, client, session, store, supplier):
        business = store.add_business(status=BusinessStatus.PENDING)
        session.sign_in(supplier)

        assert client.post(f"/api/v1/admin/businesses/{business.id}/approve").status_code == 403

    def test_admin_listing_sees_every_status(self, client, session, store, admin):
        store.add_business()
        store.add_business(status=BusinessStatus.SUSPENDED)
        session.sign_in(admin)

        response = client.get("/api/v1/admin/businesses", params={"status": "suspended"})

        assert response.status_code == 200
        assert [result["status"] for result in response.json()["results"]] == ["suspended"]

    def test_reject_with_reason(self, client, session, store, admin):
        business = store.add_business(status=BusinessStatus.PENDING)
        session.sign_in(admin)

        response = client.post(f"/api/v1/admin/businesses/{business.id}/reject", json={"reason": "Blurry logo"})

        assert response.status_code == 200
        assert response.json()["status"] == "draft"
        assert response.json()["rejection_reason"] == "Blurry logo"

    def test_stats(self, client, session, store, admin):
        store.add_business()
        store.add_business(status=BusinessStatus.PENDING)
        session.sign_in(admin)

        response = client.get("/api/v1/admin/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["total_businesses"] == 2
        assert body["by_status"]["active"] == 1
        assert body["by_status"]["pending"] == 1
        assert body["by_status"]["suspended"] == 0
        assert body["by_verification_status"] == {"pending": 2, "approved": 0, "rejected": 0}
        assert body["total_ratings"] == 0

    def test_stats_forbidden_for_supplier(self, client, session, supplier):
        session.sign_in(supplier)

        assert client.get("/api/v1/admin/stats").status_code == 403


class TestHealth:
    def test_ready(self, client):
        body = client.get("/api/v1/health/ready").json()

        assert body["status"] == "ready"
        assert body["checks"] == {"database": "healthy", "storage": "healthy"}

    def test_degraded_when_storage_down(self, client, storage):
        storage.fail_ping = True

        body = client.get("/api/v1/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"]["database"] == "healthy"
        assert body["checks"]["storage"].startswith("unhealthy")

    def test_live(self, client):
        assert client.get("/api/v1/health/live").json()["status"] == "alive"


class TestAuthRoutes:
    def test_verify_reports_role(self, client, session):
        user_id = uuid4()
        session.user = AuthUser(id=user_id, role=UserRole.SUPPLIER)

        body = client.get("/api/v1/auth/verify").json()

        assert body == {"valid": True, "user_id": str(user_id), "role": "supplier"}
