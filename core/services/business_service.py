# =============================================================================
# core/services/business_service.py - Business Lifecycle
# =============================================================================
# Supplier CRUD plus the publication state machine:
#
#   draft --publish--> pending --approve--> active <--suspend/reactivate--> suspended
#                        |
#                        +--reject--> draft (with rejection_reason)
#   any non-archived --archive--> archived (terminal)
#
# Every transition is a compare-and-set on the current status, so two
# concurrent transitions of the same business cannot both apply.
# verification_status is never touched here; see verification_service.py.
# =============================================================================

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from app.config import Settings
from app.exceptions import (
    BusinessArchivedError,
    BusinessNotFoundError,
    EmptyUpdateError,
    InvalidInputError,
    InvalidStatusTransitionError,
    PermissionDeniedError,
)
from core.models.business import (
    DAY_ORDER,
    Business,
    BusinessCreate,
    BusinessHoursEntry,
    BusinessStats,
    BusinessStatus,
    BusinessUpdate,
    UserRole,
    VerificationStatus,
    Viewer,
)
from lib.store import MarketplaceStore

logger = logging.getLogger(__name__)


# =============================================================================
# Access Helpers
# =============================================================================

def get_visible_business(store: MarketplaceStore, business_id: UUID, viewer: Viewer | None) -> Business:
    """
    Load a business the viewer is allowed to see.

    Non-active businesses are reported as not found to everyone except the
    owner and admins, so their existence isn't leaked.
    """
    business = store.get_business(business_id)
    if business is None or not business.is_visible_to(viewer):
        raise BusinessNotFoundError(business_id)
    return business


def get_managed_business(
    store: MarketplaceStore,
    business_id: UUID,
    viewer: Viewer,
    action: str,
) -> Business:
    """Load a business the viewer owns (or any business, for admins)."""
    business = get_visible_business(store, business_id, viewer)
    if not viewer.can_manage(business):
        raise PermissionDeniedError(action, reason="only the owner or an admin can do this")
    return business


# =============================================================================
# Transition Table
# =============================================================================

@dataclass(frozen=True)
class Transition:
    allowed_from: frozenset[BusinessStatus]
    target: BusinessStatus
    admin_only: bool


TRANSITIONS: dict[str, Transition] = {
    "publish": Transition(frozenset({BusinessStatus.DRAFT}), BusinessStatus.PENDING, admin_only=False),
    "approve": Transition(frozenset({BusinessStatus.PENDING}), BusinessStatus.ACTIVE, admin_only=True),
    "reject": Transition(frozenset({BusinessStatus.PENDING}), BusinessStatus.DRAFT, admin_only=True),
    "suspend": Transition(frozenset({BusinessStatus.ACTIVE}), BusinessStatus.SUSPENDED, admin_only=True),
    "reactivate": Transition(frozenset({BusinessStatus.SUSPENDED}), BusinessStatus.ACTIVE, admin_only=True),
    "archive": Transition(
        frozenset({
            BusinessStatus.DRAFT,
            BusinessStatus.PENDING,
            BusinessStatus.ACTIVE,
            BusinessStatus.SUSPENDED,
        }),
        BusinessStatus.ARCHIVED,
        admin_only=False,
    ),
}


def find_transition(current: BusinessStatus, target: BusinessStatus) -> str | None:
    """Name of the transition moving `current` to `target`, if there is one."""
    for name, transition in TRANSITIONS.items():
        if transition.target == target and current in transition.allowed_from:
            return name
    return None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class BusinessService:
    """
    Service for business registration, editing and status transitions.

    Example:
        service = BusinessService(store, settings)
        business = service.create(viewer, BusinessCreate(...))
        service.publish(business.id, viewer)
    """

    def __init__(self, store: MarketplaceStore, settings: Settings):
        self.store = store
        self.settings = settings

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create(self, viewer: Viewer, payload: BusinessCreate) -> Business:
        """
        Register a new business owned by the viewer.

        Starts as draft with verification pending.
        """
        if viewer.role not in (UserRole.SUPPLIER, UserRole.ADMIN):
            raise PermissionDeniedError("register a business", reason="a supplier account is required")

        data = payload.model_dump(exclude_none=True)
        data.update(
            owner_id=viewer.id,
            status=BusinessStatus.DRAFT,
            verification_status=VerificationStatus.PENDING,
        )
        business = self.store.insert_business(data)
        logger.info(f"Created business {business.id} for owner {viewer.id}")
        return business

    def get(self, business_id: UUID, viewer: Viewer | None) -> Business:
        return get_visible_business(self.store, business_id, viewer)

    def list_owned(self, viewer: Viewer) -> list[Business]:
        return self.store.list_businesses_by_owner(viewer.id)

    def update(self, business_id: UUID, viewer: Viewer, payload: BusinessUpdate) -> Business:
        """
        Apply a partial update of descriptive fields.

        Raises:
            EmptyUpdateError: If the payload carries no fields
            BusinessArchivedError: If the business is archived
        """
        changes = payload.changes()
        if not changes:
            raise EmptyUpdateError("business")

        business = get_managed_business(self.store, business_id, viewer, "edit this business")
        if business.status == BusinessStatus.ARCHIVED:
            raise BusinessArchivedError(business_id)

        updated = self.store.update_business(business_id, changes)
        if updated is None:
            raise BusinessNotFoundError(business_id)

        logger.info(f"Updated business {business_id}: {sorted(changes)}")
        return updated

    # -------------------------------------------------------------------------
    # Categories & Hours
    # -------------------------------------------------------------------------

    def get_categories(self, business_id: UUID, viewer: Viewer | None) -> list[str]:
        get_visible_business(self.store, business_id, viewer)
        return self.store.get_categories(business_id)

    def replace_categories(self, business_id: UUID, viewer: Viewer, categories: list[str]) -> list[str]:
        business = get_managed_business(self.store, business_id, viewer, "edit categories")
        if business.status == BusinessStatus.ARCHIVED:
            raise BusinessArchivedError(business_id)

        cleaned = sorted({name.strip() for name in categories if name and name.strip()})
        return self.store.replace_categories(business_id, cleaned)

    def get_hours(self, business_id: UUID, viewer: Viewer | None) -> list[BusinessHoursEntry]:
        get_visible_business(self.store, business_id, viewer)
        return sort_hours(self.store.get_hours(business_id))

    def replace_hours(
        self,
        business_id: UUID,
        viewer: Viewer,
        entries: list[BusinessHoursEntry],
    ) -> list[BusinessHoursEntry]:
        business = get_managed_business(self.store, business_id, viewer, "edit opening hours")
        if business.status == BusinessStatus.ARCHIVED:
            raise BusinessArchivedError(business_id)

        days = [entry.day_of_week for entry in entries]
        if len(days) != len(set(days)):
            raise InvalidInputError("Each day of the week may appear only once", field="hours")

        return sort_hours(self.store.replace_hours(business_id, entries))

    # -------------------------------------------------------------------------
    # Status Transitions
    # -------------------------------------------------------------------------

    def publish(self, business_id: UUID, viewer: Viewer) -> Business:
        """Submit a draft for admin approval. Clears any previous rejection reason."""
        return self._transition("publish", business_id, viewer, {"rejection_reason": None})

    def approve(self, business_id: UUID, viewer: Viewer) -> Business:
        """Make a pending business active. Stamps published_at on first activation."""
        return self._transition("approve", business_id, viewer)

    def reject(self, business_id: UUID, viewer: Viewer, reason: str | None = None) -> Business:
        """Return a pending business to draft with the reason attached."""
        return self._transition("reject", business_id, viewer, {"rejection_reason": reason})

    def suspend(self, business_id: UUID, viewer: Viewer) -> Business:
        return self._transition("suspend", business_id, viewer)

    def reactivate(self, business_id: UUID, viewer: Viewer) -> Business:
        return self._transition("reactivate", business_id, viewer)

    def archive(self, business_id: UUID, viewer: Viewer) -> Business:
        """Soft-delete. Archived businesses cannot come back."""
        return self._transition("archive", business_id, viewer)

    def set_status(
        self,
        business_id: UUID,
        viewer: Viewer,
        target: BusinessStatus,
        reason: str | None = None,
    ) -> Business:
        """
        Admin entry point: move a business to `target` via the matching transition.

        Raises:
            InvalidStatusTransitionError: If no transition leads from the
                current status to `target`
        """
        if not viewer.is_admin:
            raise PermissionDeniedError("change business status", reason="admin only")

        business = get_visible_business(self.store, business_id, viewer)
        name = find_transition(business.status, target)
        if name is None:
            raise InvalidStatusTransitionError(business_id, business.status.value, target.value)

        extra = {"rejection_reason": reason} if name == "reject" else None
        return self._transition(name, business_id, viewer, extra, business=business)

    def stats(self, viewer: Viewer) -> BusinessStats:
        """Platform counters for the admin dashboard."""
        if not viewer.is_admin:
            raise PermissionDeniedError("view platform statistics", reason="admin only")
        return self.store.business_stats()

    def _transition(
        self,
        name: str,
        business_id: UUID,
        viewer: Viewer,
        extra: dict | None = None,
        business: Business | None = None,
    ) -> Business:
        transition = TRANSITIONS[name]

        if transition.admin_only and not viewer.is_admin:
            raise PermissionDeniedError(f"{name} a business", reason="admin only")

        if business is None:
            business = get_managed_business(self.store, business_id, viewer, f"{name} this business")

        if business.status not in transition.allowed_from:
            raise InvalidStatusTransitionError(business_id, business.status.value, transition.target.value)

        changes = {"status": transition.target}
        if extra:
            changes.update(extra)
        if transition.target == BusinessStatus.ACTIVE and business.published_at is None:
            changes["published_at"] = _now()

        updated = self.store.transition_business_status(
            business_id,
            sorted(transition.allowed_from, key=lambda status: status.value),
            changes,
        )
        if updated is None:
            # Someone else moved it first; report what it is now
            current = self.store.get_business(business_id)
            if current is None:
                raise BusinessNotFoundError(business_id)
            raise InvalidStatusTransitionError(business_id, current.status.value, transition.target.value)

        logger.info(
            f"Business {business_id} {name}: {business.status.value} -> {updated.status.value} "
            f"(by {viewer.id})"
        )
        return updated


def sort_hours(entries: list[BusinessHoursEntry]) -> list[BusinessHoursEntry]:
    """Monday first."""
    return sorted(entries, key=lambda entry: DAY_ORDER[entry.day_of_week])
