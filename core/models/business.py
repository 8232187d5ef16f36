# =============================================================================
# core/models/business.py - Business Schemas
# =============================================================================
# A business carries two independent lifecycle dimensions:
# - status: publication state (draft -> pending -> active <-> suspended, * -> archived)
# - verification_status: ownership verification (pending -> approved | rejected)
#
# Rows coming back from the store are validated into `Business` before any
# service touches them.
# =============================================================================

import re
from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import (
    BaseModel,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")
_HTTP_URL = TypeAdapter(HttpUrl)


class UserRole(str, Enum):
    CONSUMER = "consumer"
    SUPPLIER = "supplier"
    ADMIN = "admin"


class BusinessStatus(str, Enum):
    """
    Publication status of a business.

    - draft: being edited by the supplier, or returned after a rejected submission
    - pending: submitted for admin approval
    - active: approved and visible to everyone
    - suspended: hidden by an admin, reversible
    - archived: soft-deleted, terminal

    Flow: draft -> pending -> active <-> suspended, any -> archived
    """
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class VerificationStatus(str, Enum):
    """Ownership verification status (shared by businesses and requests)."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DayOfWeek(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


DAY_ORDER = {day: index for index, day in enumerate(DayOfWeek)}


class Viewer(BaseModel):
    """
    The identity a core operation runs on behalf of.

    Produced from the verified bearer token; the core trusts it as-is.
    """
    id: UUID
    role: UserRole = UserRole.CONSUMER

    model_config = {"frozen": True}

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def can_manage(self, business: "Business") -> bool:
        """Owners and admins may manage a business."""
        return self.is_admin or business.owner_id == self.id


class Business(BaseModel):
    """A business row as stored."""

    id: UUID
    owner_id: UUID
    name: str
    tagline: str | None = None
    description: str | None = None
    email: str | None = None
    phone_number: str | None = None
    whatsapp_number: str | None = None
    website_url: str | None = None
    latitude: float
    longitude: float
    address_line1: str | None = None
    address_line2: str | None = None
    city: str
    province_state: str | None = None
    postal_code: str | None = None
    country: str = "ZA"
    year_established: int | None = None
    employee_count_range: str | None = None
    status: BusinessStatus = BusinessStatus.DRAFT
    verification_status: VerificationStatus = VerificationStatus.PENDING
    verified_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    published_at: datetime | None = None

    @model_validator(mode="after")
    def _verified_at_requires_approval(self) -> "Business":
        if self.verified_at is not None and self.verification_status != VerificationStatus.APPROVED:
            raise ValueError("verified_at is only set on approved businesses")
        return self

    def is_visible_to(self, viewer: Viewer | None) -> bool:
        """Active businesses are public; everything else is owner/admin only."""
        if self.status == BusinessStatus.ACTIVE:
            return True
        return viewer is not None and viewer.can_manage(self)


# =============================================================================
# Input Schemas
# =============================================================================

class _ContactFields(BaseModel):
    """Validation shared by create and update payloads."""

    @field_validator("email", check_fields=False)
    @classmethod
    def _check_email(cls, value: str | None) -> str | None:
        if value is not None and not EMAIL_RE.match(value):
            raise ValueError("invalid email format")
        return value

    @field_validator("phone_number", "whatsapp_number", check_fields=False)
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        if value is not None and not PHONE_RE.match(value):
            raise ValueError("invalid phone number format")
        return value

    @field_validator("website_url", check_fields=False)
    @classmethod
    def _check_website(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError("website_url must be an http(s) URL") from None
        return value

    @field_validator("name", check_fields=False)
    @classmethod
    def _strip_name(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = " ".join(value.split())
        if not 2 <= len(value) <= 255:
            raise ValueError("business name must be 2-255 characters")
        return value

    @field_validator("year_established", check_fields=False)
    @classmethod
    def _check_year(cls, value: int | None) -> int | None:
        if value is not None and not 1800 <= value <= datetime.now().year:
            raise ValueError("year_established must be between 1800 and the current year")
        return value


class BusinessCreate(_ContactFields):
    """
    Payload for registering a new business.

    Example:
        {
            "name": "Kasi Coffee",
            "city": "Johannesburg",
            "latitude": -26.2041,
            "longitude": 28.0473
        }
    """

    name: str = Field(..., description="Display name (2-255 characters)")
    tagline: str | None = Field(default=None, max_length=255)
    description: str | None = None
    email: str | None = None
    phone_number: str | None = None
    whatsapp_number: str | None = None
    website_url: str | None = None
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address_line1: str | None = None
    address_line2: str | None = None
    city: str = Field(..., min_length=1, max_length=120)
    province_state: str | None = None
    postal_code: str | None = None
    country: str = Field(default="ZA", min_length=2, max_length=2)
    year_established: int | None = None
    employee_count_range: str | None = None


class BusinessUpdate(_ContactFields):
    """
    Partial update of descriptive fields.

    Status is deliberately absent: it only moves through the lifecycle
    operations in BusinessService.
    """

    name: str | None = None
    tagline: str | None = Field(default=None, max_length=255)
    description: str | None = None
    email: str | None = None
    phone_number: str | None = None
    whatsapp_number: str | None = None
    website_url: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = Field(default=None, min_length=1, max_length=120)
    province_state: str | None = None
    postal_code: str | None = None
    country: str | None = Field(default=None, min_length=2, max_length=2)
    year_established: int | None = None
    employee_count_range: str | None = None

    @model_validator(mode="after")
    def _coordinates_together(self) -> "BusinessUpdate":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be updated together")
        return self

    def changes(self) -> dict:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class BusinessHoursEntry(BaseModel):
    """Opening hours for one day of the week."""

    day_of_week: DayOfWeek
    opens_at: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    closes_at: str | None = Field(default=None, pattern=r"^\d{2}:\d{2}(:\d{2})?$")
    is_closed: bool = False
    notes: str | None = None

    @model_validator(mode="after")
    def _open_days_need_times(self) -> "BusinessHoursEntry":
        if not self.is_closed and (self.opens_at is None or self.closes_at is None):
            raise ValueError("open days need both opens_at and closes_at")
        return self


# =============================================================================
# Admin Dashboard
# =============================================================================

class BusinessStats(BaseModel):
    """
    Platform counters for the admin dashboard.

    Every status appears in the breakdowns, with zero when no business has it.
    """

    total_businesses: int = 0
    by_status: dict[BusinessStatus, int] = Field(default_factory=dict)
    by_verification_status: dict[VerificationStatus, int] = Field(default_factory=dict)
    total_ratings: int = 0
    total_favorites: int = 0

    @model_validator(mode="after")
    def _fill_breakdowns(self) -> "BusinessStats":
        self.by_status = {status: self.by_status.get(status, 0) for status in BusinessStatus}
        self.by_verification_status = {
            status: self.by_verification_status.get(status, 0) for status in VerificationStatus
        }
        self.total_businesses = sum(self.by_status.values())
        return self
