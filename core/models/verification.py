# =============================================================================
# core/models/verification.py - Verification Schemas
# =============================================================================
# A verification request is the supplier's ownership claim. It collects
# documents while pending and is reviewed exactly once by an admin.
# =============================================================================

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from core.models.business import Business, VerificationStatus


class DocumentType(str, Enum):
    """Categories of supporting evidence."""
    ID_DOCUMENT = "id_document"
    BUSINESS_REGISTRATION = "business_registration"
    OWNERSHIP_PROOF = "ownership_proof"
    BBBEE_CERTIFICATE = "bbbee_certificate"
    SHARE_CERTIFICATE = "share_certificate"
    OTHER = "other"


class VerificationRequest(BaseModel):
    id: UUID
    business_id: UUID
    submitted_by: UUID
    status: VerificationStatus = VerificationStatus.PENDING
    notes: str | None = None
    reviewed_by: UUID | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == VerificationStatus.PENDING


class VerificationDocument(BaseModel):
    id: UUID
    verification_request_id: UUID
    document_type: DocumentType
    storage_path: str
    file_name: str
    file_size_bytes: int | None = None
    mime_type: str | None = None
    created_at: datetime | None = None


class VerificationDocumentWithUrl(VerificationDocument):
    url: str | None = None


class VerificationRequestDetail(VerificationRequest):
    """A request with its documents (signed URLs) and the business it concerns."""

    documents: list[VerificationDocumentWithUrl] = Field(default_factory=list)
    business: Business | None = None


# =============================================================================
# Input Schemas
# =============================================================================

class VerificationSubmit(BaseModel):
    notes: str | None = Field(default=None, max_length=2000)


class DocumentUploadRequest(BaseModel):
    file_name: str = Field(..., min_length=1, max_length=255)
    content_type: str
    document_type: DocumentType
    file_size_bytes: int | None = Field(default=None, ge=1)


class DocumentCreate(BaseModel):
    """Body for attaching an uploaded document to a request."""

    document_type: DocumentType
    storage_path: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size_bytes: int | None = Field(default=None, ge=1)
    mime_type: str | None = None


class ReviewDecision(BaseModel):
    """
    Admin decision on a verification request.

    `decision` must be approved or rejected; pending is refused by the service.
    """

    decision: VerificationStatus
    notes: str | None = Field(default=None, max_length=2000)
