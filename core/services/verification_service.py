# =============================================================================
# core/services/verification_service.py - Verification Workflow
# =============================================================================
# Ownership verification for a business:
#
#   submit()  -> new pending request (business verification reset to pending)
#   add_document() / delete_document()   only while the request is pending
#   review()  -> approved | rejected, applied to request AND business atomically
#
# The review runs as one database transaction with the request row locked,
# so a concurrent second review of the same request loses with a conflict
# instead of double-applying. A failed review leaves both rows untouched.
# =============================================================================

import logging
from uuid import UUID, uuid4

from app.config import MAX_DOCUMENTS_PER_REQUEST, Settings
from app.exceptions import (
    BusinessAlreadyVerifiedError,
    BusinessArchivedError,
    ConflictError,
    DocumentLimitExceededError,
    InfrastructureError,
    InvalidInputError,
    PermissionDeniedError,
    ReviewIntegrityError,
    StorageGatewayError,
    VerificationAlreadyPendingError,
    VerificationAlreadyReviewedError,
    VerificationDocumentNotFoundError,
    VerificationNotPendingError,
    VerificationRequestNotFoundError,
)
from core.models.business import BusinessStatus, VerificationStatus, Viewer
from core.models.media import UploadTicket
from core.models.search import Page, Pagination
from core.models.verification import (
    DocumentCreate,
    DocumentType,
    ReviewDecision,
    VerificationDocument,
    VerificationDocumentWithUrl,
    VerificationRequest,
    VerificationRequestDetail,
)
from core.services.business_service import get_managed_business
from lib.store import MarketplaceStore, StorageGateway
from lib.utils import clamp_limit, clamp_page, file_extension, normalize_uuid, total_pages

logger = logging.getLogger(__name__)


def document_prefix(request_id: UUID) -> str:
    return f"verification/{normalize_uuid(request_id)}/"


class VerificationService:
    """Service for verification requests, their documents and admin review."""

    def __init__(self, store: MarketplaceStore, storage: StorageGateway, settings: Settings):
        self.store = store
        self.storage = storage
        self.settings = settings

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def submit(self, business_id: UUID, viewer: Viewer, notes: str | None = None) -> VerificationRequest:
        """
        Open a new verification request.

        Raises:
            VerificationAlreadyPendingError: If the latest request is still pending
            BusinessAlreadyVerifiedError: If the business is already approved
            BusinessArchivedError: If the business is archived
        """
        business = get_managed_business(self.store, business_id, viewer, "request verification")

        if business.status == BusinessStatus.ARCHIVED:
            raise BusinessArchivedError(business_id)
        if business.verification_status == VerificationStatus.APPROVED:
            raise BusinessAlreadyVerifiedError(business_id)

        latest = self.store.latest_verification_request(business_id)
        if latest is not None and latest.is_pending:
            raise VerificationAlreadyPendingError(business_id)

        request = self.store.submit_verification_request(business_id, viewer.id, notes)
        logger.info(f"Verification request {request.id} submitted for business {business_id}")
        return request

    def get_latest(self, business_id: UUID, viewer: Viewer) -> VerificationRequest | None:
        get_managed_business(self.store, business_id, viewer, "view verification")
        return self.store.latest_verification_request(business_id)

    def get_request(self, request_id: UUID, viewer: Viewer) -> VerificationRequestDetail:
        """A request with its business and documents (with signed URLs)."""
        request = self._load_request(request_id)
        business = get_managed_business(self.store, request.business_id, viewer, "view verification")

        documents = [self._with_url(document) for document in self.store.list_documents(request_id)]
        return VerificationRequestDetail(**request.model_dump(), documents=documents, business=business)

    def list_requests(
        self,
        viewer: Viewer,
        status: VerificationStatus | None = VerificationStatus.PENDING,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[VerificationRequest]:
        """Admin review queue, oldest first."""
        if not viewer.is_admin:
            raise PermissionDeniedError("list verification requests", reason="admin only")

        page = clamp_page(page)
        limit = clamp_limit(limit, self.settings.DEFAULT_PAGE_SIZE, self.settings.MAX_PAGE_SIZE)
        requests, total = self.store.list_verification_requests(status, limit, (page - 1) * limit)

        return Page[VerificationRequest](
            items=requests,
            pagination=Pagination(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)),
        )

    # -------------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------------

    def request_document_upload(
        self,
        request_id: UUID,
        viewer: Viewer,
        file_name: str,
        content_type: str,
        document_type: DocumentType,
        file_size_bytes: int | None = None,
    ) -> UploadTicket:
        request = self._load_pending_for_owner(request_id, viewer)
        self._check_document(content_type, file_size_bytes)

        path = (
            f"{document_prefix(request.id)}{document_type.value}/"
            f"{uuid4().hex}{file_extension(file_name, content_type)}"
        )
        signed = self.storage.create_signed_upload_url(path, content_type, self.settings.UPLOAD_URL_TTL_SECONDS)
        return UploadTicket(
            upload_url=signed.url,
            storage_path=signed.path,
            token=signed.token,
            expires_in=self.settings.UPLOAD_URL_TTL_SECONDS,
        )

    def add_document(self, request_id: UUID, viewer: Viewer, payload: DocumentCreate) -> VerificationDocument:
        """
        Attach an uploaded document to a pending request.

        Raises:
            VerificationNotPendingError: If the request was already reviewed
            DocumentLimitExceededError: If the request is full
        """
        request = self._load_pending_for_owner(request_id, viewer)

        if not payload.storage_path.startswith(document_prefix(request.id)):
            raise InvalidInputError(
                "Storage path does not belong to this verification request",
                field="storage_path",
                suggestion="Use the storage_path returned by the document upload-url endpoint",
            )
        self._check_document(payload.mime_type, payload.file_size_bytes)

        if self.store.count_documents(request_id) >= MAX_DOCUMENTS_PER_REQUEST:
            raise DocumentLimitExceededError(request_id, MAX_DOCUMENTS_PER_REQUEST)

        data = payload.model_dump()
        data["verification_request_id"] = request_id
        document = self.store.insert_document(data)

        logger.info(f"Added {document.document_type.value} document {document.id} to request {request_id}")
        return document

    def delete_document(self, request_id: UUID, document_id: UUID, viewer: Viewer) -> VerificationDocument:
        self._load_pending_for_owner(request_id, viewer)

        document = self.store.delete_document(request_id, document_id)
        if document is None:
            raise VerificationDocumentNotFoundError(document_id)
        logger.info(f"Deleted document {document_id} from request {request_id}")

        try:
            self.storage.delete(document.storage_path)
        except StorageGatewayError as e:
            logger.warning(f"Orphaned storage object {document.storage_path}: {e.message}")
        return document

    # -------------------------------------------------------------------------
    # Review
    # -------------------------------------------------------------------------

    def review(self, request_id: UUID, viewer: Viewer, decision: ReviewDecision) -> VerificationRequest:
        """
        Approve or reject a pending request.

        Approval sets the business to approved and stamps verified_at;
        rejection sets it to rejected and leaves everything else alone.
        Both writes commit together or not at all.

        Raises:
            VerificationAlreadyReviewedError: If the request is not pending
                (including when a concurrent reviewer got there first)
            ReviewIntegrityError: If the transaction failed and rolled back
        """
        if not viewer.is_admin:
            raise PermissionDeniedError("review verification requests", reason="admin only")
        if decision.decision not in (VerificationStatus.APPROVED, VerificationStatus.REJECTED):
            raise InvalidInputError(
                "Decision must be 'approved' or 'rejected'",
                field="decision",
            )

        request = self._load_request(request_id)
        if not request.is_pending:
            raise VerificationAlreadyReviewedError(request_id, request.status.value)

        if decision.decision == VerificationStatus.APPROVED and self.store.count_documents(request_id) == 0:
            raise ConflictError(
                message=f"Verification request {request_id} has no documents",
                code="VERIFICATION_HAS_NO_DOCUMENTS",
                suggestion="A request can only be approved once at least one document is attached",
            )

        try:
            reviewed = self.store.review_verification_request(
                request_id, viewer.id, decision.decision, decision.notes
            )
        except InfrastructureError as e:
            logger.error(f"Review of request {request_id} rolled back: {e.message}")
            raise ReviewIntegrityError(request_id, e.message) from e

        logger.info(
            f"Verification request {request_id} {reviewed.status.value} by {viewer.id} "
            f"(business {reviewed.business_id})"
        )
        return reviewed

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _load_request(self, request_id: UUID) -> VerificationRequest:
        request = self.store.get_verification_request(request_id)
        if request is None:
            raise VerificationRequestNotFoundError(request_id)
        return request

    def _load_pending_for_owner(self, request_id: UUID, viewer: Viewer) -> VerificationRequest:
        request = self._load_request(request_id)
        get_managed_business(self.store, request.business_id, viewer, "change verification documents")
        if not request.is_pending:
            raise VerificationNotPendingError(request_id, request.status.value)
        return request

    def _check_document(self, content_type: str | None, file_size_bytes: int | None) -> None:
        allowed = self.settings.allowed_document_types_list
        if content_type is not None and content_type.lower() not in allowed:
            raise InvalidInputError(
                f"Unsupported document type: {content_type}",
                field="content_type",
                suggestion=f"Use one of: {', '.join(allowed)}",
            )
        if file_size_bytes is not None and file_size_bytes > self.settings.max_document_size_bytes:
            raise InvalidInputError(
                f"Document is larger than {self.settings.MAX_DOCUMENT_SIZE_MB} MB",
                field="file_size_bytes",
            )

    def _with_url(self, document: VerificationDocument) -> VerificationDocumentWithUrl:
        try:
            url = self.storage.create_signed_download_url(
                document.storage_path, self.settings.DOWNLOAD_URL_TTL_SECONDS
            )
        except StorageGatewayError as e:
            logger.warning(f"No URL for document {document.id}: {e.message}")
            url = None
        return VerificationDocumentWithUrl(**document.model_dump(), url=url)
