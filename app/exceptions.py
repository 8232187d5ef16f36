# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception taxonomy for the API:
# - 400 InvalidInputError       bad coordinates, rating out of range, empty update
# - 403 PermissionDeniedError   viewer may not act on the resource
# - 404 ResourceNotFoundError   unknown business / media / request / document
# - 409 ConflictError           state or capacity conflicts, lost races
# - 503 InfrastructureError     store or storage gateway unavailable
# - 500 ReviewIntegrityError    the admin review transaction failed and rolled back
#
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class LokoloException(Exception):
    """
    Base exception for the Lokolo API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "LOKOLO_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation Exceptions (400)
# =============================================================================

class InvalidInputError(LokoloException):
    """Raised when caller input fails validation. Never retried."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        suggestion: str | None = None,
        code: str = "VALIDATION_ERROR",
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            suggestion=suggestion,
            details={"field": field} if field else None,
        )


class InvalidCoordinatesError(InvalidInputError):
    """Raised when latitude/longitude are out of range or incomplete."""

    def __init__(self, latitude: Any, longitude: Any):
        super().__init__(
            message=f"Invalid coordinates: latitude={latitude}, longitude={longitude}",
            field="coordinates",
            suggestion="Latitude must be within [-90, 90] and longitude within [-180, 180]; send both or neither",
            code="INVALID_COORDINATES",
        )


class InvalidRatingError(InvalidInputError):
    """Raised when a rating is not an integer between 1 and 5."""

    def __init__(self, rating: Any):
        super().__init__(
            message=f"Rating must be an integer between 1 and 5, got {rating!r}",
            field="rating",
            suggestion="Send a whole number of stars from 1 to 5",
            code="INVALID_RATING",
        )


class EmptyUpdateError(InvalidInputError):
    """Raised when an update carries no fields."""

    def __init__(self, resource: str):
        super().__init__(
            message=f"No fields to update for {resource}",
            suggestion="Include at least one field to change",
            code="EMPTY_UPDATE",
        )


# =============================================================================
# Authorization Exceptions (403)
# =============================================================================

class PermissionDeniedError(LokoloException):
    """Raised when the viewer is not allowed to perform an action."""

    def __init__(self, action: str, reason: str | None = None):
        super().__init__(
            message=f"Not allowed to {action}" + (f": {reason}" if reason else ""),
            code="PERMISSION_DENIED",
            status_code=403,
            suggestion="Sign in as the business owner or an administrator",
            details={"action": action},
        )


# =============================================================================
# Not Found Exceptions (404)
# =============================================================================

class ResourceNotFoundError(LokoloException):
    """Raised when an id doesn't resolve to a row."""

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            message=f"{resource} not found: {resource_id}",
            code=f"{resource.upper().replace(' ', '_')}_NOT_FOUND",
            status_code=404,
            suggestion=f"Check that the {resource.lower()} id is correct",
            details={"id": str(resource_id)},
        )


class BusinessNotFoundError(ResourceNotFoundError):
    def __init__(self, business_id: Any):
        super().__init__("Business", business_id)


class MediaNotFoundError(ResourceNotFoundError):
    def __init__(self, media_id: Any):
        super().__init__("Media", media_id)


class VerificationRequestNotFoundError(ResourceNotFoundError):
    def __init__(self, request_id: Any):
        super().__init__("Verification request", request_id)


class VerificationDocumentNotFoundError(ResourceNotFoundError):
    def __init__(self, document_id: Any):
        super().__init__("Verification document", document_id)


# =============================================================================
# Conflict Exceptions (409)
# =============================================================================

class ConflictError(LokoloException):
    """Raised when the current state forbids the operation. Not retried."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            suggestion=suggestion,
            details=details,
        )


class DuplicateRowError(ConflictError):
    """Raised by the store when a unique constraint rejects an insert."""

    def __init__(self, table: str, constraint: str | None = None):
        super().__init__(
            message=f"Duplicate row in {table}",
            code="DUPLICATE_ROW",
            details={"table": table, "constraint": constraint} if constraint else {"table": table},
        )
        self.table = table
        self.constraint = constraint


class LogoAlreadyExistsError(ConflictError):
    def __init__(self, business_id: Any):
        super().__init__(
            message=f"Business {business_id} already has a logo",
            code="LOGO_ALREADY_EXISTS",
            suggestion="Delete the current logo before saving a new one",
            details={"business_id": str(business_id)},
        )


class PhotoLimitExceededError(ConflictError):
    def __init__(self, business_id: Any, limit: int):
        super().__init__(
            message=f"Cannot add more than {limit} photos per business",
            code="PHOTO_LIMIT_EXCEEDED",
            suggestion="Delete an existing photo first",
            details={"business_id": str(business_id), "limit": limit},
        )


class DocumentLimitExceededError(ConflictError):
    def __init__(self, request_id: Any, limit: int):
        super().__init__(
            message=f"Cannot attach more than {limit} documents to a verification request",
            code="DOCUMENT_LIMIT_EXCEEDED",
            suggestion="Delete a document you no longer need",
            details={"request_id": str(request_id), "limit": limit},
        )


class InvalidStatusTransitionError(ConflictError):
    def __init__(self, business_id: Any, current: str | None, target: str):
        super().__init__(
            message=f"Cannot move business {business_id} from '{current}' to '{target}'",
            code="INVALID_STATUS_TRANSITION",
            suggestion="Reload the business; its status may have changed",
            details={"business_id": str(business_id), "current": current, "target": target},
        )


class BusinessArchivedError(ConflictError):
    def __init__(self, business_id: Any):
        super().__init__(
            message=f"Business {business_id} is archived and can no longer change",
            code="BUSINESS_ARCHIVED",
            suggestion="Register a new business instead",
            details={"business_id": str(business_id)},
        )


class VerificationAlreadyReviewedError(ConflictError):
    def __init__(self, request_id: Any, status: str | None = None):
        super().__init__(
            message=f"Verification request {request_id} has already been reviewed",
            code="VERIFICATION_ALREADY_REVIEWED",
            suggestion="A reviewed request is final; the supplier must submit a new one",
            details={"request_id": str(request_id), "status": status},
        )


class VerificationNotPendingError(ConflictError):
    def __init__(self, request_id: Any, status: str | None = None):
        super().__init__(
            message=f"Documents can only change while request {request_id} is pending",
            code="VERIFICATION_NOT_PENDING",
            suggestion="Submit a new verification request to upload more documents",
            details={"request_id": str(request_id), "status": status},
        )


class VerificationAlreadyPendingError(ConflictError):
    def __init__(self, business_id: Any):
        super().__init__(
            message=f"Business {business_id} already has a pending verification request",
            code="VERIFICATION_ALREADY_PENDING",
            suggestion="Wait for the pending request to be reviewed",
            details={"business_id": str(business_id)},
        )


class BusinessAlreadyVerifiedError(ConflictError):
    def __init__(self, business_id: Any):
        super().__init__(
            message=f"Business {business_id} is already verified",
            code="BUSINESS_ALREADY_VERIFIED",
            details={"business_id": str(business_id)},
        )


# =============================================================================
# Infrastructure Exceptions (503 / 500)
# =============================================================================

class InfrastructureError(LokoloException):
    """A collaborator (database, storage) failed. Transient by nature."""

    def __init__(self, message: str, code: str = "INFRASTRUCTURE_ERROR", details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code=code,
            status_code=503,
            suggestion="Try again later or contact support if the issue persists",
            details=details,
        )


class StoreUnavailableError(InfrastructureError):
    def __init__(self, operation: str, error: str):
        super().__init__(
            message=f"Database call failed during {operation}: {error}",
            code="STORE_UNAVAILABLE",
            details={"operation": operation},
        )
        self.operation = operation


class StorageGatewayError(InfrastructureError):
    def __init__(self, operation: str, path: str, error: str):
        super().__init__(
            message=f"Storage {operation} failed for {path}: {error}",
            code="STORAGE_GATEWAY_ERROR",
            details={"operation": operation, "path": path},
        )
        self.operation = operation
        self.path = path


class ReviewIntegrityError(LokoloException):
    """The review transaction failed; nothing was committed."""

    def __init__(self, request_id: Any, error: str):
        super().__init__(
            message=f"Review of verification request {request_id} was rolled back: {error}",
            code="REVIEW_ROLLED_BACK",
            status_code=500,
            suggestion="Neither the request nor the business changed; it is safe to retry the review",
            details={"request_id": str(request_id)},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def lokolo_exception_handler(
    request: Request,
    exc: LokoloException
) -> JSONResponse:
    """
    Convert LokoloException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
