# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class EcoShareException(Exception):
    """
    Base exception for the EcoShare API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "ECOSHARE_ERROR",
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
# Auth Exceptions
# =============================================================================

class AuthenticationRequiredError(EcoShareException):
    """Raised when an endpoint needs a signed-in user."""

    def __init__(self, reason: str = "Authentication required"):
        super().__init__(
            message=reason,
            code="AUTH_REQUIRED",
            status_code=401,
            suggestion="Sign in with Google (GET /api/auth/google) or use the demo login",
        )


class OAuthLoginError(EcoShareException):
    """Raised when Google returns an unusable profile."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Google login failed: {error}",
            code="OAUTH_FAILED",
            status_code=400,
            suggestion="Start the login again from GET /api/auth/google",
            details={"error": error},
        )


class DemoLoginDisabledError(EcoShareException):
    """Raised when the demo login is switched off."""

    def __init__(self):
        super().__init__(
            message="Demo login is disabled",
            code="DEMO_LOGIN_DISABLED",
            status_code=403,
            suggestion="Sign in with Google instead",
        )


class UserNotFoundError(EcoShareException):
    """Raised when a user ID doesn't exist."""

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User not found: {user_id}",
            code="USER_NOT_FOUND",
            status_code=404,
            details={"user_id": user_id},
        )


# =============================================================================
# Listing Exceptions
# =============================================================================

class ListingNotFoundError(EcoShareException):
    """Raised when a listing ID doesn't exist."""

    def __init__(self, listing_id: str):
        super().__init__(
            message=f"Food listing not found: {listing_id}",
            code="LISTING_NOT_FOUND",
            status_code=404,
            suggestion="Check that the listing id is correct",
            details={"listing_id": listing_id},
        )


class ListingNotOwnedError(EcoShareException):
    """Raised when a user edits a listing they didn't post."""

    def __init__(self, listing_id: str):
        super().__init__(
            message=f"You can only change your own listings: {listing_id}",
            code="LISTING_NOT_OWNED",
            status_code=403,
            details={"listing_id": listing_id},
        )


class ListingUnavailableError(EcoShareException):
    """Raised when reserving a listing that is inactive or past its window."""

    def __init__(self, listing_id: str, reason: str):
        super().__init__(
            message=f"Listing is not available: {reason}",
            code="LISTING_UNAVAILABLE",
            status_code=400,
            suggestion="Browse GET /api/food-listings for listings that are still open",
            details={"listing_id": listing_id, "reason": reason},
        )


class InvalidListingDataError(EcoShareException):
    """Raised when listing input fails validation."""

    def __init__(self, errors: list[Any] | str):
        super().__init__(
            message="Invalid listing data",
            code="INVALID_LISTING_DATA",
            status_code=400,
            suggestion="Provide title, category, location, availableUntil (in the future) and freshnessLevel",
            details={"errors": errors},
        )


# =============================================================================
# Pickup Exceptions
# =============================================================================

class PickupNotFoundError(EcoShareException):
    """Raised when a pickup ID doesn't exist or isn't visible to the user."""

    def __init__(self, pickup_id: str):
        super().__init__(
            message=f"Pickup not found: {pickup_id}",
            code="PICKUP_NOT_FOUND",
            status_code=404,
            details={"pickup_id": pickup_id},
        )


class InvalidPickupError(EcoShareException):
    """Raised when a reservation request is not allowed."""

    def __init__(self, reason: str, listing_id: str | None = None):
        super().__init__(
            message=f"Invalid pickup: {reason}",
            code="INVALID_PICKUP",
            status_code=400,
            details={"listing_id": listing_id} if listing_id else None,
        )


class InvalidStatusTransitionError(EcoShareException):
    """Raised when a pickup status change skips or reverses a step."""

    def __init__(self, current: str, requested: str, allowed: list[str]):
        super().__init__(
            message=f"Cannot change pickup status from '{current}' to '{requested}'",
            code="INVALID_STATUS_TRANSITION",
            status_code=409,
            suggestion=(
                f"Allowed next statuses: {', '.join(allowed)}"
                if allowed else "This pickup is already closed"
            ),
            details={"current": current, "requested": requested, "allowed": allowed},
        )


# =============================================================================
# Notification Exceptions
# =============================================================================

class NotificationNotFoundError(EcoShareException):
    """Raised when a notification doesn't exist or belongs to someone else."""

    def __init__(self, notification_id: str):
        super().__init__(
            message=f"Notification not found: {notification_id}",
            code="NOTIFICATION_NOT_FOUND",
            status_code=404,
            details={"notification_id": notification_id},
        )


# =============================================================================
# Upload Exceptions
# =============================================================================

class InvalidFileTypeError(EcoShareException):
    """Raised when uploaded file type is not allowed."""

    def __init__(self, content_type: str, allowed: list[str]):
        super().__init__(
            message=f"Invalid image type: {content_type}",
            code="INVALID_FILE_TYPE",
            status_code=400,
            suggestion=f"Only these image types are supported: {', '.join(allowed)}",
            details={"content_type": content_type, "allowed_types": allowed},
        )


class FileTooLargeError(EcoShareException):
    """Raised when uploaded file exceeds size limit."""

    def __init__(self, size_mb: float, max_mb: int):
        super().__init__(
            message=f"Image too large: {size_mb:.1f}MB (max: {max_mb}MB)",
            code="FILE_TOO_LARGE",
            status_code=413,
            suggestion=f"Upload an image smaller than {max_mb}MB",
            details={"size_mb": size_mb, "max_mb": max_mb},
        )


class StorageUploadError(EcoShareException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload image to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def ecoshare_exception_handler(
    request: Request,
    exc: EcoShareException
) -> JSONResponse:
    """
    Convert EcoShareException to JSON response.

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
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Schema failures are client errors, so they map to 400 rather than 422.
    """
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": jsonable_encoder(exc.errors()),
        }
    )
