"""
Custom Exception Classes for OrgCMS

This module defines the exceptions raised by the service layer. Services never
import anything HTTP-specific beyond status codes; the handlers in
`orgcms.exception_handlers` turn these into the JSON error envelope.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in the error envelope."""

    AUTH_FAILED = "AUTH_FAILED"
    AUTH_NO_ORGANIZATION = "AUTH_NO_ORGANIZATION"
    AUTH_PERMISSION_DENIED = "AUTH_PERMISSION_DENIED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_CONTENT_NOT_FOUND = "RESOURCE_CONTENT_NOT_FOUND"
    RESOURCE_REVISION_NOT_FOUND = "RESOURCE_REVISION_NOT_FOUND"
    RESOURCE_ORGANIZATION_NOT_FOUND = "RESOURCE_ORGANIZATION_NOT_FOUND"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_DUPLICATE_RESOURCE = "VALIDATION_DUPLICATE_RESOURCE"
    SCHEDULE_INVALID = "SCHEDULE_INVALID"
    CONTENT_TYPE_UNKNOWN = "CONTENT_TYPE_UNKNOWN"
    STATUS_TRANSITION_INVALID = "STATUS_TRANSITION_INVALID"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    DATABASE_ERROR = "DATABASE_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class CMSError(Exception):
    """Base exception class for all CMS-related exceptions"""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
        error_code: ErrorCode | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        if error_code is not None:
            self.error_code = error_code
        super().__init__(self.message)


# ============================================================================
# Authentication & Authorization Exceptions
# ============================================================================


class AuthenticationError(CMSError):
    """Raised when no valid principal is attached to the request"""

    error_code = ErrorCode.AUTH_FAILED

    def __init__(self, message: str = "Unauthorized", details: dict[str, Any] | None = None):
        super().__init__(message=message, status_code=status.HTTP_401_UNAUTHORIZED, details=details or {})


class NoOrganizationError(AuthenticationError):
    """Raised when the principal has no active organization"""

    error_code = ErrorCode.AUTH_NO_ORGANIZATION

    def __init__(self, message: str = "No organization assigned"):
        super().__init__(message=message)


class AuthorizationError(CMSError):
    """Raised when user lacks permission for an action"""

    error_code = ErrorCode.AUTH_PERMISSION_DENIED

    def __init__(
        self, message: str = "You do not have permission to perform this action", required_permission: str | None = None
    ):
        details = {"required_permission": required_permission} if required_permission else {}
        super().__init__(message=message, status_code=status.HTTP_403_FORBIDDEN, details=details)


# ============================================================================
# Resource Not Found Exceptions
# ============================================================================


class ResourceNotFoundError(CMSError):
    """Base class for resource not found errors.

    Resources outside the caller's organization are reported through this
    same error so a foreign id is indistinguishable from a missing one.
    """

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, resource_type: str, resource_id: Any | None = None):
        message = f"{resource_type} not found"
        if resource_id is not None:
            message = f"{resource_type} with id '{resource_id}' not found"
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ContentNotFoundError(ResourceNotFoundError):
    """Raised when a post, page or product is not found"""

    error_code = ErrorCode.RESOURCE_CONTENT_NOT_FOUND

    def __init__(self, content_type: str = "Content", content_id: Any | None = None):
        super().__init__(resource_type=content_type.capitalize(), resource_id=content_id)


class RevisionNotFoundError(ResourceNotFoundError):
    """Raised when a revision is not found"""

    error_code = ErrorCode.RESOURCE_REVISION_NOT_FOUND

    def __init__(self, revision_id: Any | None = None):
        super().__init__(resource_type="Revision", resource_id=revision_id)


class OrganizationNotFoundError(ResourceNotFoundError):
    """Raised when an organization is not found"""

    error_code = ErrorCode.RESOURCE_ORGANIZATION_NOT_FOUND

    def __init__(self, organization_id: Any | None = None):
        super().__init__(resource_type="Organization", resource_id=organization_id)


# ============================================================================
# Validation & Business Logic Exceptions
# ============================================================================


class ValidationError(CMSError):
    """Raised when input validation fails"""

    error_code = ErrorCode.VALIDATION_FAILED

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(message=message, status_code=status.HTTP_400_BAD_REQUEST, details=error_details)


class InvalidScheduleError(ValidationError):
    """Raised when a publish date is missing or not in the future"""

    error_code = ErrorCode.SCHEDULE_INVALID

    def __init__(self, message: str = "Scheduled date must be in the future", scheduled_at: Any | None = None):
        details = {"scheduled_at": str(scheduled_at)} if scheduled_at is not None else {}
        super().__init__(message=message, field="scheduledAt", details=details)


class UnknownContentTypeError(ValidationError):
    """Raised for a content type outside post/page/product"""

    error_code = ErrorCode.CONTENT_TYPE_UNKNOWN

    def __init__(self, content_type: Any):
        super().__init__(
            message=f"Unknown content type: {content_type}",
            field="contentType",
            details={"content_type": content_type},
        )


class DuplicateResourceError(CMSError):
    """Raised when attempting to create a duplicate resource"""

    error_code = ErrorCode.VALIDATION_DUPLICATE_RESOURCE

    def __init__(self, resource_type: str, field: str, value: Any):
        super().__init__(
            message=f"{resource_type} with {field} '{value}' already exists",
            status_code=status.HTTP_409_CONFLICT,
            details={"resource_type": resource_type, "field": field, "value": value},
        )


class InvalidStatusTransitionError(CMSError):
    """Raised when an invalid status transition is attempted"""

    error_code = ErrorCode.STATUS_TRANSITION_INVALID

    def __init__(self, current_status: str, target_status: str, resource_type: str = "Resource"):
        super().__init__(
            message=f"Cannot transition {resource_type} from '{current_status}' to '{target_status}'",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"resource_type": resource_type, "current_status": current_status, "target_status": target_status},
        )


class FeatureNotImplementedError(CMSError):
    """Raised by endpoints whose backing feature does not exist yet"""

    error_code = ErrorCode.NOT_IMPLEMENTED

    def __init__(self, message: str):
        super().__init__(message=message, status_code=status.HTTP_501_NOT_IMPLEMENTED)


# ============================================================================
# Database & Service Exceptions
# ============================================================================


class DatabaseError(CMSError):
    """Raised when a database operation fails"""

    error_code = ErrorCode.DATABASE_ERROR

    def __init__(self, message: str = "A database error occurred", operation: str | None = None):
        details = {"operation": operation} if operation else {}
        super().__init__(message=message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
