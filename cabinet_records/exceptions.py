"""Custom exception hierarchy for the records core."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes surfaced to callers."""

    # Lookup errors
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    CABINET_NOT_FOUND = "CABINET_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"

    # Input validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MANDATORY_FIELD_MISSING = "MANDATORY_FIELD_MISSING"
    INVALID_TEXT = "INVALID_TEXT"
    CHARACTER_LIMIT_EXCEEDED = "CHARACTER_LIMIT_EXCEEDED"
    INVALID_NUMBER = "INVALID_NUMBER"
    INVALID_CURRENCY = "INVALID_CURRENCY"
    INVALID_DATETIME = "INVALID_DATETIME"
    INVALID_BOOLEAN = "INVALID_BOOLEAN"
    INVALID_TAGS = "INVALID_TAGS"
    MISSING_FILE_INFO = "MISSING_FILE_INFO"

    # Workflow
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    FORBIDDEN = "FORBIDDEN"

    # Infrastructure
    STORAGE_ERROR = "STORAGE_ERROR"
    PDF_PROCESSING_FAILED = "PDF_PROCESSING_FAILED"


class RecordsException(Exception):
    """
    Base exception for all records-core errors.

    Provides structured errors with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for a JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class RecordNotFoundError(RecordsException):
    """Record not found in database."""

    def __init__(self, record_id: str):
        super().__init__(
            "Record not found",
            ErrorCode.RECORD_NOT_FOUND,
            status_code=404,
            details={"record_id": record_id}
        )


class NoOtherVersionsError(RecordsException):
    """A record has no modification snapshots."""

    def __init__(self, record_id: str):
        super().__init__(
            "No versions found for this record",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"record_id": record_id}
        )


class CabinetNotFoundError(RecordsException):
    """Cabinet not found in database."""

    def __init__(self, cabinet_id: str):
        super().__init__(
            "Cabinet not found",
            ErrorCode.CABINET_NOT_FOUND,
            status_code=404,
            details={"cabinet_id": cabinet_id}
        )


class UserNotFoundError(RecordsException):
    """User not found in database."""

    def __init__(self, user_id: str):
        super().__init__(
            "User not found",
            ErrorCode.USER_NOT_FOUND,
            status_code=404,
            details={"user_id": user_id}
        )


class VersionNotFoundError(RecordsException):
    """Record version not found in database."""

    def __init__(self, version_id: str):
        super().__init__(
            "Version not found",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"version_id": version_id}
        )


class ValidationError(RecordsException):
    """Validation failed for user input."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            error_code,
            status_code=400,
            details=details
        )
        self.field = field


class MandatoryFieldMissingError(ValidationError):
    """A mandatory custom field was not supplied."""

    def __init__(self, field_name: str):
        super().__init__(
            f"Field '{field_name}' is mandatory",
            field=field_name,
            error_code=ErrorCode.MANDATORY_FIELD_MISSING,
        )


class InvalidFieldValueError(ValidationError):
    """A custom field value failed its type-specific check."""

    def __init__(self, field_name: str, reason: str, error_code: ErrorCode):
        super().__init__(
            f"Field '{field_name}' {reason}",
            field=field_name,
            error_code=error_code,
        )
        self.reason = reason


class InvalidStateTransitionError(RecordsException):
    """Requested operation is not allowed in the record's current state."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            ErrorCode.INVALID_STATE_TRANSITION,
            status_code=400,
            details=details,
        )


class ForbiddenError(RecordsException):
    """Caller lacks permission for the requested action."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
        )


class StorageError(RecordsException):
    """Object storage provider call failed."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.STORAGE_ERROR,
            status_code=502,
            details={"key": key} if key else {},
        )


class PdfProcessingError(RecordsException):
    """PDF parsing failed."""

    def __init__(self, message: str = "Failed to process PDF file"):
        super().__init__(
            message,
            ErrorCode.PDF_PROCESSING_FAILED,
            status_code=500,
        )
