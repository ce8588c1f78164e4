"""
Custom exceptions for wellness insights.

Only failures that a caller can act on are exceptions here: store reads and
writes, invalid caller input and the external analysis service. Malformed
stored records, empty inputs and zero baselines are resolved to defined
default values inside the aggregation code and never raise.

Each exception carries:
- A descriptive message
- An error code for API responses
- HTTP status code mapping
- Optional details for debugging
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error codes for consistent API error responses."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Store errors
    DATA_FETCH_FAILED = "DATA_FETCH_FAILED"
    DATA_WRITE_FAILED = "DATA_WRITE_FAILED"

    # Analysis service errors
    ANALYSIS_SERVICE_ERROR = "ANALYSIS_SERVICE_ERROR"
    ANALYSIS_RATE_LIMITED = "ANALYSIS_RATE_LIMITED"
    ANALYSIS_QUOTA_EXHAUSTED = "ANALYSIS_QUOTA_EXHAUSTED"


class WellnessInsightsError(Exception):
    """
    Base exception for all wellness insights errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        status_code: HTTP status code for API responses
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API response."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


# ============================================================================
# Validation Errors (400)
# ============================================================================

class ValidationError(WellnessInsightsError):
    """Raised when caller input validation fails."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if field:
            error_details["field"] = field
        super().__init__(
            message=message,
            code=ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=error_details,
        )


# ============================================================================
# Not Found Errors (404)
# ============================================================================

class NotFoundError(WellnessInsightsError):
    """Raised when a requested record does not exist for the user."""

    def __init__(
        self,
        resource_type: str,
        resource_id: Optional[str] = None,
    ) -> None:
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} '{resource_id}' not found"
        details: Dict[str, Any] = {"resource_type": resource_type}
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(
            message=message,
            code=ErrorCode.NOT_FOUND,
            status_code=404,
            details=details,
        )


# ============================================================================
# Store Errors (503)
# ============================================================================

class DataFetchError(WellnessInsightsError):
    """Raised when the record store cannot be queried.

    Recoverable: a recompute that hits this keeps the previously
    computed state and the caller may retry.
    """

    def __init__(
        self,
        message: str,
        family: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if family:
            error_details["family"] = family
        super().__init__(
            message=message,
            code=ErrorCode.DATA_FETCH_FAILED,
            status_code=503,
            details=error_details,
        )


class DataWriteError(WellnessInsightsError):
    """Raised when a record cannot be written to the store."""

    def __init__(
        self,
        message: str,
        family: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if family:
            error_details["family"] = family
        super().__init__(
            message=message,
            code=ErrorCode.DATA_WRITE_FAILED,
            status_code=503,
            details=error_details,
        )


# ============================================================================
# Analysis Service Errors
# ============================================================================

class AnalysisServiceError(WellnessInsightsError):
    """Raised when the journal analysis service fails."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.ANALYSIS_SERVICE_ERROR,
        status_code: int = 502,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            status_code=status_code,
            details=details,
        )


class AnalysisRateLimitError(AnalysisServiceError):
    """Raised when the analysis service rate limits requests."""

    def __init__(
        self,
        message: str = "Rate limit exceeded. Please try again in a moment.",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            details=details,
            code=ErrorCode.ANALYSIS_RATE_LIMITED,
            status_code=429,
        )


class AnalysisQuotaError(AnalysisServiceError):
    """Raised when the analysis service has no credits left."""

    def __init__(
        self,
        message: str = "AI service credits exhausted. Please add credits to continue.",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message=message,
            details=details,
            code=ErrorCode.ANALYSIS_QUOTA_EXHAUSTED,
            status_code=402,
        )


# ============================================================================
# Configuration Errors (500)
# ============================================================================

class ConfigurationError(WellnessInsightsError):
    """Raised when a required setting is missing."""

    def __init__(self, setting: str, details: Optional[Dict[str, Any]] = None) -> None:
        error_details = details or {}
        error_details["setting"] = setting
        super().__init__(
            message=f"Setting '{setting}' is not configured",
            code=ErrorCode.CONFIGURATION_ERROR,
            status_code=500,
            details=error_details,
        )
