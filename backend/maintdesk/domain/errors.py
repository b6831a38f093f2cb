"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error - all errors extend this"""
    
    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400
    
    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert error to API response dict"""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# Authentication & Authorization Errors
class AuthenticationError(DomainError):
    """Token missing, invalid, or expired"""
    error_code = "AUTHENTICATION_ERROR"
    http_status = 401


class AuthorizationError(DomainError):
    """Authenticated user is not an administrator"""
    error_code = "AUTHORIZATION_ERROR"
    http_status = 403


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed (empty response, missing custom range, unknown status)"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found"""
    error_code = "NOT_FOUND"
    http_status = 404


class ReportNotFoundError(NotFoundError):
    """Report not found"""
    error_code = "REPORT_NOT_FOUND"


class StaffNotFoundError(NotFoundError):
    """Staff member not found"""
    error_code = "STAFF_NOT_FOUND"


class TicketNotFoundError(NotFoundError):
    """Support ticket not found"""
    error_code = "TICKET_NOT_FOUND"


# Lifecycle Errors
class InvalidTransitionError(DomainError):
    """Action not valid for the record's current state"""
    error_code = "INVALID_TRANSITION"
    http_status = 409


# Store Errors
class StoreError(DomainError):
    """Record store I/O or network failure"""
    error_code = "STORE_ERROR"
    http_status = 502
