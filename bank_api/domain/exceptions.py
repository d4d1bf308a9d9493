"""
Custom exceptions for the banking domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database, etc.). Each carries a
stable machine-readable error code used in API error responses.
"""

from typing import Any, Optional


class BankingException(Exception):
    """Base exception for all banking service errors."""

    error_code = "BANKING_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ResourceNotFoundException(BankingException):
    """Raised when a referenced entity does not exist."""

    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            message=f"{resource_type} with ID {resource_id} not found",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class BusinessValidationException(BankingException):
    """Raised when a business rule is violated."""

    error_code = "BUSINESS_VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message=message, details={"field": field} if field else None)
        self.field = field


class DataAccessException(BankingException):
    """Raised when a storage operation fails."""

    error_code = "DATA_ACCESS_ERROR"


class StorageUnavailableException(DataAccessException):
    """Raised when a storage call still fails after all retry attempts."""

    def __init__(self, operation: str, attempts: int, reason: Optional[str] = None):
        message = f"Storage operation '{operation}' failed after {attempts} attempt(s)"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message,
            details={"operation": operation, "attempts": attempts, "reason": reason},
        )
        self.operation = operation
        self.attempts = attempts


class DataMappingException(BankingException):
    """Raised when stored data cannot be mapped to a domain value."""

    error_code = "DATA_MAPPING_ERROR"

    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            message=f"Cannot map {field}={value!r}: {reason}",
            details={"field": field, "value": value, "reason": reason},
        )
