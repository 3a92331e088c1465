"""
Custom Exceptions for Ad Packages API

Hierarchical exception classes for proper error handling across layers.
"""

from typing import Optional, Dict, Any


class AdPackagesError(Exception):
    """Base exception for all Ad Packages errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details
        }


class ValidationError(AdPackagesError):
    """Raised when input validation fails."""
    pass


class DatabaseError(AdPackagesError):
    """Raised when database operations fail."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table
        super().__init__(message, details, original_error)


class NotFoundError(DatabaseError):
    """Raised when a requested resource is not found."""
    pass


class DuplicateError(DatabaseError):
    """Raised when attempting to create a duplicate resource."""
    pass


# =============================================================================
# Billing
# =============================================================================

class PlanNotFoundError(NotFoundError):
    """Raised when a package identifier resolves to no plan."""

    def __init__(self, package_id: str):
        super().__init__(f"No plan found with ID: {package_id}", table="plans")
        self.package_id = package_id
        self.details["package_id"] = package_id


class PackageAlreadyActiveError(AdPackagesError):
    """Raised when the user already holds an active plan of the requested type."""

    def __init__(self, message: str, current_package: Dict[str, Any]):
        super().__init__(message, {"current_package": current_package})
        self.current_package = current_package


class NoActiveSubscriptionError(NotFoundError):
    """Raised when an operation needs an active subscription and none exists."""

    def __init__(self, user_id: str):
        super().__init__(
            "You don't have an active package to cancel",
            table="subscriptions",
        )
        self.user_id = user_id


class ServiceUnavailableError(AdPackagesError):
    """Raised when infrastructure (database, payment provider) cannot be reached."""
    pass


class GatewayUnavailableError(ServiceUnavailableError):
    """Raised when a payment provider is unreachable."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        details = {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details, original_error)
