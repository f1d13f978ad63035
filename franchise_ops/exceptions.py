class FranchiseOpsError(Exception):
    """Base exception for Franchise Operations errors."""

    def __init__(self, message=None, code=None, details=None):
        """Initialize the exception.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
        """
        self.message = message or "An error occurred in Franchise Operations"
        self.code = code
        self.details = details
        super().__init__(self.message)

    def __str__(self):
        """String representation of the error."""
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message

    def to_dict(self):
        """Convert the exception to a dictionary."""
        error_dict = {
            'error': self.__class__.__name__,
            'message': self.message,
        }

        if self.code:
            error_dict['code'] = self.code

        if self.details:
            error_dict['details'] = self.details

        return error_dict


class ConfigError(FranchiseOpsError):
    """Exception raised for configuration errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Configuration error"
        super().__init__(message, code, details)


class DatabaseError(FranchiseOpsError):
    """Exception raised for database-related errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Database error"
        super().__init__(message, code, details)


class ValidationError(FranchiseOpsError):
    """Exception raised for data validation errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Validation error"
        super().__init__(message, code, details)


class NotFoundError(FranchiseOpsError):
    """Exception raised when a requested resource is not found."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Resource not found"
        super().__init__(message, code, details)


class CouponNotFoundError(NotFoundError):
    """Exception raised when an order references an unknown coupon code."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Coupon not found"
        super().__init__(message, code, details)


class MaterialNotFoundError(NotFoundError):
    """Exception raised when a raw material does not exist."""

    CODE = -20002

    def __init__(self, message=None, code=None, details=None):
        message = message or "Material ID not found in raw materials"
        super().__init__(message, code or self.CODE, details)


class InsufficientStockError(FranchiseOpsError):
    """Exception raised when a shipment would exceed the available stock."""

    CODE = -20005

    def __init__(self, message=None, code=None, details=None):
        message = message or "Insufficient stock for the material."
        super().__init__(message, code or self.CODE, details)


class PurchaseOrderError(FranchiseOpsError):
    """Exception raised when a purchase order transaction is rolled back."""

    CODE = -20003

    def __init__(self, message=None, code=None, details=None):
        message = message or "An unexpected error occurred"
        super().__init__(message, code or self.CODE, details)


class ReportingError(FranchiseOpsError):
    """Exception raised for reporting errors."""

    def __init__(self, message=None, code=None, details=None):
        message = message or "Reporting error"
        super().__init__(message, code, details)
