"""
Simple exception classes for the application.

Every error carries a short ``message`` and an ``error`` detail, which the
global handlers render into the response envelope.
"""

from typing import Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for errors rendered into the response envelope."""

    def __init__(self, status_code: int, message: str, error: Optional[str] = None):
        super().__init__(status_code=status_code, detail=error or message)
        self.message = message
        self.error = error or message


class ValidationError(AppError):
    """Raised when input validation fails."""

    def __init__(self, error: str, message: str = "Validation error"):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, error)


class AuthenticationError(AppError):
    """Raised when a request carries no usable credentials."""

    def __init__(self, message: str, error: str):
        super().__init__(status.HTTP_401_UNAUTHORIZED, message, error)


class ForbiddenError(AppError):
    """Raised when a presented token fails verification."""

    def __init__(self, message: str = "Invalid token", error: str = "Token verification failed"):
        super().__init__(status.HTTP_403_FORBIDDEN, message, error)


class NotFoundError(AppError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, error: Optional[str] = None):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            f"{resource_type} not found",
            error or f"{resource_type} does not exist",
        )


class ConflictError(AppError):
    """Raised when there's a conflict with existing data."""

    # Duplicate emails are reported as a plain bad request
    def __init__(self, error: str, message: str = "Conflict with existing data"):
        super().__init__(status.HTTP_400_BAD_REQUEST, message, error)


class ConfigurationError(AppError):
    """Raised when required server configuration is missing."""

    def __init__(self, error: str):
        super().__init__(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", error
        )


# Specific domain exceptions
class ExpenseNotFoundError(NotFoundError):
    """Raised when an expense is not found or belongs to another user."""

    def __init__(self, expense_id: int):
        super().__init__(
            "Expense",
            "The specified expense does not exist or you do not have permission to access it",
        )
        self.expense_id = expense_id


class UserNotFoundError(NotFoundError):
    """Raised when a user is not found."""

    def __init__(self, user_id):
        super().__init__("User", "User does not exist")
        self.user_id = user_id
