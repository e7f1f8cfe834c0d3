"""
Application Exceptions

Every error the API reports on purpose derives from AppError. Each class
carries the HTTP status it maps to; the handler registered in app.main
renders them as {"error": true, "message": ...}.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# =============================================================================
# AUTHENTICATION / AUTHORIZATION
# =============================================================================

class AuthError(AppError):
    """Base class for access guard failures."""
    status_code = 401
    default_message = "Authorization required"


class MissingCredentialError(AuthError):
    """No Authorization header on a guarded request."""
    status_code = 401
    default_message = "Authorization required"


class InvalidCredentialError(AuthError):
    """Bearer token is malformed, expired or badly signed."""
    status_code = 401
    default_message = "Invalid or expired token"


class ForbiddenError(AuthError):
    """Caller is authenticated but not allowed to perform the operation."""
    status_code = 403
    default_message = "Forbidden access"


class InvalidClaimsError(AppError):
    """Claims posted for signing cannot round-trip through a token."""
    status_code = 400
    default_message = "Invalid token claims"


# =============================================================================
# STORE / PAYMENTS
# =============================================================================

class InvalidIdentifierError(AppError):
    """Path or body identifier is not a valid document id."""
    status_code = 400
    default_message = "Invalid id"


class StoreError(AppError):
    """Underlying document store operation failed."""
    status_code = 500
    default_message = "Database operation failed"


class PaymentProcessorError(AppError):
    """External payment processor rejected or failed the request."""
    status_code = 500
    default_message = "Payment processing error"

    def __init__(self, message: Optional[str] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code
