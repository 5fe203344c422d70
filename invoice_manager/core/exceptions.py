"""
Domain exceptions raised by the service layer.

Each exception carries an HTTP status so the handlers registered in
``invoice_manager.main`` can translate it without a lookup table.
"""


class InvoiceManagerError(Exception):
    """Base exception for the application."""

    status_code = 500

    def __init__(self, message: str = "An unexpected error occurred"):
        super().__init__(message)
        self.message = message


class ValidationError(InvoiceManagerError):
    """Raised when input is missing or malformed."""

    status_code = 400


class DuplicateError(ValidationError):
    """Raised when a unique field (username, email, ...) is already taken."""

    pass


class InvalidTransitionError(ValidationError):
    """Raised when an invoice status change is not allowed."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change invoice status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class AuthenticationError(InvoiceManagerError):
    """Raised when credentials or tokens are missing or invalid."""

    status_code = 401


class AuthorizationError(InvoiceManagerError):
    """Raised when an authenticated user lacks the required role."""

    status_code = 403


class NotFoundError(InvoiceManagerError):
    """Raised when a resource is not found."""

    status_code = 404


class ConflictError(InvoiceManagerError):
    """Raised when a write collides with a concurrent modification."""

    status_code = 409
