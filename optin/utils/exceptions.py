"""
Custom exceptions for popup editor business logic.

Service code raises these; the API layer maps them onto error responses.
"""


class OptinError(Exception):
    """Base exception for all popup editor errors."""

    def __init__(self, message: str, code: str = "OPTIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(OptinError):
    """Resource not found."""

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, f"{resource.upper()}_NOT_FOUND")


class PopupNotFoundError(NotFoundError):
    """Popup not found (or not owned by the current shop)."""

    def __init__(self, identifier=None):
        super().__init__("Popup", identifier)


class ValidationError(OptinError):
    """Invalid input data."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class UploadError(OptinError):
    """Rejected image upload."""

    def __init__(self, message: str, code: str = "UPLOAD_REJECTED", status_code: int = 400):
        self.status_code = status_code
        super().__init__(message, code)


class PersistenceError(OptinError):
    """Database write failed; the caller's draft is left as it was."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message, "DATABASE_ERROR")
