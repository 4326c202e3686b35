"""
Utility modules for Opt-in Popups.
"""
from .logging_config import setup_logging
from .errors import (
    ErrorCode,
    error_response,
    bad_request,
    unauthorized,
    forbidden,
    not_found,
    internal_error
)
from .exceptions import (
    OptinError,
    NotFoundError,
    PopupNotFoundError,
    ValidationError,
    UploadError,
    PersistenceError
)
