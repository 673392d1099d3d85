# Shared error taxonomy, correlation IDs and logging setup
from .errors import (
    ErrorCode,
    JournalError,
    AuthenticationError,
    ValidationError,
    NotFoundError,
    PersistenceError,
    UpstreamServiceError,
    EmptyGenerationError,
)

__all__ = [
    "ErrorCode",
    "JournalError",
    "AuthenticationError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "UpstreamServiceError",
    "EmptyGenerationError",
]
