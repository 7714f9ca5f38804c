"""Typed application errors mapped to HTTP status codes at the API boundary."""
from typing import Any, Dict, Optional


class SoundVaultError(Exception):
    """Base class for all errors raised by SoundVault services."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(SoundVaultError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(SoundVaultError):
    """No session, or the session is invalid or stale."""

    status_code = 401
    default_message = "Not authenticated. Please login."


class ForbiddenError(SoundVaultError):
    """Authenticated but not allowed."""

    status_code = 403
    default_message = "Access denied"


class NotFoundError(SoundVaultError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(SoundVaultError):
    """Duplicate username or email."""

    status_code = 409
    default_message = "Resource already exists"


class InternalError(SoundVaultError):
    status_code = 500
