"""Error kinds raised by the authentication flow."""
from __future__ import annotations

from typing import Optional

from .flash import FlashMessage


class AuthError(Exception):
    """Base class for failures that are reported back to the browser."""

    message = "Something went wrong."
    category = "error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)

    def flash(self) -> FlashMessage:
        return FlashMessage(category=self.category, message=str(self))


class ValidationError(AuthError):
    message = "Both email and password are required"


class DuplicateEmailError(AuthError):
    message = "Email is not unique"


class CredentialMismatchError(AuthError):
    message = "Email and password do not match"


class ServiceUnavailableError(AuthError):
    """Raised when the credential store cannot be reached or fails unexpectedly."""

    message = "The service is temporarily unavailable. Please try again."


__all__ = [
    "AuthError",
    "CredentialMismatchError",
    "DuplicateEmailError",
    "ServiceUnavailableError",
    "ValidationError",
]
