"""
Error taxonomy for the storefront services.

Services raise these; the API layer turns them into JSON bodies. Each class
carries the HTTP status and the user-facing message it is reported with.
"""
from typing import Optional


class StorefrontError(Exception):
    """Base class for expected, request-level failures."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


# Identity / login

class DuplicateIdentity(StorefrontError):
    status_code = 400
    message = "Existing user found with same email id or email Address"


class NotFound(StorefrontError):
    """No identity with the supplied email (login)."""
    status_code = 200
    message = "Wrong Email Id"


class InvalidCredential(StorefrontError):
    """Password did not match the stored credential (login)."""
    status_code = 200
    message = "Wrong Password"


# Authentication gate

class MissingToken(StorefrontError):
    status_code = 401
    message = "Please authenticate using valid token"


class InvalidToken(StorefrontError):
    status_code = 401
    message = "Please authenticate using valid token"


# Cart

class IdentityNotFound(StorefrontError):
    """A verified token whose user id no longer resolves to a record."""
    status_code = 404
    message = "User not found"


class CartConflict(StorefrontError):
    """The cart record changed between read and conditional write."""
    status_code = 409
    message = "Cart was modified concurrently, retry"


GENERIC_LOGIN_ERROR = "Invalid email or password"
