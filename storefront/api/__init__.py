"""
API module for the storefront backend.

Provides the REST endpoints used by the shop front and the admin panel.
"""
from storefront.api.models import (
    AddProductRequest,
    CartItemRequest,
    LoginRequest,
    RemoveProductRequest,
    SignupRequest,
    TokenResponse,
)

__all__ = [
    "SignupRequest",
    "LoginRequest",
    "TokenResponse",
    "CartItemRequest",
    "AddProductRequest",
    "RemoveProductRequest",
]
