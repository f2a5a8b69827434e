"""Configuration and error types shared by every storefront component."""
from storefront.core.config import StorefrontConfig, get_config, set_config
from storefront.core.errors import (
    CartConflict,
    DuplicateIdentity,
    IdentityNotFound,
    InvalidCredential,
    InvalidToken,
    MissingToken,
    NotFound,
    StorefrontError,
)

__all__ = [
    "StorefrontConfig",
    "get_config",
    "set_config",
    "StorefrontError",
    "DuplicateIdentity",
    "NotFound",
    "InvalidCredential",
    "MissingToken",
    "InvalidToken",
    "IdentityNotFound",
    "CartConflict",
]
