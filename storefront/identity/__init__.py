"""Shopper identity: password hashing, session tokens and the identity service."""
from storefront.identity.service import IdentityService, empty_cart
from storefront.identity.tokens import TokenCodec

__all__ = ["IdentityService", "TokenCodec", "empty_cart"]
