"""Shopper cart vectors."""
from storefront.cart.store import CartStore, CartVector

__all__ = ["CartStore", "CartVector"]
