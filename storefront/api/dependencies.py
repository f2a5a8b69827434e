"""
FastAPI dependencies.

Services live on app.state (built once by create_app). current_user_id is the
authentication gate: a cart route cannot run without it resolving.
"""
from typing import Optional

from fastapi import Depends, Header, Request

from storefront.cart.store import CartStore
from storefront.catalog.service import CatalogService
from storefront.catalog.uploads import ImageStorage
from storefront.identity.service import IdentityService


def get_identity(request: Request) -> IdentityService:
    return request.app.state.identity


def get_cart_store(request: Request) -> CartStore:
    return request.app.state.carts


def get_catalog(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.images


def current_user_id(
    auth_token: Optional[str] = Header(default=None, alias="auth-token"),
    identity: IdentityService = Depends(get_identity),
) -> str:
    """Verify the auth-token header and return the user id it was issued for."""
    return identity.verify_token(auth_token)
