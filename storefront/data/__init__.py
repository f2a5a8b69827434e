"""Persistence: SQLAlchemy engine/session, models and the user record store."""
from storefront.data.database import Base, Database
from storefront.data.models import Product, User
from storefront.data.user_store import UserStore

__all__ = ["Base", "Database", "User", "Product", "UserStore"]
