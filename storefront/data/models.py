"""
SQLAlchemy database models.

users    - shopper identity records, each carrying its cart vector as JSON
products - the catalog the cart slots refer to
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, JSON, String, Text

from storefront.data.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_user_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    """
    Registered shopper.

    cart_data maps slot (decimal string key) -> quantity. cart_version is
    bumped on every cart write and used as the compare-and-swap token.
    """
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_user_id)
    name = Column(String(255), nullable=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    # bcrypt hash; rows migrated from the legacy store may still hold plaintext
    password_hash = Column(Text, nullable=False)
    cart_data = Column(JSON, nullable=False, default=dict)
    cart_version = Column(Integer, nullable=False, default=0)
    date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "cart_data": dict(self.cart_data or {}),
            "cart_version": self.cart_version,
            "date": self.date,
        }


class Product(Base):
    """Catalog entry. ids are small integers assigned as last id + 1."""
    __tablename__ = "products"

    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    image = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    new_price = Column(Float, nullable=False)
    old_price = Column(Float, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    available = Column(Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "image": self.image,
            "category": self.category,
            "new_price": self.new_price,
            "old_price": self.old_price,
            "date": self.date.isoformat() if self.date else None,
            "available": self.available,
        }
