"""
Product catalog: create, delete and the listings the shop front renders.

Listings keep insertion order, which is also the order ids are handed out in.
"""
from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from storefront.data.models import Product
from storefront.utils.logger import fmt_fields, get_logger

logger = get_logger("catalog.service")

NEW_COLLECTION_SIZE = 8
POPULAR_SIZE = 4


class CatalogService:
    """Thin persistence wrapper around the products table."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def _all(self) -> List[Product]:
        with self._session_factory() as session:
            return list(session.execute(select(Product).order_by(Product.pk)).scalars())

    def add_product(
        self,
        name: str,
        image: str,
        category: str,
        new_price: float,
        old_price: float,
    ) -> Dict[str, Any]:
        """Insert a product with id = last id + 1 (1 for an empty catalog)."""
        with self._session_factory() as session:
            last = session.execute(select(Product).order_by(Product.pk.desc()).limit(1)).scalar_one_or_none()
            product = Product(
                id=last.id + 1 if last else 1,
                name=name,
                image=image,
                category=category,
                new_price=new_price,
                old_price=old_price,
            )
            session.add(product)
            session.commit()
            session.refresh(product)
            logger.info("catalog: method=add_product %s", fmt_fields(product_id=product.id, category=category))
            return product.to_dict()

    def remove_product(self, product_id: int) -> bool:
        """Delete by id. Returns False when there was nothing to delete."""
        with self._session_factory() as session:
            result = session.execute(delete(Product).where(Product.id == product_id))
            session.commit()
        removed = result.rowcount > 0
        logger.info("catalog: method=remove_product %s", fmt_fields(product_id=product_id, removed=removed))
        return removed

    def all_products(self) -> List[Dict[str, Any]]:
        products = [p.to_dict() for p in self._all()]
        logger.info("catalog: method=all_products %s", fmt_fields(count=len(products)))
        return products

    def new_collections(self) -> List[Dict[str, Any]]:
        """Everything but the first product, then the latest eight of those."""
        products = [p.to_dict() for p in self._all()]
        return products[1:][-NEW_COLLECTION_SIZE:]

    def popular_in_women(self) -> List[Dict[str, Any]]:
        with self._session_factory() as session:
            rows = session.execute(
                select(Product).where(Product.category == "women").order_by(Product.pk).limit(POPULAR_SIZE)
            ).scalars()
            return [p.to_dict() for p in rows]
