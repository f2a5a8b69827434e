"""Product catalog and image uploads."""
from storefront.catalog.service import CatalogService
from storefront.catalog.uploads import IMAGES_ROUTE, ImageStorage

__all__ = ["CatalogService", "ImageStorage", "IMAGES_ROUTE"]
