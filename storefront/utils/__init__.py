"""Shared helpers."""
from storefront.utils.logger import configure_logging, fmt_fields, get_logger, set_level

__all__ = ["configure_logging", "get_logger", "set_level", "fmt_fields"]
