"""
Logging setup for the storefront backend.

Every module logs through a child of the ``storefront`` logger. The tree is
wired up once, on the first get_logger() call: one stdout handler on the
``storefront`` logger and no propagation to the root logger, so uvicorn's
own handlers do not print our lines a second time. The level starts from
LOG_LEVEL and the server entry point moves it to the configured value.
"""
import logging
import os
import sys
from typing import IO, Any, Optional

ROOT_LOGGER = "storefront"
_FORMATTER = logging.Formatter(
    fmt="%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)


def configure_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    Attach the stdout handler to the storefront logger tree.

    Safe to call repeatedly: the handler is added only once, and later calls
    just adjust the level. ``stream`` is only honoured on the first call.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not any(getattr(h, "_storefront", False) for h in root.handlers):
        handler = logging.StreamHandler(stream or sys.stdout)
        handler.setFormatter(_FORMATTER)
        handler._storefront = True
        root.addHandler(handler)
        root.propagate = False
        level = level or os.getenv("LOG_LEVEL", "INFO")
    if level:
        root.setLevel(level.upper())
    return root


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional dotted suffix, e.g. "cart.store" -> "storefront.cart.store"
    """
    root = configure_logging()
    if name:
        return root.getChild(name)
    return root


def set_level(level: str) -> None:
    """Change the level of the whole storefront logger tree."""
    configure_logging(level)


def fmt_fields(**fields: Any) -> str:
    """
    Render key=value pairs in a stable order for operation log lines.

    Secrets never go through here; callers pass ids, slots and results only.
    """
    return " ".join(f"{key}={value}" for key, value in fields.items())
