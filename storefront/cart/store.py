"""
Per-user cart vectors.

A cart is a mapping slot -> quantity stored on the user's record. Mutations
read the whole vector, change one slot and write the whole vector back.

Two guards keep concurrent updates from silently clobbering each other:
  - a lock per user id serializes mutations inside this process; the entry
    is dropped once its last holder leaves, so the map only ever holds users
    with a mutation in flight
  - the write is conditional on cart_version, so a writer in another
    process that got in first makes this one fail with CartConflict
    (reported to the client, never retried here)
"""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List

from storefront.core.errors import CartConflict, IdentityNotFound
from storefront.data.user_store import UserStore
from storefront.utils.logger import fmt_fields, get_logger

logger = get_logger("cart.store")

CartVector = Dict[str, int]


def _slot_key(slot: int) -> str:
    if isinstance(slot, bool) or not isinstance(slot, int) or slot < 0:
        raise ValueError(f"slot must be a non-negative integer, got {slot!r}")
    return str(slot)


class CartStore:
    """Increment / decrement / read operations over the users' cart vectors."""

    def __init__(self, users: UserStore) -> None:
        self.users = users
        # user_id -> [lock, number of threads holding or waiting on it]
        self._locks: Dict[str, List] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _user_lock(self, user_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.setdefault(user_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[user_id]

    def _load(self, user_id: str) -> dict:
        record = self.users.find_one(id=user_id)
        if record is None:
            raise IdentityNotFound()
        return record

    def _mutate(self, method: str, user_id: str, slot: int, change: Callable[[CartVector, str], None]) -> CartVector:
        key = _slot_key(slot)
        with self._user_lock(user_id):
            record = self._load(user_id)
            cart = dict(record["cart_data"])
            before = cart.get(key, 0)
            change(cart, key)

            version = record["cart_version"]
            updated = self.users.find_one_and_update(
                {"id": user_id, "cart_version": version},
                {"cart_data": cart, "cart_version": version + 1},
            )
            if updated is None:
                # Nothing matched: either the record is gone or its version moved
                self._load(user_id)
                logger.warning(
                    "cart: method=%s %s", method,
                    fmt_fields(user_id=user_id, slot=key, result="conflict", version=version),
                )
                raise CartConflict()

        logger.info(
            "cart: method=%s %s", method,
            fmt_fields(user_id=user_id, slot=key, before=before, after=cart.get(key, 0)),
        )
        return updated["cart_data"]

    def increment(self, user_id: str, slot: int) -> CartVector:
        """Add one to the quantity at slot. Slots outside the initial range are added."""
        def add_one(cart: CartVector, key: str) -> None:
            cart[key] = cart.get(key, 0) + 1

        return self._mutate("increment", user_id, slot, add_one)

    def decrement(self, user_id: str, slot: int) -> CartVector:
        """Take one from the quantity at slot; an empty or absent slot stays as it is."""
        def remove_one(cart: CartVector, key: str) -> None:
            if cart.get(key, 0) > 0:
                cart[key] -= 1

        # Written back even when nothing changed
        return self._mutate("decrement", user_id, slot, remove_one)

    def read(self, user_id: str) -> CartVector:
        cart = self._load(user_id)["cart_data"]
        logger.info("cart: method=read %s", fmt_fields(user_id=user_id, slots=len(cart)))
        return cart
