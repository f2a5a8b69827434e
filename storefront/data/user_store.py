"""
Document-style access to user identity records.

Exposes the three calls the identity and cart services are written against:
find_one(filter), save(record) and find_one_and_update(filter, patch).
Records are plain dicts (see User.to_record). Each call runs in its own
transaction; database errors propagate to the caller.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from storefront.core.errors import DuplicateIdentity
from storefront.data.models import User
from storefront.utils.logger import fmt_fields, get_logger

logger = get_logger("data.user_store")

_FILTER_FIELDS = {"id", "email", "cart_version"}
_PATCH_FIELDS = {"name", "password_hash", "cart_data", "cart_version"}


def _where(filter_: Dict[str, Any]):
    unknown = set(filter_) - _FILTER_FIELDS
    if unknown:
        raise ValueError(f"Unsupported filter fields: {sorted(unknown)}")
    return [getattr(User, key) == value for key, value in filter_.items()]


class UserStore:
    """Users table wrapped in find/save/update calls."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def find_one(self, **filter_: Any) -> Optional[Dict[str, Any]]:
        """Return the first record matching all filter fields, or None."""
        with self._session_factory() as session:
            user = session.execute(select(User).where(*_where(filter_)).limit(1)).scalar_one_or_none()
            return user.to_record() if user else None

    def save(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new record and return it with defaults filled in.

        The unique index on email backs up the caller's pre-check: a
        concurrent signup that slipped past it surfaces as DuplicateIdentity.
        """
        user = User(**record)
        with self._session_factory() as session:
            session.add(user)
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.info("user_store: method=save %s", fmt_fields(result="duplicate", error=e.orig))
                raise DuplicateIdentity() from e
            session.refresh(user)
            logger.debug("user_store: method=save %s", fmt_fields(user_id=user.id, result="success"))
            return user.to_record()

    def find_one_and_update(self, filter_: Dict[str, Any], patch: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply patch to the record matching filter and return the updated record.

        Returns None when nothing matched, which is how a compare-and-swap
        on cart_version reports that it lost.
        """
        unknown = set(patch) - _PATCH_FIELDS
        if unknown:
            raise ValueError(f"Unsupported patch fields: {sorted(unknown)}")
        with self._session_factory() as session:
            result = session.execute(
                update(User).where(*_where(filter_)).values(**patch).execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                session.rollback()
                return None
            session.commit()
            lookup = {"id": filter_["id"]} if "id" in filter_ else {"email": filter_["email"]}
            user = session.execute(select(User).where(*_where(lookup))).scalar_one_or_none()
            return user.to_record() if user else None
