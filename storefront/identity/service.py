"""
Identity service: signup, login and token verification.

Every cart request passes through verify_token() first; the user id it
returns is the only identity the cart store ever sees.
"""
from __future__ import annotations

from typing import Dict, Optional

from storefront.core.config import StorefrontConfig
from storefront.core.errors import (
    GENERIC_LOGIN_ERROR,
    DuplicateIdentity,
    InvalidCredential,
    NotFound,
)
from storefront.data.models import new_user_id
from storefront.data.user_store import UserStore
from storefront.identity.passwords import hash_password, needs_rehash, verify_password
from storefront.identity.tokens import TokenCodec
from storefront.utils.logger import fmt_fields, get_logger

logger = get_logger("identity.service")


def empty_cart(slots: int) -> Dict[str, int]:
    """A cart vector with every slot 0..slots-1 set to zero."""
    return {str(i): 0 for i in range(slots)}


class IdentityService:
    """Registers shoppers, checks their credentials and issues session tokens."""

    def __init__(self, config: StorefrontConfig, users: UserStore, tokens: Optional[TokenCodec] = None) -> None:
        self.config = config
        self.users = users
        self.tokens = tokens or TokenCodec(config)

    def register(self, name: Optional[str], email: str, password: str) -> str:
        """Create a new identity and return a token for it."""
        # Exact match on email as supplied; no case folding
        if self.users.find_one(email=email) is not None:
            logger.info("identity: method=register %s", fmt_fields(result="duplicate"))
            raise DuplicateIdentity()

        record = self.users.save({
            "id": new_user_id(),
            "name": name,
            "email": email,
            "password_hash": hash_password(password, rounds=self.config.bcrypt_rounds),
            "cart_data": empty_cart(self.config.cart_slots),
            "cart_version": 0,
        })
        logger.info("identity: method=register %s", fmt_fields(user_id=record["id"], result="success"))
        return self.issue_token(record["id"])

    def authenticate(self, email: str, password: str) -> str:
        """Check email/password and return a token."""
        record = self.users.find_one(email=email)
        if record is None:
            logger.info("identity: method=authenticate %s", fmt_fields(result="unknown_email"))
            raise NotFound(GENERIC_LOGIN_ERROR if self.config.generic_login_errors else None)

        stored = record["password_hash"]
        if not verify_password(password, stored):
            logger.info("identity: method=authenticate %s", fmt_fields(user_id=record["id"], result="wrong_password"))
            raise InvalidCredential(GENERIC_LOGIN_ERROR if self.config.generic_login_errors else None)

        if needs_rehash(stored, rounds=self.config.bcrypt_rounds):
            self.users.find_one_and_update(
                {"id": record["id"]},
                {"password_hash": hash_password(password, rounds=self.config.bcrypt_rounds)},
            )
            logger.info("identity: method=authenticate %s", fmt_fields(user_id=record["id"], rehashed=True))

        logger.info("identity: method=authenticate %s", fmt_fields(user_id=record["id"], result="success"))
        return self.issue_token(record["id"])

    def issue_token(self, user_id: str) -> str:
        return self.tokens.issue(user_id)

    def verify_token(self, token: Optional[str]) -> str:
        """Resolve a presented token to its user id (MissingToken / InvalidToken otherwise)."""
        return self.tokens.verify(token)
