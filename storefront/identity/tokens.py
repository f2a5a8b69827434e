"""
Signed session tokens.

A token is a JWT whose payload is {"user": {"id": <user id>}} plus iat and,
when a TTL is configured, exp. Validity depends only on the signature and
expiry; there is no server-side session table.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from storefront.core.config import StorefrontConfig
from storefront.core.errors import InvalidToken, MissingToken


class TokenCodec:
    """Signs and verifies session tokens with the process-wide key."""

    def __init__(self, config: StorefrontConfig) -> None:
        self._secret = config.jwt_secret
        self._algorithm = config.jwt_algorithm
        self._ttl = timedelta(seconds=config.token_ttl_seconds) if config.token_expires else None

    def issue(self, user_id: str, now: Optional[datetime] = None) -> str:
        now = now or datetime.now(timezone.utc)
        payload = {"user": {"id": user_id}, "iat": now}
        if self._ttl is not None:
            payload["exp"] = now + self._ttl
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> str:
        """Return the user id embedded in a valid token."""
        if not token:
            raise MissingToken()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]} if self._ttl is not None else None,
            )
        except jwt.PyJWTError as e:
            raise InvalidToken() from e

        user = payload.get("user")
        user_id = user.get("id") if isinstance(user, dict) else None
        if not isinstance(user_id, str) or not user_id:
            raise InvalidToken()
        return user_id
