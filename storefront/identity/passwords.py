"""
Salted bcrypt hashing for shopper passwords.

bcrypt only reads the first 72 bytes of its input, so the password is first
reduced to a base64 SHA-256 digest (44 ASCII bytes) and that digest is what
bcrypt hashes. Stored values carry a scheme prefix so older formats can be
recognized and upgraded:

    bcrypt-sha256$<bcrypt hash>   current
    <bcrypt hash>                 raw bcrypt over the truncated password
    anything else                 plaintext from the legacy store
"""
import base64
import hashlib
import hmac

import bcrypt

SCHEME_PREFIX = "bcrypt-sha256$"
_MAX_BCRYPT_BYTES = 72


def _digest(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest())


def _is_raw_bcrypt(stored: str) -> bool:
    return stored.startswith(("$2a$", "$2b$", "$2y$")) and len(stored) == 60


def is_current_hash(stored: str) -> bool:
    return stored.startswith(SCHEME_PREFIX) and _is_raw_bcrypt(stored[len(SCHEME_PREFIX):])


def hash_password(password: str, rounds: int = 12) -> str:
    hashed = bcrypt.hashpw(_digest(password), bcrypt.gensalt(rounds=rounds)).decode("ascii")
    return SCHEME_PREFIX + hashed


def verify_password(password: str, stored: str) -> bool:
    """
    Check a candidate password against the stored credential.

    Plaintext records are compared in constant time; both older formats are
    flagged for rehash by needs_rehash().
    """
    if not stored:
        return False
    if is_current_hash(stored):
        return bcrypt.checkpw(_digest(password), stored[len(SCHEME_PREFIX):].encode("ascii"))
    if _is_raw_bcrypt(stored):
        return bcrypt.checkpw(password.encode("utf-8")[:_MAX_BCRYPT_BYTES], stored.encode("ascii"))
    return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))


def needs_rehash(stored: str, rounds: int = 12) -> bool:
    if not is_current_hash(stored):
        return True
    # "bcrypt-sha256$$2b$12$..." -> cost sits right after the bcrypt version tag
    cost = stored[len(SCHEME_PREFIX):].split("$")[2]
    return int(cost) < rounds
