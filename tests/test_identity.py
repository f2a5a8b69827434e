"""
Unit tests for the identity service: signup, login and session tokens.
"""

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
import pytest

from storefront.core.config import StorefrontConfig
from storefront.core.errors import (
    DuplicateIdentity,
    InvalidCredential,
    InvalidToken,
    MissingToken,
    NotFound,
)
from storefront.identity.passwords import hash_password, is_current_hash, needs_rehash, verify_password
from storefront.identity.service import IdentityService, empty_cart
from storefront.identity.tokens import TokenCodec


class TestRegister:
    """Signup creates exactly one identity per email."""

    def test_register_returns_token_for_new_identity(self, identity, users):
        token = identity.register("alice", "a@x.com", "pw1")
        user_id = identity.verify_token(token)

        record = users.find_one(id=user_id)
        assert record["name"] == "alice"
        assert record["email"] == "a@x.com"

    def test_new_cart_has_300_zeroed_slots(self, identity, users):
        user_id = identity.verify_token(identity.register("alice", "a@x.com", "pw1"))
        cart = users.find_one(id=user_id)["cart_data"]
        assert len(cart) == 300
        assert set(cart.values()) == {0}
        assert "0" in cart and "299" in cart and "300" not in cart

    def test_password_is_stored_hashed(self, identity, users):
        user_id = identity.verify_token(identity.register("alice", "a@x.com", "pw1"))
        stored = users.find_one(id=user_id)["password_hash"]
        assert stored != "pw1"
        assert is_current_hash(stored)

    def test_second_register_with_same_email_fails(self, identity):
        identity.register("alice", "a@x.com", "pw1")
        with pytest.raises(DuplicateIdentity):
            identity.register("bob", "a@x.com", "pw2")

    def test_duplicate_regardless_of_password(self, identity):
        identity.register("alice", "a@x.com", "pw1")
        with pytest.raises(DuplicateIdentity):
            identity.register("alice", "a@x.com", "pw1")

    def test_email_match_is_case_sensitive(self, identity):
        identity.register("alice", "a@x.com", "pw1")
        # no normalization: a differently-cased email is a different identity
        identity.register("alice2", "A@x.com", "pw1")

    def test_unique_index_backs_up_precheck(self, identity, users):
        identity.register("alice", "a@x.com", "pw1")
        with pytest.raises(DuplicateIdentity):
            users.save({"email": "a@x.com", "password_hash": "x", "cart_data": {}})

    def test_cart_size_follows_config(self, users):
        service = IdentityService(StorefrontConfig(cart_slots=5, bcrypt_rounds=4), users)
        user_id = service.verify_token(service.register("c", "c@x.com", "pw"))
        assert users.find_one(id=user_id)["cart_data"] == empty_cart(5)


class TestAuthenticate:
    """Login distinguishes unknown email from wrong password."""

    def test_correct_password_returns_token_for_same_identity(self, identity, registered):
        user_id, _ = registered
        token = identity.authenticate("a@x.com", "pw1")
        assert identity.verify_token(token) == user_id

    def test_wrong_password(self, identity, registered):
        with pytest.raises(InvalidCredential) as exc_info:
            identity.authenticate("a@x.com", "wrong")
        assert exc_info.value.message == "Wrong Password"

    @pytest.mark.parametrize("attempt", [
        "pw2",
        "PW1",
        "pw1 ",
        "pw",
        "p" * 72 + "B-completely-different",
    ])
    def test_any_other_password_is_rejected(self, identity, registered, attempt):
        with pytest.raises(InvalidCredential):
            identity.authenticate("a@x.com", attempt)

    def test_long_passwords_differing_after_72_bytes(self, identity):
        identity.register("long", "long@x.com", "p" * 72 + "A")

        with pytest.raises(InvalidCredential):
            identity.authenticate("long@x.com", "p" * 72 + "B-completely-different")
        assert identity.authenticate("long@x.com", "p" * 72 + "A")

    def test_multibyte_password_past_bcrypt_limit(self, identity):
        password = "ä" * 40  # 80 UTF-8 bytes
        identity.register("umlaut", "u@x.com", password)

        with pytest.raises(InvalidCredential):
            identity.authenticate("u@x.com", "ä" * 36 + "a")
        assert identity.authenticate("u@x.com", password)

    def test_raw_bcrypt_record_is_accepted_and_upgraded(self, identity, users):
        raw = bcrypt.hashpw(b"older-pw", bcrypt.gensalt(rounds=4)).decode("ascii")
        record = users.save({"name": "old", "email": "raw@x.com", "password_hash": raw, "cart_data": {}})

        identity.authenticate("raw@x.com", "older-pw")
        assert is_current_hash(users.find_one(id=record["id"])["password_hash"])
        assert identity.authenticate("raw@x.com", "older-pw")

    def test_unknown_email(self, identity, registered):
        with pytest.raises(NotFound) as exc_info:
            identity.authenticate("nouser@x.com", "pw1")
        assert exc_info.value.message == "Wrong Email Id"

    def test_generic_login_errors_collapse_messages(self, users, config):
        config.generic_login_errors = True
        service = IdentityService(config, users)
        service.register("alice", "a@x.com", "pw1")

        with pytest.raises(NotFound) as missing:
            service.authenticate("nouser@x.com", "pw1")
        with pytest.raises(InvalidCredential) as wrong:
            service.authenticate("a@x.com", "wrong")
        assert missing.value.message == wrong.value.message == "Invalid email or password"

    def test_legacy_plaintext_record_is_accepted_and_rehashed(self, identity, users):
        record = users.save({"name": "old", "email": "old@x.com", "password_hash": "legacy-pw", "cart_data": empty_cart(3)})

        token = identity.authenticate("old@x.com", "legacy-pw")
        assert identity.verify_token(token) == record["id"]
        assert is_current_hash(users.find_one(id=record["id"])["password_hash"])

    def test_legacy_plaintext_record_wrong_password(self, identity, users):
        users.save({"name": "old", "email": "old@x.com", "password_hash": "legacy-pw", "cart_data": {}})
        with pytest.raises(InvalidCredential):
            identity.authenticate("old@x.com", "legacy")


class TestTokens:
    """Session token issue/verify."""

    def test_missing_token(self, identity):
        with pytest.raises(MissingToken):
            identity.verify_token(None)
        with pytest.raises(MissingToken):
            identity.verify_token("")

    def test_malformed_token(self, identity):
        with pytest.raises(InvalidToken):
            identity.verify_token("not-a-jwt")

    def test_token_signed_with_other_key_is_rejected(self, identity, registered):
        user_id, _ = registered
        forged = jwt.encode(
            {"user": {"id": user_id}, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            identity.verify_token(forged)

    def test_token_without_user_claim_is_rejected(self, config):
        codec = TokenCodec(config)
        token = jwt.encode(
            {"sub": "abc", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            config.jwt_secret,
            algorithm=config.jwt_algorithm,
        )
        with pytest.raises(InvalidToken):
            codec.verify(token)

    def test_payload_shape(self, config):
        token = TokenCodec(config).issue("abc123")
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
        assert payload["user"] == {"id": "abc123"}
        assert "iat" in payload and "exp" in payload

    def test_expired_token_is_rejected(self, config):
        codec = TokenCodec(config)
        token = codec.issue("abc123", now=datetime.now(timezone.utc) - timedelta(days=30))
        with pytest.raises(InvalidToken):
            codec.verify(token)

    def test_ttl_zero_issues_non_expiring_tokens(self):
        codec = TokenCodec(StorefrontConfig(jwt_secret="s", token_ttl_seconds=0))
        token = codec.issue("abc123", now=datetime.now(timezone.utc) - timedelta(days=3650))
        assert "exp" not in jwt.decode(token, "s", algorithms=["HS256"])
        assert codec.verify(token) == "abc123"

    def test_token_without_exp_rejected_when_ttl_configured(self, config):
        legacy = jwt.encode({"user": {"id": "abc123"}}, config.jwt_secret, algorithm="HS256")
        with pytest.raises(InvalidToken):
            TokenCodec(config).verify(legacy)


class TestPasswords:
    """bcrypt helpers."""

    def test_hash_and_verify(self):
        stored = hash_password("s3cret", rounds=4)
        assert verify_password("s3cret", stored)
        assert not verify_password("S3cret", stored)

    def test_hashes_are_salted(self):
        assert hash_password("same", rounds=4) != hash_password("same", rounds=4)

    def test_needs_rehash(self):
        assert needs_rehash("plaintext")
        assert needs_rehash(hash_password("pw", rounds=4), rounds=5)
        assert not needs_rehash(hash_password("pw", rounds=4), rounds=4)
        assert needs_rehash(bcrypt.hashpw(b"pw", bcrypt.gensalt(rounds=4)).decode("ascii"), rounds=4)

    def test_whole_password_is_significant(self):
        stored = hash_password("x" * 100, rounds=4)
        assert verify_password("x" * 100, stored)
        assert not verify_password("x" * 99 + "y", stored)
        assert not verify_password("x" * 72, stored)

    def test_empty_stored_credential_never_matches(self):
        assert not verify_password("", "")
