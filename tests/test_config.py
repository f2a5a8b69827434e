"""Tests for configuration loading."""

import textwrap

from storefront.core.config import LEGACY_CART_SLOTS, StorefrontConfig


def test_missing_yaml_gives_defaults(tmp_path):
    config = StorefrontConfig.from_yaml(tmp_path / "absent.yaml")
    assert config == StorefrontConfig()
    assert config.cart_slots == LEGACY_CART_SLOTS == 300
    assert config.token_expires


def test_yaml_sections(tmp_path):
    path = tmp_path / "storefront.yaml"
    path.write_text(textwrap.dedent("""
        database:
          url: sqlite:///./other.db
        auth:
          jwt_secret: from-yaml
          token_ttl_seconds: 0
          generic_login_errors: true
        cart:
          slots: 50
        server:
          port: 8080
    """))
    config = StorefrontConfig.from_yaml(path)
    assert config.database_url == "sqlite:///./other.db"
    assert config.jwt_secret == "from-yaml"
    assert not config.token_expires
    assert config.generic_login_errors is True
    assert config.cart_slots == 50
    assert config.port == 8080
    # untouched keys keep defaults
    assert config.jwt_algorithm == "HS256"


def test_env_overrides():
    config = StorefrontConfig().with_env({
        "DATABASE_URL": "postgresql://db/shop",
        "STOREFRONT_JWT_SECRET": "env-secret",
        "STOREFRONT_TOKEN_TTL": "0",
        "STOREFRONT_GENERIC_LOGIN_ERRORS": "yes",
        "STOREFRONT_PUBLIC_URL": "https://shop.example.com/",
        "PORT": "5000",
    })
    assert config.database_url == "postgresql://db/shop"
    assert config.jwt_secret == "env-secret"
    assert config.token_ttl_seconds is None
    assert config.generic_login_errors is True
    assert config.public_base_url == "https://shop.example.com"
    assert config.port == 5000


def test_env_overrides_do_not_mutate_original():
    base = StorefrontConfig()
    base.with_env({"PORT": "1234"})
    assert base.port == 4000
