"""Pytest configuration for storefront tests."""

import pytest
from fastapi.testclient import TestClient

from storefront.api.server import create_app
from storefront.cart.store import CartStore
from storefront.catalog.service import CatalogService
from storefront.core.config import StorefrontConfig
from storefront.data.database import Database
from storefront.data.user_store import UserStore
from storefront.identity.service import IdentityService


# ---------------------------------------------------------------------------
# Each test gets its own SQLite file and upload directory under tmp_path, so
# no state leaks between tests regardless of execution order.
# ---------------------------------------------------------------------------

@pytest.fixture
def config(tmp_path) -> StorefrontConfig:
    return StorefrontConfig(
        database_url=f"sqlite:///{tmp_path / 'storefront-test.db'}",
        jwt_secret="test-secret",
        bcrypt_rounds=4,  # bcrypt minimum, keeps hashing fast
        upload_dir=str(tmp_path / "images"),
        public_base_url="http://testserver",
    )


@pytest.fixture
def database(config):
    db = Database(config.database_url)
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def users(database) -> UserStore:
    return UserStore(database.SessionLocal)


@pytest.fixture
def identity(config, users) -> IdentityService:
    return IdentityService(config, users)


@pytest.fixture
def carts(users) -> CartStore:
    return CartStore(users)


@pytest.fixture
def catalog(database) -> CatalogService:
    return CatalogService(database.SessionLocal)


@pytest.fixture
def client(config, database):
    app = create_app(config, database=database)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registered(identity):
    """A registered shopper: (user_id, token)."""
    token = identity.register("alice", "a@x.com", "pw1")
    return identity.verify_token(token), token
