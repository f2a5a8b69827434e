"""
FastAPI server for the storefront backend.

Usage:
    python -m storefront.api.server
    # or
    uvicorn storefront.api.server:create_app --factory --port 4000
"""
import time
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response as StarletteResponse

from storefront.api.dependencies import (
    current_user_id,
    get_cart_store,
    get_catalog,
    get_identity,
    get_image_storage,
)
from storefront.api.models import (
    AddProductRequest,
    CartItemRequest,
    ErrorResponse,
    LoginRequest,
    ProductAck,
    ProductList,
    RemoveProductRequest,
    SignupRequest,
    TokenResponse,
    UploadResponse,
)
from storefront.cart.store import CartStore
from storefront.catalog.service import CatalogService
from storefront.catalog.uploads import IMAGES_ROUTE, ImageStorage
from storefront.core.config import StorefrontConfig, get_config
from storefront.core.errors import (
    DuplicateIdentity,
    InvalidCredential,
    NotFound,
    StorefrontError,
)
from storefront.data.database import Database
from storefront.data.user_store import UserStore
from storefront.identity.service import IdentityService
from storefront.utils.logger import get_logger, set_level

logger = get_logger("api.server")

# Failures reported inside the {success: false} envelope the shop front expects
_ENVELOPED_ERRORS = (DuplicateIdentity, NotFound, InvalidCredential)

AUTH_ERROR_RESPONSES = {401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status and duration_ms for every non-OPTIONS request."""

    async def dispatch(self, request: Request, call_next) -> StarletteResponse:
        if request.method == "OPTIONS":
            return await call_next(request)
        t0 = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - t0) * 1000, 1)
        logger.info(
            "[REQUEST] %s %s -> %d  %.1fms",
            request.method, request.url.path, response.status_code, duration_ms,
        )
        return response


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    body: Dict[str, object] = {"errors": exc.message}
    if isinstance(exc, _ENVELOPED_ERRORS):
        body = {"success": False, **body}
    return JSONResponse(status_code=exc.status_code, content=body)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"errors": "Internal server error"})


def create_app(config: Optional[StorefrontConfig] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the application and its services from an explicit configuration."""
    config = config or get_config()
    database = database or Database(config.database_url)
    database.create_all()

    users = UserStore(database.SessionLocal)
    images = ImageStorage(config.upload_dir, config.public_base_url)
    images.ensure_dir()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Storefront starting (cart_slots=%d, token_ttl=%s)", config.cart_slots, config.token_ttl_seconds)
        yield
        database.dispose()

    app = FastAPI(
        title="Storefront API",
        description="Retail catalog backend: shopper accounts, session tokens and carts",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.database = database
    app.state.identity = IdentityService(config, users)
    app.state.carts = CartStore(users)
    app.state.catalog = CatalogService(database.SessionLocal)
    app.state.images = images

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.mount(IMAGES_ROUTE, StaticFiles(directory=str(images.root)), name="images")

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "Storefront API is running"

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    @app.post("/signup", response_model=TokenResponse, responses={400: {"model": ErrorResponse}})
    def signup(body: SignupRequest, identity: IdentityService = Depends(get_identity)) -> TokenResponse:
        token = identity.register(body.username, body.email, body.password)
        return TokenResponse(token=token)

    @app.post("/login", response_model=TokenResponse)
    def login(body: LoginRequest, identity: IdentityService = Depends(get_identity)) -> TokenResponse:
        token = identity.authenticate(body.email, body.password)
        return TokenResponse(token=token)

    # ------------------------------------------------------------------
    # Cart (auth-token required)
    # ------------------------------------------------------------------

    @app.post("/addtocart", response_class=PlainTextResponse, responses=AUTH_ERROR_RESPONSES)
    def add_to_cart(
        body: CartItemRequest,
        user_id: str = Depends(current_user_id),
        carts: CartStore = Depends(get_cart_store),
    ) -> str:
        carts.increment(user_id, body.itemId)
        return "Added"

    @app.post("/removefromcart", response_class=PlainTextResponse, responses=AUTH_ERROR_RESPONSES)
    def remove_from_cart(
        body: CartItemRequest,
        user_id: str = Depends(current_user_id),
        carts: CartStore = Depends(get_cart_store),
    ) -> str:
        carts.decrement(user_id, body.itemId)
        return "Removed"

    @app.post("/getcartitems", response_model=Dict[str, int], responses=AUTH_ERROR_RESPONSES)
    def get_cart_items(
        user_id: str = Depends(current_user_id),
        carts: CartStore = Depends(get_cart_store),
    ) -> Dict[str, int]:
        return carts.read(user_id)

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    @app.post("/addproduct", response_model=ProductAck)
    def add_product(body: AddProductRequest, catalog: CatalogService = Depends(get_catalog)) -> ProductAck:
        catalog.add_product(body.name, body.image, body.category, body.new_price, body.old_price)
        return ProductAck(name=body.name)

    @app.post("/removeproduct", response_model=ProductAck)
    def remove_product(body: RemoveProductRequest, catalog: CatalogService = Depends(get_catalog)) -> ProductAck:
        catalog.remove_product(body.id)
        return ProductAck(name=body.name)

    @app.get("/allproducts", response_model=ProductList)
    def all_products(catalog: CatalogService = Depends(get_catalog)) -> List[dict]:
        return catalog.all_products()

    @app.get("/newcollections", response_model=ProductList)
    def new_collections(catalog: CatalogService = Depends(get_catalog)) -> List[dict]:
        return catalog.new_collections()

    @app.get("/popularinwomen", response_model=ProductList)
    def popular_in_women(catalog: CatalogService = Depends(get_catalog)) -> List[dict]:
        return catalog.popular_in_women()

    @app.post("/upload", response_model=UploadResponse)
    def upload(product: UploadFile = File(...), storage: ImageStorage = Depends(get_image_storage)) -> UploadResponse:
        filename = storage.save("product", product.filename, product.file)
        return UploadResponse(image_url=storage.public_url(filename))

    return app


def main() -> None:
    config = get_config()
    set_level(config.log_level)
    logger.info("Server running on port %d", config.port)
    uvicorn.run("storefront.api.server:create_app", factory=True, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
