# goodie/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from goodie.core.config import Settings, get_settings
from goodie.core.errors import setup_exception_handlers
from goodie.core.middleware import AuthSessionMiddleware
from goodie.core.route_guard import RouteGuard
from goodie.core.tokens import get_token_issuer
from goodie.database import create_db_and_tables, dispose_engine, init_engine

# Import models so SQLModel metadata is populated before create_all()
from goodie.models import user as _user_models  # noqa: F401
from goodie.models import product as _product_models  # noqa: F401
from goodie.models import cart as _cart_models  # noqa: F401
from goodie.models import wishlist as _wishlist_models  # noqa: F401
from goodie.models import rating as _rating_models  # noqa: F401

# Routers
from goodie.routers.auth import router as auth_router
from goodie.routers.users import router as users_router
from goodie.routers.products import router as products_router
from goodie.routers.admin_products import router as admin_products_router
from goodie.routers.ratings import router as ratings_router
from goodie.routers.cart import router as cart_router
from goodie.routers.wishlist import router as wishlist_router
from goodie.routers.checkout import router as checkout_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create the shared engine, verify DB connectivity and create tables.

    Shutdown:
      - Dispose the engine's connection pool.
    """
    settings = get_settings()
    logger.info("🔄 Startup: Connecting to the database...")
    try:
        init_engine(settings.DATABASE_URL)
        create_db_and_tables()
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise
    yield
    dispose_engine()
    logger.info("Shutdown: DB engine disposed.")


def create_app(settings: Settings | None = None, use_lifespan: bool = True) -> FastAPI:
    """
    Build the FastAPI application.

    Tests pass use_lifespan=False and initialise their own engine.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.PROJECT_NAME or "Goodie Storefront API",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    setup_exception_handlers(app)

    # --- Session + route guard ---
    guard = RouteGuard.for_admin_prefixes(
        settings.ADMIN_PATH_PREFIXES,
        denied_redirect_path=settings.ACCESS_DENIED_REDIRECT_PATH,
    )
    app.add_middleware(
        AuthSessionMiddleware,
        issuer=get_token_issuer(),
        guard=guard,
        settings=settings,
    )

    # --- CORS configuration ---
    # Added last so it wraps the guard and redirects carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Versioned API prefix, e.g. /api/v1
    app.include_router(auth_router, prefix=settings.API_V1_STR)
    app.include_router(users_router, prefix=settings.API_V1_STR)
    app.include_router(products_router, prefix=settings.API_V1_STR)
    app.include_router(admin_products_router, prefix=settings.API_V1_STR)
    app.include_router(ratings_router, prefix=settings.API_V1_STR)
    app.include_router(cart_router, prefix=settings.API_V1_STR)
    app.include_router(wishlist_router, prefix=settings.API_V1_STR)
    app.include_router(checkout_router, prefix=settings.API_V1_STR)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "goodie-backend"}

    return app


app = create_app()
