# teashop/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI
from sqlmodel import Session

from teashop.core.config import get_settings
from teashop.core.errors import register_exception_handlers
from teashop.database import create_db_and_tables, engine

# Import models so SQLModel metadata is populated before create_all()
from teashop.models import user as _user_models  # noqa: F401
from teashop.models import product as _product_models  # noqa: F401
from teashop.models import order as _order_models  # noqa: F401

from teashop.repositories.category_repo import CategoryRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.repositories.user_repo import UserRepository
from teashop.repositories.verification_repo import VerificationCodeRepository
from teashop.services.auth_service import AuthService
from teashop.services.seed_service import SeedService

# Routers
from teashop.routers.auth import router as auth_router
from teashop.routers.categories import router as categories_router
from teashop.routers.orders import router as orders_router
from teashop.routers.users import router as users_router
from teashop.routers.products import router as products_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


def prepare_database() -> None:
    """
    Create tables, purge expired login codes and seed first-boot data.
    """
    create_db_and_tables()

    user_repo = UserRepository()
    seeder = SeedService(user_repo, CategoryRepository(), ProductRepository())
    with Session(engine) as session:
        AuthService(user_repo, VerificationCodeRepository()).purge_expired_codes(session)
        seeder.ensure_guest_user(session)
        if settings.SEED_SAMPLE_DATA:
            seeder.seed_categories(session)
            seeder.seed_products(session)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity, create tables, seed.

    Shutdown:
      - Dispose of pooled connections.
    """
    logger.info("🔄 Startup: preparing database (%s)...", engine.url.get_backend_name())
    try:
        prepare_database()
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise
    yield
    engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME or "Tea Shop API",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Order matters: the products router's "/{product_id}" routes go last so
# they don't capture "/products/orders", "/products/users", ...
app.include_router(auth_router, prefix="/api")
app.include_router(categories_router, prefix="/api")
app.include_router(orders_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(products_router, prefix="/api")


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "teashop-backend"}
