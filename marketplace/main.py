# marketplace/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import Depends, FastAPI

from marketplace.core.config import get_settings
from marketplace.core.logging import configure_logging
from marketplace.database import DocumentStore, check_connection, get_store

# Routers
from marketplace.routers.users import router as users_router
from marketplace.routers.stores import router as stores_router
from marketplace.routers.products import router as products_router
from marketplace.routers.orders import router as orders_router
from marketplace.routers.admin import router as admin_router
from marketplace.routers.webhooks import router as webhooks_router

settings = get_settings()

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify document store connectivity.

    Shutdown:
      - No special cleanup needed; the Supabase client is stateless HTTP.
    """
    logger.info("Startup: connecting to document store (%s)...", settings.STORE_BACKEND)
    try:
        users = check_connection(get_store())
        logger.info("Startup: document store OK, %d user(s).", users)
    except Exception as e:
        logger.error(f"Startup: document store connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(users_router, prefix=settings.API_V1_STR)
app.include_router(stores_router, prefix=settings.API_V1_STR)
app.include_router(products_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(admin_router, prefix=settings.API_V1_STR)
app.include_router(webhooks_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "marketplace-backend"}


@app.get("/db/health")
def db_health(db: DocumentStore = Depends(get_store)):
    """
    Minimal query to validate document store connectivity.

    503 (InfrastructureError) if the store is unreachable.
    """
    return {"ok": True, "users_count": check_connection(db)}
