"""
FastAPI application entry point.
"""

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from pathlib import Path
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from townwrent.config import settings
from townwrent.database import get_db, check_database_connection, create_tables, close_db_connection
from townwrent.routers import (
    auth_router,
    properties_router,
    messages_router,
    site_visits_router,
    profile_router,
    drafts_router,
    roles_router,
    realtime_router,
)
from townwrent.services.storage import PUBLIC_OBJECT_PREFIX
from townwrent.services.error_handler import register_exception_handlers
from townwrent.middleware import RequestContextMiddleware, REQUEST_ID_HEADER
from townwrent.utils.exceptions import InternalServerError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: make sure the bucket and draft directories exist, check the
    database and create tables when configured to.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    for bucket in (settings.property_images_bucket, settings.avatars_bucket):
        Path(settings.storage_root, bucket).mkdir(parents=True, exist_ok=True)
    Path(settings.draft_dir).mkdir(parents=True, exist_ok=True)

    if settings.create_tables_on_startup:
        await create_tables()

    if not await check_database_connection():
        logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    await close_db_connection()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Rental marketplace API.

    * **Listings**: multi-step listing submission with photos, explore and search
    * **Messages**: tenants contact landlords, with a realtime inbox feed
    * **Site visits**: book a viewing with a visit package
    * **Dashboard**: landlord listings and analytics

    Sign in with `/api/auth/login`, then send the access token as `Authorization: Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    RequestContextMiddleware,
    max_request_size=settings.max_request_size,
    access_log=not settings.is_testing
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)

app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(properties_router, prefix=settings.api_prefix)
app.include_router(messages_router, prefix=settings.api_prefix)
app.include_router(site_visits_router, prefix=settings.api_prefix)
app.include_router(profile_router, prefix=settings.api_prefix)
app.include_router(drafts_router, prefix=settings.api_prefix)
app.include_router(roles_router, prefix=settings.api_prefix)
app.include_router(realtime_router, prefix=settings.api_prefix)

# Public bucket objects, addressed the same way as the URLs StorageService hands out
app.mount(
    PUBLIC_OBJECT_PREFIX,
    StaticFiles(directory=settings.storage_root, check_dir=False),
    name="storage"
)


register_exception_handlers(app)


@app.get("/", tags=["Health"])
async def root():
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Liveness plus a database round trip.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        raise InternalServerError("Database connection failed")

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "townwrent.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
