from datetime import datetime, timezone
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Annotated

from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

import logging

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.limiter import limiter
from app.database.db import init_models
from app.routers.api import api_auth, api_books, api_user_books, api_users
from app.services.catalog_client import (
    GoogleBooksClient,
    close_catalog_client,
    get_catalog_client,
)

# ✅ Logging
logging.basicConfig(
    level=logging.INFO if not settings.DEBUG else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

tags_metadata = [
    {"name": "default", "description": "Greeting and health check"},
    {"name": "Auth"},
    {"name": "Users"},
    {"name": "Books (Google Books)"},
    {"name": "My library"},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    # Startup
    logger.info(f"🚀 {settings.APP_NAME} starting up...")
    logger.info(f"📊 Debug mode: {settings.DEBUG}")
    logger.info(f"🔐 CORS origins: {settings.ALLOWED_ORIGINS}")
    if settings.CREATE_TABLES_ON_STARTUP:
        await init_models()

    yield

    # Shutdown
    await close_catalog_client()
    logger.info(f"🛑 {settings.APP_NAME} shutting down...")


app = FastAPI(
    title=settings.APP_NAME,
    description="Personal reading tracker backed by the Google Books catalog",
    version=settings.APP_VERSION,
    openapi_tags=tags_metadata,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# ✅ Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/", tags=["default"])
async def read_root():
    return {"message": f"Welcome to {settings.APP_NAME}! See /docs for the API."}


# ✅ Health check endpoint
@app.get("/health", tags=["default"])
async def health_check(catalog: Annotated[GoogleBooksClient, Depends(get_catalog_client)]):
    """API health, including the Google Books configuration"""
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "catalog": catalog.get_config().model_dump(),
    }


app.include_router(api_auth.router)
app.include_router(api_users.router)
app.include_router(api_books.router)
app.include_router(api_user_books.router)


# uvicorn app.main:app --reload
