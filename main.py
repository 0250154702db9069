"""Main FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog.api.routes import admin, lookup
from catalog.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title="Classroom Catalog API",
    description="Barcode scanning and ISBN lookup for classroom libraries",
    version="0.1.0",
    debug=settings.debug,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Classroom Catalog API",
        "version": "0.1.0",
    }


@app.get("/health")
def health_check():
    """Detailed health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "google_books_api_key": "configured" if settings.google_books_api_key else "not configured",
    }


@app.get("/test/redis")
def test_redis():
    """Test Redis connectivity."""
    from catalog.core.redis_client import redis_client

    try:
        # Test basic operations
        redis_client.set("test_key", "test_value", ex=10)
        value = redis_client.get("test_key")
        redis_client.delete("test_key")

        info = redis_client.info("server")

        return {
            "status": "connected",
            "test_write_read": "success" if value == "test_value" else "failed",
            "redis_version": info.get("redis_version"),
            "uptime_seconds": info.get("uptime_in_seconds"),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}


app.include_router(lookup.router, prefix="/api", tags=["lookup"])
app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
