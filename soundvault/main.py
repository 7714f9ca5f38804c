"""SoundVault service main application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .api import admin_router, auth_router, search_router, songs_router, streaming_router
from .core.config import app_settings
from .core.correlation import CorrelationIDMiddleware
from .core.database import close_db, get_session_factory, init_db
from .core.error_handler import register_exception_handlers
from .core.health import router as health_router
from .core.logging import configure_logging, get_logger
from .metrics import METRICS_CONTENT_TYPE, get_metrics
from .storage import BlobStore

# Configure logging
configure_logging(log_level=app_settings.log_level, log_format=app_settings.log_format)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the database, then build the shared blob store on top of it."""
    logger.info("soundvault_starting", version=app_settings.app_version, environment=app_settings.environment)

    await init_db()
    app.state.blob_store = BlobStore(get_session_factory(), chunk_size=app_settings.blob_chunk_size)

    logger.info("soundvault_started", version=app_settings.app_version)

    yield

    logger.info("soundvault_shutting_down")
    await close_db()
    logger.info("soundvault_shutdown")


# Create FastAPI app
app = FastAPI(
    title="SoundVault",
    version=app_settings.app_version,
    description="Music library with private uploads, curated default tracks and audio streaming",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Session cookies need credentials, so origins are listed explicitly
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Correlation ID middleware
app.add_middleware(CorrelationIDMiddleware)

# Register all exception handlers
register_exception_handlers(app)

# Include routers; search and streaming go before the /songs/{id} routes
app.include_router(health_router)
app.include_router(auth_router, prefix=app_settings.api_prefix)
app.include_router(search_router, prefix=app_settings.api_prefix)
app.include_router(streaming_router, prefix=app_settings.api_prefix)
app.include_router(songs_router, prefix=app_settings.api_prefix)
app.include_router(admin_router, prefix=app_settings.api_prefix)


@app.get("/")
async def root() -> dict:
    """Service banner with the endpoint map."""
    prefix = app_settings.api_prefix
    return {
        "success": True,
        "message": "SoundVault API",
        "version": app_settings.app_version,
        "endpoints": {
            "auth": f"{prefix}/auth",
            "songs": f"{prefix}/songs",
            "search": f"{prefix}/songs/search",
            "stream": f"{prefix}/songs/stream",
            "admin": f"{prefix}/admin",
            "health": "/health",
            "metrics": "/metrics",
        },
    }


# Prometheus metrics endpoint
@app.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=get_metrics(), media_type=METRICS_CONTENT_TYPE)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
