"""Main application entry point."""

import asyncio
import logging
from contextlib import asynccontextmanager

# Configure logging FIRST, before any other imports
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# Reduce noise from third-party libraries (must be set before importing them)
logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)
logging.getLogger("picows").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse, PlainTextResponse

# Try to use uvloop for better performance (Unix only)
try:
    import uvloop
    uvloop.install()
    _UVLOOP_ENABLED = True
except ImportError:
    _UVLOOP_ENABLED = False

from signal_core.engine import SignalEngine
from signal_server.api import manager, router, websocket_endpoint
from signal_server.config import get_settings
from signal_server.services import SignalPipeline, build_feed, build_sinks
from signal_server.storage import cache, close_database, init_database

VERSION = "0.1.0"

# Startup timeout in seconds
STARTUP_TIMEOUT = 30

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info("Starting Deriv Signal Server...")
    logger.info(f"Event loop: {'uvloop' if _UVLOOP_ENABLED else 'asyncio'}")

    # Optional persistence: failures here degrade to broadcast-only
    db_initialized = False
    if settings.database_url and (settings.persist_signals or settings.persist_ticks):
        try:
            await asyncio.wait_for(init_database(), timeout=STARTUP_TIMEOUT)
            db_initialized = True
            logger.info("Database initialized")
        except Exception as e:
            logger.warning(f"Database unavailable, persistence disabled: {e}")

    if settings.redis_url:
        try:
            await asyncio.wait_for(cache.init_cache(settings.redis_url), timeout=10)
        except asyncio.TimeoutError:
            logger.warning("Redis cache initialization timed out - running without caching")

    engine = SignalEngine(settings.to_engine_config())
    manager.queue_size = settings.subscriber_queue_size
    feed = build_feed(settings)
    sinks = build_sinks(
        settings,
        database_available=db_initialized,
        cache_available=cache.is_cache_available(),
    )
    pipeline = SignalPipeline(
        engine, feed, manager, sinks,
        max_pending_writes=settings.max_pending_writes,
    )

    app.state.engine = engine
    app.state.feed = feed
    app.state.pipeline = pipeline

    await pipeline.start()
    logger.info(f"Feed started ({settings.feed_mode}) for {settings.symbols}")

    yield

    # Shutdown
    logger.info("Shutting down...")

    await pipeline.stop()
    await manager.close_all()
    await cache.close_cache()

    if db_initialized:
        try:
            await close_database()
            logger.info("Database connections closed")
        except Exception as e:
            logger.warning(f"Error closing database: {e}")

    logger.info("Shutdown complete")


# Create FastAPI app with orjson for faster JSON serialization
app = FastAPI(
    title="Deriv Signal Server",
    description="Streaming tick analytics and prediction signals",
    version=VERSION,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include REST routes
app.include_router(router, prefix="/api")

# WebSocket endpoint
app.websocket("/ws")(websocket_endpoint)


@app.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint."""
    return "Deriv Signal Server is running..."


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def main():
    """Run the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "signal_server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
