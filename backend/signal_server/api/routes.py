"""REST API routes."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from signal_server.api.websocket import manager
from signal_server.config import get_settings
from signal_server.storage import cache

logger = logging.getLogger(__name__)

router = APIRouter()


# Response models
class SystemStatus(BaseModel):
    """System status response."""

    status: str
    version: str
    feed_mode: str
    feed_state: str
    symbols: list[str]
    subscribers: int
    ticks_ingested: int
    signals_emitted: int
    last_signal_ms: Optional[int] = None
    buffers: dict[str, int]


class FeatureResponse(BaseModel):
    """Current features and ensemble score for a symbol."""

    symbol: str
    samples: int
    features: Optional[dict[str, float]] = None
    score: dict


@router.get("/status", response_model=SystemStatus)
async def get_status(request: Request):
    """Get system status."""
    settings = get_settings()
    engine = request.app.state.engine
    feed = request.app.state.feed
    stats = engine.stats()

    return SystemStatus(
        status="running",
        version=request.app.version,
        feed_mode=settings.feed_mode,
        feed_state=feed.state.value if feed else "disconnected",
        symbols=engine.config.symbols,
        subscribers=manager.connection_count,
        ticks_ingested=stats["ticks_ingested"],
        signals_emitted=stats["signals_emitted"],
        last_signal_ms=stats["last_signal_ms"],
        buffers=stats["buffers"],
    )


@router.get("/features/{symbol}", response_model=FeatureResponse)
async def get_features(symbol: str, request: Request):
    """Get the current feature snapshot and score for a symbol."""
    engine = request.app.state.engine
    if symbol not in engine.buffers:
        raise HTTPException(status_code=404, detail=f"Unknown symbol: {symbol}")

    features = engine.features(symbol)
    return FeatureResponse(
        symbol=symbol,
        samples=engine.buffers.length(symbol),
        features=features.to_dict() if features else None,
        score=engine.scorer.score(features).to_dict(),
    )


@router.get("/signals/recent")
async def get_recent_signals(limit: int = Query(50, ge=1, le=500)):
    """Get recently emitted signals (requires the Redis sink)."""
    if not cache.is_cache_available():
        return []
    return await cache.get_recent_signals(limit)
