"""Business services."""

from signal_server.services.pipeline import (
    FeedConnector,
    SignalPipeline,
    build_feed,
    build_sinks,
)

__all__ = [
    "FeedConnector",
    "SignalPipeline",
    "build_feed",
    "build_sinks",
]
