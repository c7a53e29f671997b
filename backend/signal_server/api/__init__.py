"""API endpoints."""

from signal_server.api.routes import router
from signal_server.api.websocket import (
    ConnectionManager,
    WebSocketMessage,
    manager,
    websocket_endpoint,
)

__all__ = [
    "router",
    "manager",
    "websocket_endpoint",
    "ConnectionManager",
    "WebSocketMessage",
]
