"""WebSocket endpoint for real-time tick and signal updates."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any

import orjson
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000
WELCOME_MESSAGE = "Welcome to Deriv Signal Server"


def _orjson_dumps(obj: Any) -> str:
    """Serialize object to JSON string using orjson."""
    return orjson.dumps(obj, default=str).decode("utf-8")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WebSocketMessage(BaseModel):
    """WebSocket message format."""

    type: str  # "hello", "tick", "signal", "status", "pong", "error"
    data: dict[str, Any]
    timestamp: datetime

    def to_json(self) -> str:
        """Serialize to JSON string using orjson for performance."""
        return _orjson_dumps(self.model_dump(mode="json"))


class Subscriber:
    """One connected client with its own bounded outbound queue."""

    def __init__(self, websocket: WebSocket, queue_size: int):
        self.websocket = websocket
        self.queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self.task: asyncio.Task | None = None
        self.dropped = 0


class ConnectionManager:
    """Manage WebSocket connections and non-blocking broadcasts.

    ``broadcast`` only enqueues: each subscriber has a writer task that
    drains its queue, so a slow or dead client never stalls the caller.
    When a subscriber's queue is full the message is dropped for that
    subscriber only.
    """

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE):
        self.queue_size = queue_size
        self._subscribers: dict[int, Subscriber] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection and start its writer."""
        await websocket.accept()
        subscriber = Subscriber(websocket, self.queue_size)
        subscriber.task = asyncio.create_task(self._writer(subscriber))
        self._subscribers[id(websocket)] = subscriber
        logger.info(f"WebSocket connected. Total connections: {len(self._subscribers)}")

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a disconnected WebSocket and stop its writer."""
        subscriber = self._subscribers.pop(id(websocket), None)
        if subscriber and subscriber.task and subscriber.task is not asyncio.current_task():
            subscriber.task.cancel()
            try:
                await subscriber.task
            except asyncio.CancelledError:
                pass
        logger.info(f"WebSocket disconnected. Total connections: {len(self._subscribers)}")

    async def _writer(self, subscriber: Subscriber) -> None:
        """Drain one subscriber's queue onto its socket."""
        while True:
            text = await subscriber.queue.get()
            try:
                await subscriber.websocket.send_text(text)
            except Exception as e:
                logger.warning(f"Failed to send message: {e}")
                self._subscribers.pop(id(subscriber.websocket), None)
                return

    def _enqueue(self, subscriber: Subscriber, text: str) -> bool:
        try:
            subscriber.queue.put_nowait(text)
            return True
        except asyncio.QueueFull:
            subscriber.dropped += 1
            if subscriber.dropped == 1 or subscriber.dropped % 100 == 0:
                logger.warning(
                    f"Subscriber queue full, dropped {subscriber.dropped} message(s)"
                )
            return False

    def broadcast(self, event_type: str, payload: dict) -> None:
        """Queue a message for every connected client. Never blocks."""
        if not self._subscribers:
            return

        message_text = WebSocketMessage(
            type=event_type,
            data=payload,
            timestamp=_utcnow(),
        ).to_json()

        for subscriber in list(self._subscribers.values()):
            self._enqueue(subscriber, message_text)

    def send_to(self, websocket: WebSocket, event_type: str, payload: dict) -> bool:
        """Queue a message for a single client."""
        subscriber = self._subscribers.get(id(websocket))
        if subscriber is None:
            return False
        message = WebSocketMessage(type=event_type, data=payload, timestamp=_utcnow())
        return self._enqueue(subscriber, message.to_json())

    @property
    def connection_count(self) -> int:
        """Get number of active connections."""
        return len(self._subscribers)

    async def close_all(self) -> None:
        """Stop every writer task (used at shutdown)."""
        for subscriber in list(self._subscribers.values()):
            await self.disconnect(subscriber.websocket)


# Global connection manager
manager = ConnectionManager()


async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time updates.

    Messages sent to clients:
    - hello: Sent once on connect
    - tick: Every ingested price tick
    - signal: Every gate-admitted signal
    - status: Feed connection state changes

    Message format:
    {
        "type": "signal",
        "data": {...},
        "timestamp": "2024-01-01T00:00:00Z"
    }
    """
    await manager.connect(websocket)

    try:
        manager.send_to(websocket, "hello", {"message": WELCOME_MESSAGE})

        # Keep connection alive and handle incoming messages
        while True:
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=60.0,
                )

                try:
                    message = orjson.loads(data)
                except orjson.JSONDecodeError:
                    manager.send_to(websocket, "error", {"message": "Invalid JSON"})
                    continue
                handle_client_message(websocket, message)

            except asyncio.TimeoutError:
                # Send ping to keep connection alive
                manager.send_to(websocket, "ping", {})

    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        await manager.disconnect(websocket)


def handle_client_message(websocket: WebSocket, message: Any) -> None:
    """Handle incoming message from client."""
    msg_type = message.get("type", "") if isinstance(message, dict) else ""

    if msg_type == "ping":
        manager.send_to(websocket, "pong", {})
    else:
        manager.send_to(
            websocket, "error", {"message": f"Unknown message type: {msg_type}"}
        )
