"""Event emitter: broadcast engine events and forward them to sinks.

Broadcast is synchronous and must not block (the channel queues or drops
on its own). Sink appends are fire-and-forget: each one runs as its own
asyncio task, failures are logged and never retried, and one sink
failing never affects another sink or the broadcast. At most
``max_pending`` appends are in flight; further records are dropped and
logged until the backlog shrinks.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Protocol, runtime_checkable

from signal_core.models import EngineEvent, EventType

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING = 10_000


@runtime_checkable
class BroadcastChannel(Protocol):
    """Outbound channel to subscribers."""

    def broadcast(self, event_type: str, payload: dict) -> None:
        """Queue an event for every subscriber without waiting."""
        ...


@runtime_checkable
class PersistenceSink(Protocol):
    """Optional append-only store for event records."""

    name: str
    event_types: frozenset[EventType]

    async def append(self, record: dict) -> None:
        """Persist one record."""
        ...


class EventEmitter:
    """Publish engine events to a broadcast channel and persistence sinks."""

    def __init__(
        self,
        channel: BroadcastChannel,
        sinks: Iterable[PersistenceSink] = (),
        max_pending: int = DEFAULT_MAX_PENDING,
    ):
        self.channel = channel
        self.sinks: list[PersistenceSink] = list(sinks)
        self.max_pending = max_pending
        # Strong references so pending sink tasks are not garbage collected
        self._pending: set[asyncio.Task] = set()
        self._sink_failures = 0
        self._dropped_writes = 0

    def publish(self, events: Iterable[EngineEvent]) -> None:
        """Broadcast each event and schedule its sink appends."""
        for event in events:
            payload = event.to_payload()
            try:
                self.channel.broadcast(event.event_type.value, payload)
            except Exception as e:
                logger.error(f"Broadcast of {event.event_type.value} event failed: {e}")

            for sink in self.sinks:
                if event.event_type in sink.event_types:
                    self._schedule_append(sink, payload)

    def _schedule_append(self, sink: PersistenceSink, record: dict) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, dropping record for sink {sink.name}")
            return

        if len(self._pending) >= self.max_pending:
            self._dropped_writes += 1
            if self._dropped_writes == 1 or self._dropped_writes % 1000 == 0:
                logger.warning(
                    f"{len(self._pending)} sink writes pending, "
                    f"dropped {self._dropped_writes} record(s)"
                )
            return

        task = loop.create_task(self._safe_append(sink, record))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _safe_append(self, sink: PersistenceSink, record: dict) -> None:
        """Run one sink append, containing any failure."""
        try:
            await sink.append(record)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._sink_failures += 1
            logger.error(f"Sink {sink.name} append failed: {e}")

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    @property
    def sink_failures(self) -> int:
        return self._sink_failures

    @property
    def dropped_writes(self) -> int:
        """Records dropped because too many sink writes were in flight."""
        return self._dropped_writes

    async def drain(self) -> None:
        """Wait for in-flight sink appends (used at shutdown)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
