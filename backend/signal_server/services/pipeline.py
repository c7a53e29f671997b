"""Signal pipeline: feed connector -> engine -> emitter.

The pipeline owns the one tick handler and the one lifecycle handler
registered with the feed. Each tick is ingested synchronously by the
engine and the resulting events are handed to the emitter, which
broadcasts without blocking and schedules sink writes in the background.
"""

import logging
from typing import Protocol

from signal_core.emitter import DEFAULT_MAX_PENDING, BroadcastChannel, EventEmitter, PersistenceSink
from signal_core.engine import SignalEngine
from signal_core.feed import ConnectionState, ExponentialBackoffRetry, FixedDelayRetry, LifecycleHandler
from signal_core.models import EngineEvent, Tick
from signal_server.clients import DerivTickWebSocket, SimulatedTickFeed
from signal_server.clients.deriv_ws import TickHandler
from signal_server.config import Settings
from signal_server.storage import RecentSignalsSink, SignalTableSink, TickTableSink

logger = logging.getLogger(__name__)


class FeedConnector(Protocol):
    """Interface shared by the Deriv and simulated feeds."""

    @property
    def state(self) -> ConnectionState: ...

    def on_tick(self, handler: TickHandler) -> None: ...

    def on_lifecycle(self, handler: LifecycleHandler) -> None: ...

    async def start(self) -> None: ...

    async def stop(self) -> None: ...


def build_feed(settings: Settings) -> FeedConnector:
    """Create the feed connector selected by ``feed_mode``."""
    if settings.feed_mode == "simulated":
        return SimulatedTickFeed(
            symbols=settings.symbols,
            interval=settings.simulated_interval,
            start_price=settings.simulated_start_price,
        )

    if settings.reconnect_delay > 0:
        retry = FixedDelayRetry(settings.reconnect_delay)
    else:
        retry = ExponentialBackoffRetry()
    return DerivTickWebSocket(
        symbols=settings.symbols,
        app_id=settings.deriv_app_id,
        api_token=settings.deriv_api_token,
        url=settings.deriv_ws_url,
        retry_policy=retry,
    )


def build_sinks(
    settings: Settings,
    database_available: bool = False,
    cache_available: bool = False,
) -> list[PersistenceSink]:
    """Create the persistence sinks enabled in settings and reachable at startup."""
    sinks: list[PersistenceSink] = []
    if database_available:
        if settings.persist_signals:
            sinks.append(SignalTableSink())
        if settings.persist_ticks:
            sinks.append(TickTableSink())
    if cache_available:
        sinks.append(RecentSignalsSink(max_len=settings.redis_recent_signals))
    return sinks


class SignalPipeline:
    """Wire one feed to one engine and one emitter."""

    def __init__(
        self,
        engine: SignalEngine,
        feed: FeedConnector,
        channel: BroadcastChannel,
        sinks: list[PersistenceSink] | None = None,
        max_pending_writes: int = DEFAULT_MAX_PENDING,
    ):
        self.engine = engine
        self.feed = feed
        self.channel = channel
        self.emitter = EventEmitter(channel, sinks or [], max_pending=max_pending_writes)

        feed.on_tick(self.handle_tick)
        feed.on_lifecycle(self.handle_lifecycle)

    def handle_tick(self, tick: Tick) -> list[EngineEvent]:
        """Ingest a tick and publish its events."""
        events = self.engine.ingest(tick)
        self.emitter.publish(events)
        return events

    def handle_lifecycle(self, previous: ConnectionState, current: ConnectionState) -> None:
        """Tell subscribers about feed connection changes."""
        self.channel.broadcast(
            "status",
            {"feed_state": current.value, "previous_state": previous.value},
        )
        if current is ConnectionState.DISCONNECTED:
            logger.warning("Feed disconnected, engine idle until ticks resume")

    async def start(self) -> None:
        sink_names = [sink.name for sink in self.emitter.sinks] or ["none"]
        logger.info(f"Starting pipeline for {self.engine.config.symbols} (sinks: {', '.join(sink_names)})")
        await self.feed.start()

    async def stop(self) -> None:
        await self.feed.stop()
        await self.emitter.drain()
        logger.info(
            f"Pipeline stopped: {self.engine.ticks_ingested} ticks, "
            f"{self.engine.signals_emitted} signals"
        )
