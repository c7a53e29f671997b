"""Tests for pipeline wiring, feed selection and persistence sinks."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from signal_core.engine import SignalEngine
from signal_core.feed import ConnectionState, ExponentialBackoffRetry, FixedDelayRetry
from signal_core.models import EngineConfig, EventType, Tick
from signal_server.clients import DerivTickWebSocket, SimulatedTickFeed
from signal_server.config import Settings
from signal_server.services import SignalPipeline, build_feed, build_sinks
from signal_server.storage import RecentSignalsSink, SignalTableSink, TickTableSink


class RecordingChannel:
    def __init__(self):
        self.sent = []

    def broadcast(self, event_type, payload):
        self.sent.append((event_type, payload))


class TestBuildFeed:
    def test_simulated(self):
        feed = build_feed(Settings(feed_mode="simulated", symbols=["R_10"]))
        assert isinstance(feed, SimulatedTickFeed)
        assert feed.symbols == ["R_10"]

    def test_deriv_fixed_delay(self):
        feed = build_feed(Settings(feed_mode="deriv", reconnect_delay=5.0))
        assert isinstance(feed, DerivTickWebSocket)
        assert isinstance(feed.state_machine.retry_policy, FixedDelayRetry)
        assert feed.state_machine.reconnect_delay() == 5.0

    def test_deriv_backoff(self):
        feed = build_feed(Settings(feed_mode="deriv", reconnect_delay=0))
        assert isinstance(feed.state_machine.retry_policy, ExponentialBackoffRetry)

    def test_deriv_token_requires_auth(self):
        feed = build_feed(Settings(feed_mode="deriv", deriv_api_token="abc"))
        assert feed.state_machine.requires_auth


class TestBuildSinks:
    def test_no_stores(self):
        settings = Settings(persist_signals=True, persist_ticks=True)
        assert build_sinks(settings) == []

    def test_all_stores(self):
        settings = Settings(persist_signals=True, persist_ticks=True)
        sinks = build_sinks(settings, database_available=True, cache_available=True)

        assert [type(s) for s in sinks] == [SignalTableSink, TickTableSink, RecentSignalsSink]

    def test_database_without_flags(self):
        sinks = build_sinks(Settings(), database_available=True)
        assert sinks == []


class TestSignalPipeline:
    """Tests for tick and lifecycle handling."""

    def _pipeline(self, sinks=None):
        feed = SimulatedTickFeed(["R_100"], seed=1)
        channel = RecordingChannel()
        engine = SignalEngine(EngineConfig(symbols=["R_100"]))
        return SignalPipeline(engine, feed, channel, sinks), feed, channel

    def test_ticks_flow_to_channel(self):
        pipeline, feed, channel = self._pipeline()

        feed.emit_once()

        assert channel.sent[0][0] == "tick"
        assert pipeline.engine.ticks_ingested == 1

    def test_handle_tick_returns_events(self):
        pipeline, _, channel = self._pipeline()

        events = pipeline.handle_tick(Tick(symbol="R_100", price=10000.7, timestamp=1))

        assert [e.event_type for e in events] == [EventType.TICK, EventType.SIGNAL]
        assert [t for t, _ in channel.sent] == ["tick", "signal"]

    def test_lifecycle_broadcasts_status(self):
        pipeline, _, channel = self._pipeline()

        pipeline.handle_lifecycle(ConnectionState.SUBSCRIBED, ConnectionState.DISCONNECTED)

        assert channel.sent == [
            ("status", {"feed_state": "disconnected", "previous_state": "subscribed"})
        ]

    def test_pending_write_cap(self):
        feed = SimulatedTickFeed(["R_100"], seed=1)
        pipeline = SignalPipeline(SignalEngine(), feed, RecordingChannel(), max_pending_writes=5)

        assert pipeline.emitter.max_pending == 5

    @pytest.mark.asyncio
    async def test_start_stop(self):
        sink = MagicMock()
        sink.name = "mock"
        sink.event_types = frozenset({EventType.TICK})
        sink.append = AsyncMock()
        pipeline, feed, channel = self._pipeline([sink])

        await pipeline.start()
        await asyncio.sleep(0.01)
        await pipeline.stop()

        assert feed.state is ConnectionState.DISCONNECTED
        assert sink.append.await_count >= 1
        assert ("status", {"feed_state": "subscribed", "previous_state": "connecting"}) in channel.sent


class TestSinks:
    """Tests for persistence sinks."""

    @pytest.mark.asyncio
    async def test_signal_table_sink(self):
        repo = MagicMock()
        repo.save = AsyncMock()
        record = {
            "id": "sig_1",
            "timestamp": 1000,
            "created_at": "2024-01-01T00:00:00Z",
            "type": "matches",
            "direction": "R_50",
            "symbol": "R_50",
            "price": 5000.5,
            "confidence": 0.9,
            "expiry_seconds": 60,
        }

        await SignalTableSink(repo).append(record)

        saved = repo.save.await_args.args[0]
        assert saved.id == "sig_1"
        assert saved.direction == "R_50"

    @pytest.mark.asyncio
    async def test_tick_table_sink(self):
        repo = MagicMock()
        repo.save = AsyncMock()

        await TickTableSink(repo).append({"symbol": "R_100", "price": 1.5, "timestamp": 2})

        assert repo.save.await_args.args[0] == Tick(symbol="R_100", price=1.5, timestamp=2)

    @pytest.mark.asyncio
    async def test_recent_signals_sink(self):
        with patch(
            "signal_server.storage.cache.push_recent_signal", new_callable=AsyncMock
        ) as push:
            await RecentSignalsSink(max_len=10).append({"id": "sig_1"})

        push.assert_awaited_once_with({"id": "sig_1"}, max_len=10)
