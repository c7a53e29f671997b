"""Tests for the simulated tick feed."""

import asyncio

import pytest

from signal_core.feed import ConnectionState
from signal_server.clients.simulated import RandomWalk, SimulatedTickFeed


class TestRandomWalk:
    def test_bounded_step(self):
        walk = RandomWalk(["R_100"], start_price=10000.0, seed=1)
        previous = 10000.0
        for _ in range(500):
            price = walk.step("R_100")
            assert abs(price - previous) <= 2.01
            previous = price

    def test_price_floor(self):
        walk = RandomWalk(["R_100"], start_price=1.0, seed=3)
        assert all(walk.step("R_100") >= 1.0 for _ in range(500))

    def test_seed_is_reproducible(self):
        first = RandomWalk(["A", "B"], seed=42)
        second = RandomWalk(["A", "B"], seed=42)
        assert [first.step("A") for _ in range(10)] == [second.step("A") for _ in range(10)]


class TestSimulatedTickFeed:
    """Tests for the feed connector."""

    def test_emit_once_dispatches_each_symbol(self):
        feed = SimulatedTickFeed(["R_100", "R_50"], seed=7)
        received = []
        feed.on_tick(received.append)

        ticks = feed.emit_once()

        assert [t.symbol for t in ticks] == ["R_100", "R_50"]
        assert received == ticks
        assert all(t.timestamp > 0 for t in ticks)

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        feed = SimulatedTickFeed(["R_100"], interval=0.01, seed=7)
        transitions = []
        received = []
        feed.on_lifecycle(lambda prev, new: transitions.append(new))
        feed.on_tick(received.append)

        await feed.start()
        assert feed.state is ConnectionState.SUBSCRIBED
        await asyncio.sleep(0.05)
        await feed.stop()

        assert feed.state is ConnectionState.DISCONNECTED
        assert received
        assert transitions == [
            ConnectionState.CONNECTING,
            ConnectionState.SUBSCRIBED,
            ConnectionState.DISCONNECTED,
        ]
