"""Simulated tick feed: a bounded random walk per symbol.

Useful for demos and local development without Deriv credentials.
Every interval each symbol moves by a uniform delta in [-2, 2), is
floored at 1 and rounded to 2 decimals.
"""

import asyncio
import logging
import time

import numpy as np

from signal_core.feed import ConnectionState, ConnectionStateMachine, FeedEvent, LifecycleHandler
from signal_core.models import Tick
from signal_server.clients.deriv_ws import TickHandler

logger = logging.getLogger(__name__)

MAX_STEP = 2.0
MIN_PRICE = 1.0


class RandomWalk:
    """Per-symbol random walk price generator."""

    def __init__(
        self,
        symbols: list[str],
        start_price: float = 10000.0,
        seed: int | None = None,
    ):
        self._rng = np.random.default_rng(seed)
        self._prices = {symbol: start_price for symbol in symbols}

    def step(self, symbol: str) -> float:
        """Advance one symbol and return its new price."""
        delta = (self._rng.random() - 0.5) * 2 * MAX_STEP
        price = max(MIN_PRICE, self._prices[symbol] + delta)
        self._prices[symbol] = price
        return round(price, 2)


class SimulatedTickFeed:
    """Feed connector producing simulated ticks on a timer."""

    def __init__(
        self,
        symbols: list[str],
        interval: float = 1.0,
        start_price: float = 10000.0,
        seed: int | None = None,
    ):
        self.symbols = list(symbols)
        self.interval = interval
        self.walk = RandomWalk(self.symbols, start_price=start_price, seed=seed)
        self.state_machine = ConnectionStateMachine(requires_auth=False)
        self._tick_handler: TickHandler | None = None
        self._running = False
        self._task: asyncio.Task | None = None

    def on_tick(self, handler: TickHandler) -> None:
        """Register the tick handler (replaces any previous one)."""
        self._tick_handler = handler

    def on_lifecycle(self, handler: LifecycleHandler) -> None:
        """Register the lifecycle handler (replaces any previous one)."""
        self.state_machine.on_transition(handler)

    @property
    def state(self) -> ConnectionState:
        return self.state_machine.state

    def emit_once(self) -> list[Tick]:
        """Generate and dispatch one tick per symbol."""
        now_ms = int(time.time() * 1000)
        ticks = [
            Tick(symbol=symbol, price=self.walk.step(symbol), timestamp=now_ms)
            for symbol in self.symbols
        ]
        for tick in ticks:
            if self.state is ConnectionState.SUBSCRIBED:
                self.state_machine.handle(FeedEvent.TICK)
            if self._tick_handler is None:
                continue
            try:
                self._tick_handler(tick)
            except Exception as e:
                logger.error(f"Tick handler error: {e}")
        return ticks

    async def start(self) -> None:
        """Start generating ticks."""
        if self._running:
            return

        self._running = True
        self.state_machine.handle(FeedEvent.CONNECT)
        self.state_machine.handle(FeedEvent.OPEN)
        self._task = asyncio.create_task(self._run())
        logger.info(f"Simulated feed started for {self.symbols} every {self.interval}s")

    async def stop(self) -> None:
        """Stop generating ticks."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self.state_machine.handle(FeedEvent.CLOSE)

    async def _run(self) -> None:
        while self._running:
            self.emit_once()
            await asyncio.sleep(self.interval)
