"""Signal engine: the single synchronous ingestion path.

Each tick is processed to completion before the next one:

1. push the price into the symbol buffer
2. emit a tick event (unconditionally)
3. ask every enabled generator for a candidate
4. let the gate admit at most one candidate
5. emit a signal event for the admitted candidate

``ingest`` never suspends and never raises on thin history; the caller
(event loop, thread, task queue) owns scheduling and delivery of the
returned events. Engines hold all of their state, so independent
instances can run side by side.
"""

import logging

from signal_core.buffer import SymbolBufferManager
from signal_core.features import FeatureSet, compute_features
from signal_core.gate import SignalGate
from signal_core.models import (
    SIGNAL_PRIORITY,
    EngineConfig,
    EngineEvent,
    Signal,
    SignalCandidate,
    Tick,
)
from signal_core.scoring import EnsembleScorer, Score
from signal_core.strategy import SignalGenerator, create_generator

logger = logging.getLogger(__name__)


class SignalEngine:
    """Turn a stream of ticks into tick and signal events."""

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()
        self.buffers = SymbolBufferManager(capacity=self.config.buffer_capacity)
        self.scorer = EnsembleScorer(self.config.weights)
        self.gate = SignalGate(
            cooldown_ms=self.config.cooldown_ms,
            thresholds=self.config.thresholds,
            cooldown_scope=self.config.cooldown_scope,
        )

        enabled = set(self.config.enabled_signals)
        self.generators: list[SignalGenerator] = [
            create_generator(signal_type, config=self.config)
            for signal_type in SIGNAL_PRIORITY
            if signal_type in enabled
        ]

        self._ticks_ingested = 0
        self._signals_emitted = 0

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, tick: Tick) -> list[EngineEvent]:
        """Process one tick and return the events it produced."""
        self.buffers.push(tick.symbol, tick.price)
        self._ticks_ingested += 1

        events = [EngineEvent.tick(tick)]

        candidates = self._collect_candidates(tick)
        admitted = self.gate.admit(candidates, now_ms=tick.timestamp)
        if admitted is not None:
            signal = Signal.from_candidate(
                admitted,
                symbol=tick.symbol,
                price=tick.price,
                timestamp=tick.timestamp,
                expiry_seconds=self.config.expiry_seconds,
            )
            self._signals_emitted += 1
            logger.info(
                "New signal: %s %s %s @ %s (confidence %.3f)",
                signal.type.value, signal.direction, signal.symbol,
                signal.price, signal.confidence,
            )
            events.append(EngineEvent.signal(signal))

        return events

    def _collect_candidates(self, tick: Tick) -> list[SignalCandidate]:
        candidates = []
        for generator in self.generators:
            candidate = generator.evaluate(tick, self.buffers)
            if candidate is not None:
                candidates.append(candidate)
        return candidates

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def features(self, symbol: str) -> FeatureSet | None:
        """Current feature snapshot for a symbol, or ``None``."""
        return compute_features(self.buffers, symbol)

    def score(self, symbol: str) -> Score:
        """Current ensemble score for a symbol."""
        return self.scorer.score(self.features(symbol))

    @property
    def ticks_ingested(self) -> int:
        return self._ticks_ingested

    @property
    def signals_emitted(self) -> int:
        return self._signals_emitted

    def stats(self) -> dict:
        """Counters and buffer lengths for status reporting."""
        return {
            "ticks_ingested": self._ticks_ingested,
            "signals_emitted": self._signals_emitted,
            "last_signal_ms": self.gate.last_emission(),
            "buffers": self.buffers.snapshot(),
        }
