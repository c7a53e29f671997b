"""Cross-symbol divergence ("matches") generator.

Compares short-term momentum (sma3 - sma9) of two tracked symbols and
favours the one pulling ahead. Only ticks of either pair symbol are
evaluated, and the signal carries the favoured symbol and its latest price.
"""

from __future__ import annotations

import logging

from signal_core.buffer import SymbolBufferManager
from signal_core.indicators import sma, tail
from signal_core.models import EngineConfig, SignalCandidate, SignalType, Tick
from signal_core.strategy.registry import register_generator

logger = logging.getLogger(__name__)

FAST_WINDOW = 3
SLOW_WINDOW = 9
BASE_CONFIDENCE = 0.45
MAX_CONFIDENCE = 0.95
DIFF_SCALE = 5.0


@register_generator(SignalType.MATCHES)
class MatchesGenerator:
    """Emit the symbol whose momentum leads the other's."""

    def __init__(self, config: EngineConfig | None = None):
        config = config or EngineConfig()
        self.pair = config.resolved_matches_pair()
        if self.pair is None:
            logger.info("Matches generator idle: fewer than two symbols configured")

    @property
    def signal_type(self) -> SignalType:
        return SignalType.MATCHES

    @staticmethod
    def _momentum(samples: list[float]) -> float:
        return sma(tail(samples, FAST_WINDOW)) - sma(samples)

    def evaluate(
        self,
        tick: Tick,
        buffers: SymbolBufferManager,
    ) -> SignalCandidate | None:
        if self.pair is None:
            return None

        symbol_a, symbol_b = self.pair
        if tick.symbol not in self.pair:
            return None

        samples_a = buffers.window(symbol_a, SLOW_WINDOW)
        samples_b = buffers.window(symbol_b, SLOW_WINDOW)
        if samples_a is None or samples_b is None:
            return None

        m_diff = self._momentum(samples_a)
        a_diff = self._momentum(samples_b)
        diff = m_diff - a_diff
        favoured = symbol_a if diff > 0 else symbol_b

        return SignalCandidate(
            type=SignalType.MATCHES,
            direction=favoured,
            confidence=min(MAX_CONFIDENCE, abs(diff) / DIFF_SCALE + BASE_CONFIDENCE),
            metadata={"diff": diff},
            symbol=favoured,
            price=buffers.latest(favoured),
        )
