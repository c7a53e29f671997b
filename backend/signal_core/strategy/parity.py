"""Parity (last digit) generator."""

from __future__ import annotations

import math

from signal_core.buffer import SymbolBufferManager
from signal_core.models import (
    EngineConfig,
    ParityDirection,
    SignalCandidate,
    SignalType,
    Tick,
)
from signal_core.strategy.registry import register_generator

BASE_CONFIDENCE = 0.5
MAX_CONFIDENCE = 0.99

# Digits that receive the confidence bonus. This is exactly the set of
# even digits, so the rule is flat: every even direction gets the bonus.
BONUS_DIGITS = frozenset({0, 2, 4, 6, 8})


def last_digit(price: float) -> int:
    """Units digit of the integer part of a price."""
    return int(math.floor(price)) % 10


@register_generator(SignalType.EVEN_ODD)
class ParityGenerator:
    """Predict even/odd from the last digit of the integer price."""

    def __init__(self, config: EngineConfig | None = None):
        config = config or EngineConfig()
        self.bonus = config.parity_bonus

    @property
    def signal_type(self) -> SignalType:
        return SignalType.EVEN_ODD

    def evaluate(
        self,
        tick: Tick,
        buffers: SymbolBufferManager,
    ) -> SignalCandidate:
        digit = last_digit(tick.price)
        direction = ParityDirection.EVEN if digit % 2 == 0 else ParityDirection.ODD
        bonus = self.bonus if digit in BONUS_DIGITS else 0.0

        return SignalCandidate(
            type=SignalType.EVEN_ODD,
            direction=direction.value,
            confidence=min(MAX_CONFIDENCE, BASE_CONFIDENCE + bonus),
            metadata={"digit": digit},
        )
