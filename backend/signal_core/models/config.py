"""Engine configuration models."""

from __future__ import annotations

import math
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from signal_core.models.signal import SIGNAL_PRIORITY, SignalType

# Largest window any feature needs (sma20 / vol20)
MIN_BUFFER_CAPACITY = 20


class EnsembleWeights(BaseModel):
    """Weights of the composite score terms. Must sum to 1."""

    momentum: float = Field(default=0.45, ge=0.0, le=1.0)
    trend: float = Field(default=0.35, ge=0.0, le=1.0)
    volatility: float = Field(default=0.20, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _check_sum(self) -> EnsembleWeights:
        total = self.momentum + self.trend + self.volatility
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"ensemble weights must sum to 1, got {total:.6f}")
        return self


class SignalThresholds(BaseModel):
    """Minimum confidence per signal type for the gate to admit it."""

    # With default weights an "under" score stays below about 0.65, so the
    # default over_under threshold only admits "over" signals
    over_under: float = Field(default=0.70, ge=0.0, le=1.0)
    even_odd: float = Field(default=0.52, ge=0.0, le=1.0)
    matches: float = Field(default=0.55, ge=0.0, le=1.0)

    def for_type(self, signal_type: SignalType) -> float:
        """Get the threshold for a signal type."""
        return getattr(self, signal_type.value)


class EngineConfig(BaseModel):
    """Signal engine configuration parameters."""

    # Tracked symbols (first two form the default matches pair)
    symbols: list[str] = ["R_100"]

    # Per-symbol rolling history
    buffer_capacity: int = Field(default=500, ge=MIN_BUFFER_CAPACITY)

    # Ensemble scorer
    weights: EnsembleWeights = EnsembleWeights()

    # Gate
    thresholds: SignalThresholds = SignalThresholds()
    cooldown_ms: int = Field(default=5000, ge=0)
    # "shared": one cooldown slot for every signal type
    # "per_type": independent cooldown per signal type
    cooldown_scope: Literal["shared", "per_type"] = "shared"

    # Emitted signals
    expiry_seconds: int = Field(default=60, gt=0)

    # Parity generator: confidence bonus for even digits
    parity_bonus: float = Field(default=0.04, ge=0.0, le=0.49)

    # Matches generator: explicit (symbol_a, symbol_b) pair
    matches_pair: tuple[str, str] | None = None

    # Generators to run; evaluation order is always the fixed priority
    enabled_signals: list[SignalType] = list(SIGNAL_PRIORITY)

    @model_validator(mode="after")
    def _check_matches_pair(self) -> EngineConfig:
        if self.matches_pair is not None and self.matches_pair[0] == self.matches_pair[1]:
            raise ValueError("matches_pair must name two different symbols")
        return self

    def resolved_matches_pair(self) -> tuple[str, str] | None:
        """Get the (symbol_a, symbol_b) pair compared by the matches generator."""
        if self.matches_pair is not None:
            return self.matches_pair
        if len(self.symbols) >= 2:
            return self.symbols[0], self.symbols[1]
        return None
