"""Ensemble scorer fusing momentum, trend and volatility into one confidence.

Each feature is squashed into roughly [0, 1] with tanh and the three
terms are combined with configurable weights:

    momentum   = sma3 - sma9
    trend      = sma9 - sma20
    vol_ratio  = vol5 / (vol20 + EPSILON)

    momentum_score = (tanh(momentum / 2) + 1) / 2
    trend_score    = (tanh(trend / 2) + 1) / 2
    vol_score      = 1 - tanh(vol_ratio)

    score = clamp(w_m * momentum_score + w_t * trend_score + w_v * vol_score, 0, 1)

Only the composite is clamped. Non-finite features or composite (overflow
on extreme prices) yield ``NO_DECISION``. Direction is ``over`` when
``momentum + trend >= 0`` and ``under`` otherwise.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from signal_core.features import FeatureSet
from signal_core.models import EnsembleWeights, ScoreDirection

logger = logging.getLogger(__name__)

EPSILON = 1e-9


@dataclass(frozen=True, slots=True)
class ScoreComponents:
    """Squashed feature terms before weighting."""

    momentum_score: float = 0.0
    trend_score: float = 0.0
    vol_score: float = 0.0


@dataclass(frozen=True, slots=True)
class Score:
    """Composite confidence and direction."""

    value: float
    direction: ScoreDirection
    components: ScoreComponents = field(default_factory=ScoreComponents)

    @property
    def is_decision(self) -> bool:
        """False for the insufficient-data result."""
        return self.direction is not ScoreDirection.NONE

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "direction": self.direction.value,
            "components": {
                "momentum_score": self.components.momentum_score,
                "trend_score": self.components.trend_score,
                "vol_score": self.components.vol_score,
            },
        }


# Sentinel result when features are unavailable: never emit on it
NO_DECISION = Score(value=0.0, direction=ScoreDirection.NONE)


def _clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


class EnsembleScorer:
    """Fuse a FeatureSet into a composite score."""

    def __init__(self, weights: EnsembleWeights | None = None):
        self.weights = weights or EnsembleWeights()

    def score(self, features: FeatureSet | None) -> Score:
        """Score a feature snapshot, or return ``NO_DECISION`` for ``None``."""
        if features is None:
            return NO_DECISION

        momentum = features.sma3 - features.sma9
        trend = features.sma9 - features.sma20
        vol_ratio = features.vol5 / (features.vol20 + EPSILON)

        components = ScoreComponents(
            momentum_score=(math.tanh(momentum / 2) + 1) / 2,
            trend_score=(math.tanh(trend / 2) + 1) / 2,
            vol_score=1 - math.tanh(vol_ratio),
        )

        w = self.weights
        raw = (
            w.momentum * components.momentum_score
            + w.trend * components.trend_score
            + w.volatility * components.vol_score
        )
        checked = (
            features.sma3, features.sma9, features.sma20, features.vol5, features.vol20,
            momentum, trend, vol_ratio, raw,
        )
        if not all(math.isfinite(v) for v in checked):
            logger.warning(f"Non-finite score from features {features}, no decision")
            return NO_DECISION

        direction = (
            ScoreDirection.OVER if momentum + trend >= 0 else ScoreDirection.UNDER
        )
        return Score(value=_clamp(raw), direction=direction, components=components)
