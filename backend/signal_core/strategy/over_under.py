"""Over/under generator driven by the ensemble score."""

from __future__ import annotations

from signal_core.buffer import SymbolBufferManager
from signal_core.features import compute_features
from signal_core.models import EngineConfig, SignalCandidate, SignalType, Tick
from signal_core.scoring import EnsembleScorer
from signal_core.strategy.registry import register_generator


@register_generator(SignalType.OVER_UNDER)
class OverUnderGenerator:
    """Predict whether the next prices land over or under the recent trend.

    Confidence is the composite ensemble score of the ticked symbol.
    """

    def __init__(self, config: EngineConfig | None = None):
        config = config or EngineConfig()
        self.scorer = EnsembleScorer(config.weights)

    @property
    def signal_type(self) -> SignalType:
        return SignalType.OVER_UNDER

    def evaluate(
        self,
        tick: Tick,
        buffers: SymbolBufferManager,
    ) -> SignalCandidate | None:
        score = self.scorer.score(compute_features(buffers, tick.symbol))
        if not score.is_decision:
            return None

        return SignalCandidate(
            type=SignalType.OVER_UNDER,
            direction=score.direction.value,
            confidence=score.value,
            metadata=score.to_dict()["components"],
        )
