"""Feature snapshot derived from a symbol buffer."""

from __future__ import annotations

from dataclasses import asdict, dataclass

from signal_core.buffer import SymbolBufferManager
from signal_core.indicators import sma, stdev, tail

# Window sizes
SMA_FAST = 3
SMA_MID = 9
SMA_SLOW = 20
VOL_SHORT = 5
VOL_LONG = 20

# Largest window required by any feature
REQUIRED_HISTORY = max(SMA_FAST, SMA_MID, SMA_SLOW, VOL_SHORT, VOL_LONG)


@dataclass(frozen=True, slots=True)
class FeatureSet:
    """Moving averages and volatilities over the most recent samples.

    Ephemeral: recomputed on every evaluation.
    """

    sma3: float
    sma9: float
    sma20: float
    vol5: float
    vol20: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


def compute_features(
    buffers: SymbolBufferManager, symbol: str
) -> FeatureSet | None:
    """Compute the feature snapshot for a symbol.

    Returns ``None`` (insufficient data) while the buffer holds fewer
    than ``REQUIRED_HISTORY`` samples.
    """
    samples = buffers.window(symbol, REQUIRED_HISTORY)
    if samples is None:
        return None

    return FeatureSet(
        sma3=sma(tail(samples, SMA_FAST)),
        sma9=sma(tail(samples, SMA_MID)),
        sma20=sma(tail(samples, SMA_SLOW)),
        vol5=stdev(tail(samples, VOL_SHORT)),
        vol20=stdev(tail(samples, VOL_LONG)),
    )
