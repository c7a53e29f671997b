"""Window statistics (pure math, no I/O)."""

from signal_core.indicators.indicators import sma, stdev, tail

__all__ = [
    "sma",
    "stdev",
    "tail",
]
