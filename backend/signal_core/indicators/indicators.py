"""Window statistics for feature computation.

Both functions operate on a fixed-size window that the caller has
already cut from a buffer; they never look past the samples given.
"""

from typing import Sequence

import numpy as np


def sma(samples: Sequence[float]) -> float:
    """Arithmetic mean of a window."""
    if len(samples) == 0:
        raise ValueError("sma of an empty window")
    return float(np.mean(np.asarray(samples, dtype=np.float64)))


def stdev(samples: Sequence[float]) -> float:
    """Population standard deviation of a window (divisor = window size)."""
    if len(samples) == 0:
        raise ValueError("stdev of an empty window")
    return float(np.std(np.asarray(samples, dtype=np.float64), ddof=0))


def tail(samples: Sequence[float], n: int) -> Sequence[float]:
    """Return the last *n* samples of a sequence."""
    return samples[len(samples) - n:]
