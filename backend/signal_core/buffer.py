"""Bounded per-symbol price history.

Each symbol owns a ring buffer of the most recent prices in arrival
order. Once a buffer reaches capacity the oldest sample is evicted on
every push (strict FIFO), so memory per symbol is bounded and
``push`` stays O(1).

Callers asking for more history than is available get ``None``
("insufficient data, do not decide") instead of an exception.
"""

from __future__ import annotations

import logging
from collections import deque

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 500


class SymbolBufferManager:
    """Own one bounded ordered sample sequence per symbol.

    Parameters
    ----------
    capacity : int
        Maximum samples kept per symbol. Older values are discarded
        (FIFO). Duplicate prices are kept.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._buffers: dict[str, deque[float]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def push(self, symbol: str, price: float) -> None:
        """Append a price, evicting the oldest sample on overflow."""
        buf = self._buffers.get(symbol)
        if buf is None:
            buf = deque(maxlen=self.capacity)
            self._buffers[symbol] = buf
            logger.debug("Created buffer for %s (capacity %d)", symbol, self.capacity)
        buf.append(price)

    def window(self, symbol: str, n: int) -> list[float] | None:
        """Return the last *n* samples, oldest first.

        Returns ``None`` when fewer than *n* samples exist (including
        for symbols never pushed) or when *n* is not positive.
        """
        buf = self._buffers.get(symbol)
        if buf is None or n <= 0 or len(buf) < n:
            return None
        if n == len(buf):
            return list(buf)
        # deque does not slice; walk from the right end only
        out = [0.0] * n
        for i in range(n):
            out[n - 1 - i] = buf[-1 - i]
        return out

    def length(self, symbol: str) -> int:
        """Return the number of samples stored for a symbol."""
        return len(self._buffers.get(symbol, ()))

    def latest(self, symbol: str) -> float | None:
        """Return the most recent sample, or ``None`` if empty."""
        buf = self._buffers.get(symbol)
        if not buf:
            return None
        return buf[-1]

    def symbols(self) -> list[str]:
        """Return the symbols that have a buffer."""
        return list(self._buffers.keys())

    def snapshot(self) -> dict[str, int]:
        """Return buffer lengths keyed by symbol."""
        return {symbol: len(buf) for symbol, buf in self._buffers.items()}

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._buffers
