"""Generator protocol defining the interface all signal generators implement."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from signal_core.buffer import SymbolBufferManager
from signal_core.models import SignalCandidate, SignalType, Tick


@runtime_checkable
class SignalGenerator(Protocol):
    """Protocol that all signal generators must implement.

    Generators are stateless with respect to ingestion: they read the
    shared buffers (already updated with the current tick) and return
    at most one candidate. Gating happens elsewhere.
    """

    @property
    def signal_type(self) -> SignalType:
        """Signal type this generator produces."""
        ...

    def evaluate(
        self,
        tick: Tick,
        buffers: SymbolBufferManager,
    ) -> SignalCandidate | None:
        """Produce a candidate for the current tick, or ``None``.

        Args:
            tick: The tick being processed.
            buffers: Per-symbol history including this tick.
        """
        ...
