"""Emission gate: confidence threshold, cooldown and type priority.

A candidate is admitted only if its confidence reaches the threshold for
its type and the cooldown has elapsed since the last admitted signal.
Candidates are considered in fixed priority order (over_under, even_odd,
matches) and the first admitted one updates the cooldown slot right away,
which suppresses every later candidate in the same cycle.

By default one cooldown slot is shared by all signal types. With
``cooldown_scope="per_type"`` each type keeps its own slot; at most one
signal per cycle is still admitted.
"""

from __future__ import annotations

import logging
from typing import Iterable, Literal

from signal_core.models import (
    SIGNAL_PRIORITY,
    SignalCandidate,
    SignalThresholds,
    SignalType,
)

logger = logging.getLogger(__name__)

_SHARED_SLOT = "*"
_PRIORITY_RANK = {signal_type: rank for rank, signal_type in enumerate(SIGNAL_PRIORITY)}


class SignalGate:
    """Admit at most one candidate per evaluation cycle."""

    def __init__(
        self,
        cooldown_ms: int = 5000,
        thresholds: SignalThresholds | None = None,
        cooldown_scope: Literal["shared", "per_type"] = "shared",
    ):
        self.cooldown_ms = cooldown_ms
        self.thresholds = thresholds or SignalThresholds()
        self.cooldown_scope = cooldown_scope
        # slot -> epoch ms of the last admitted signal
        self._last_emission: dict[str, int] = {}

    def _slot(self, signal_type: SignalType) -> str:
        if self.cooldown_scope == "per_type":
            return signal_type.value
        return _SHARED_SLOT

    def last_emission(self, signal_type: SignalType | None = None) -> int | None:
        """Timestamp of the last admitted signal for the slot of *signal_type*."""
        slot = _SHARED_SLOT if signal_type is None else self._slot(signal_type)
        return self._last_emission.get(slot)

    def cooling_down(self, signal_type: SignalType, now_ms: int) -> bool:
        """True while the cooldown for *signal_type*'s slot has not elapsed."""
        last = self._last_emission.get(self._slot(signal_type))
        if last is None:
            return False
        return now_ms - last < self.cooldown_ms

    def qualifies(self, candidate: SignalCandidate, now_ms: int) -> bool:
        """Check threshold and cooldown without side effects."""
        if candidate.confidence < self.thresholds.for_type(candidate.type):
            return False
        return not self.cooling_down(candidate.type, now_ms)

    def admit(
        self,
        candidates: Iterable[SignalCandidate],
        now_ms: int,
    ) -> SignalCandidate | None:
        """Return the first qualifying candidate in priority order, or ``None``.

        The admitted candidate's slot is stamped with *now_ms*. Rejected
        candidates leave no trace.
        """
        ordered = sorted(candidates, key=lambda c: _PRIORITY_RANK[c.type])
        for candidate in ordered:
            if self.qualifies(candidate, now_ms):
                self._last_emission[self._slot(candidate.type)] = now_ms
                return candidate
            logger.debug(
                "Gate rejected %s %s (confidence %.4f)",
                candidate.type.value, candidate.direction, candidate.confidence,
            )
        return None
