"""Data models."""

from signal_core.models.tick import Tick
from signal_core.models.signal import (
    SIGNAL_PRIORITY,
    ParityDirection,
    ScoreDirection,
    Signal,
    SignalCandidate,
    SignalType,
    generate_signal_id,
)
from signal_core.models.config import (
    MIN_BUFFER_CAPACITY,
    EngineConfig,
    EnsembleWeights,
    SignalThresholds,
)
from signal_core.models.events import EngineEvent, EventType

__all__ = [
    "Tick",
    "SIGNAL_PRIORITY",
    "ParityDirection",
    "ScoreDirection",
    "Signal",
    "SignalCandidate",
    "SignalType",
    "generate_signal_id",
    "MIN_BUFFER_CAPACITY",
    "EngineConfig",
    "EnsembleWeights",
    "SignalThresholds",
    "EngineEvent",
    "EventType",
]
