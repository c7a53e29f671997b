"""Events produced by the engine for each ingested tick."""

from dataclasses import dataclass
from enum import Enum

from signal_core.models.signal import Signal
from signal_core.models.tick import Tick


class EventType(str, Enum):
    """Outbound event types."""

    TICK = "tick"
    SIGNAL = "signal"


@dataclass(frozen=True, slots=True)
class EngineEvent:
    """One outbound event: a tick echo or an admitted signal."""

    event_type: EventType
    payload: Tick | Signal

    @classmethod
    def tick(cls, tick: Tick) -> "EngineEvent":
        return cls(EventType.TICK, tick)

    @classmethod
    def signal(cls, signal: Signal) -> "EngineEvent":
        return cls(EventType.SIGNAL, signal)

    def to_payload(self) -> dict:
        """JSON-ready payload for broadcast channels and sinks."""
        return self.payload.to_payload()
