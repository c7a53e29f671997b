"""Signal data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class SignalType(str, Enum):
    """Kinds of prediction signal, in gate priority order."""

    OVER_UNDER = "over_under"
    EVEN_ODD = "even_odd"
    MATCHES = "matches"


# Fixed evaluation order for the gate: first qualifying type wins.
SIGNAL_PRIORITY: tuple[SignalType, ...] = (
    SignalType.OVER_UNDER,
    SignalType.EVEN_ODD,
    SignalType.MATCHES,
)


class ScoreDirection(str, Enum):
    """Direction resolved by the ensemble scorer."""

    OVER = "over"
    UNDER = "under"
    NONE = "none"  # Insufficient data, do not emit


class ParityDirection(str, Enum):
    """Direction of a parity (last digit) signal."""

    EVEN = "even"
    ODD = "odd"


def generate_signal_id() -> str:
    """Generate a unique signal ID."""
    return f"sig_{uuid4().hex}"


@dataclass(slots=True)
class SignalCandidate:
    """A candidate produced by a generator, before gating.

    Candidates are cheap values; only the one admitted by the gate
    is turned into a Signal. ``symbol`` and ``price`` override the
    ticked symbol and price when the candidate is about another symbol.
    """

    type: SignalType
    direction: str
    confidence: float
    metadata: dict[str, Any] | None = None
    symbol: str | None = None
    price: float | None = None


class Signal(BaseModel):
    """Gate-admitted prediction signal. Immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_signal_id)
    timestamp: int  # Epoch ms of the tick that produced the signal
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    type: SignalType
    direction: str  # over/under, even/odd, or the favoured symbol for matches
    symbol: str
    price: float
    confidence: float = Field(ge=0.0, le=1.0)
    expiry_seconds: int = 60

    @classmethod
    def from_candidate(
        cls,
        candidate: SignalCandidate,
        symbol: str,
        price: float,
        timestamp: int,
        expiry_seconds: int = 60,
    ) -> "Signal":
        """Build the emitted signal for an admitted candidate.

        *symbol* and *price* come from the tick and are used unless the
        candidate names its own.
        """
        return cls(
            timestamp=timestamp,
            type=candidate.type,
            direction=candidate.direction,
            symbol=candidate.symbol or symbol,
            price=candidate.price if candidate.price is not None else price,
            confidence=candidate.confidence,
            expiry_seconds=expiry_seconds,
        )

    def to_payload(self) -> dict:
        """JSON-ready representation used for broadcast and persistence."""
        return self.model_dump(mode="json")
