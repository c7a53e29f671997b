"""Tick (price observation) data model."""

from pydantic import BaseModel, ConfigDict, Field


class Tick(BaseModel):
    """One price observation for a symbol.

    The timestamp is epoch milliseconds as supplied by the feed. It is not
    required to be strictly increasing; the engine trusts arrival order.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(min_length=1)
    price: float = Field(gt=0, allow_inf_nan=False)
    timestamp: int = Field(ge=0)

    def to_payload(self) -> dict:
        """JSON-ready representation used for broadcast and persistence."""
        return {
            "symbol": self.symbol,
            "price": self.price,
            "timestamp": self.timestamp,
        }
