"""Signal and tick data repositories."""

from sqlalchemy.dialects.postgresql import insert

from signal_core.models import Signal, Tick
from signal_server.storage.database import SignalTable, TickTable, get_database


class SignalRepository:
    """Repository for signal data operations."""

    async def save(self, signal: Signal) -> None:
        """Save a new signal record (duplicates are ignored)."""
        async with get_database().session() as session:
            stmt = insert(SignalTable).values(
                id=signal.id,
                signal_type=signal.type.value,
                direction=signal.direction,
                symbol=signal.symbol,
                price=signal.price,
                confidence=signal.confidence,
                expiry_seconds=signal.expiry_seconds,
                timestamp=signal.timestamp,
                created_at=signal.created_at,
            )
            stmt = stmt.on_conflict_do_nothing(index_elements=["id"])
            await session.execute(stmt)


class TickRepository:
    """Repository for tick data operations."""

    async def save(self, tick: Tick) -> None:
        """Save a tick (same symbol/timestamp is ignored)."""
        async with get_database().session() as session:
            stmt = insert(TickTable).values(
                symbol=tick.symbol,
                timestamp=tick.timestamp,
                price=tick.price,
            )
            stmt = stmt.on_conflict_do_nothing(index_elements=["symbol", "timestamp"])
            await session.execute(stmt)
