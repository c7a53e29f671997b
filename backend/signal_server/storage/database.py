"""Database connection and table definitions."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from signal_server.config import get_settings

Base = declarative_base()


class TickTable(Base):
    """Raw tick history."""

    __tablename__ = "ticks"

    symbol = Column(String(32), primary_key=True)
    timestamp = Column(BigInteger, primary_key=True)  # epoch ms
    price = Column(Float, nullable=False)

    __table_args__ = (
        Index("idx_ticks_symbol_timestamp", "symbol", "timestamp"),
    )


class SignalTable(Base):
    """Emitted prediction signals."""

    __tablename__ = "signals"

    id = Column(String(40), primary_key=True)
    signal_type = Column(String(20), nullable=False)
    direction = Column(String(32), nullable=False)
    symbol = Column(String(32), nullable=False)
    price = Column(Float, nullable=False)
    confidence = Column(Float, nullable=False)
    expiry_seconds = Column(Integer, nullable=False, default=60)
    timestamp = Column(BigInteger, nullable=False)  # epoch ms of source tick
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_signals_symbol_timestamp", "symbol", "timestamp"),
        Index("idx_signals_type", "signal_type"),
    )


class Database:
    """Database connection manager."""

    def __init__(self, database_url: str | None = None):
        settings = get_settings()
        url = database_url or settings.database_url
        if not url:
            raise ValueError("database_url is not configured")

        # Convert postgresql:// to postgresql+asyncpg://
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)

        self.engine = create_async_engine(
            url,
            echo=settings.debug,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=3600,
            pool_timeout=30,
        )
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def create_tables(self) -> None:
        """Create all tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get a database session."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Close database connection."""
        await self.engine.dispose()


# Global database instance
_db: Database | None = None


def get_database() -> Database:
    """Get the global database instance."""
    global _db
    if _db is None:
        _db = Database()
    return _db


async def init_database() -> Database:
    """Initialize the database and create tables."""
    db = get_database()
    await db.create_tables()
    return db


async def close_database() -> None:
    """Dispose the global database instance, if any."""
    global _db
    if _db is not None:
        await _db.close()
        _db = None
