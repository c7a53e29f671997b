"""Persistence sinks fed by the event emitter.

Each sink accepts records for a fixed set of event types. Appends are
scheduled fire-and-forget by the emitter, so a sink may raise freely:
failures are logged there and never reach the broadcast path.
"""

from signal_core.models import EventType, Signal, Tick
from signal_server.storage import cache
from signal_server.storage.signal_repo import SignalRepository, TickRepository


class SignalTableSink:
    """Append signals to the SQL ``signals`` table."""

    name = "sql-signals"
    event_types = frozenset({EventType.SIGNAL})

    def __init__(self, repo: SignalRepository | None = None):
        self.repo = repo or SignalRepository()

    async def append(self, record: dict) -> None:
        await self.repo.save(Signal.model_validate(record))


class TickTableSink:
    """Append ticks to the SQL ``ticks`` table."""

    name = "sql-ticks"
    event_types = frozenset({EventType.TICK})

    def __init__(self, repo: TickRepository | None = None):
        self.repo = repo or TickRepository()

    async def append(self, record: dict) -> None:
        await self.repo.save(Tick.model_validate(record))


class RecentSignalsSink:
    """Keep a capped list of recent signals in Redis."""

    name = "redis-recent-signals"
    event_types = frozenset({EventType.SIGNAL})

    def __init__(self, max_len: int = 200):
        self.max_len = max_len

    async def append(self, record: dict) -> None:
        await cache.push_recent_signal(record, max_len=self.max_len)
