"""Data storage layer."""

from signal_server.storage.database import (
    Database,
    close_database,
    get_database,
    init_database,
)
from signal_server.storage.signal_repo import SignalRepository, TickRepository
from signal_server.storage.sinks import RecentSignalsSink, SignalTableSink, TickTableSink
from signal_server.storage import cache

__all__ = [
    "Database",
    "get_database",
    "init_database",
    "close_database",
    "SignalRepository",
    "TickRepository",
    "SignalTableSink",
    "TickTableSink",
    "RecentSignalsSink",
    "cache",
]
