"""Core streaming analytics for tick-driven prediction signals.

This package contains pure business logic with no I/O dependencies
(no database, Redis, or network access). The service layer in
signal_server/ feeds ticks in and ships the resulting events out.
"""
