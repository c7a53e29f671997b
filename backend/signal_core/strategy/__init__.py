"""Signal generator plugin system.

Public API:
- SignalGenerator: Protocol that all generators must implement
- register_generator: Decorator to register a generator class
- create_generator: Factory function to instantiate generators by signal type
- list_generators: Discover all registered signal types

Importing this package auto-registers all built-in generators.
"""

from signal_core.strategy.protocol import SignalGenerator
from signal_core.strategy.registry import (
    register_generator,
    create_generator,
    list_generators,
)

# Import built-in generators to trigger auto-registration
from signal_core.strategy.over_under import OverUnderGenerator
from signal_core.strategy.parity import ParityGenerator, last_digit
from signal_core.strategy.matches import MatchesGenerator

__all__ = [
    "SignalGenerator",
    "register_generator",
    "create_generator",
    "list_generators",
    "OverUnderGenerator",
    "ParityGenerator",
    "MatchesGenerator",
    "last_digit",
]
