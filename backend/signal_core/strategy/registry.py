"""Registry for discovering and instantiating signal generators.

Usage:
    @register_generator(SignalType.OVER_UNDER)
    class OverUnderGenerator:
        ...

    generator = create_generator(SignalType.OVER_UNDER, config=config)
    types = list_generators()
"""

from __future__ import annotations

import logging
from typing import Any

from signal_core.models import SignalType

logger = logging.getLogger(__name__)

# Global registry: signal type -> generator class
_REGISTRY: dict[SignalType, type] = {}


def register_generator(signal_type: SignalType):
    """Decorator to register a generator class for a signal type.

    Raises:
        ValueError: If a generator is already registered for the type.
    """

    def decorator(cls):
        if signal_type in _REGISTRY:
            raise ValueError(
                f"Generator for '{signal_type.value}' is already registered "
                f"by {_REGISTRY[signal_type].__name__}"
            )
        _REGISTRY[signal_type] = cls
        logger.debug("Registered generator: %s -> %s", signal_type.value, cls.__name__)
        return cls

    return decorator


def create_generator(signal_type: SignalType | str, **kwargs: Any):
    """Create a generator instance for a signal type.

    Raises:
        KeyError: If no generator is registered for the type.
    """
    try:
        key = SignalType(signal_type)
    except ValueError:
        raise KeyError(f"Unknown signal type '{signal_type}'") from None
    cls = _REGISTRY.get(key)
    if cls is None:
        available = ", ".join(sorted(t.value for t in _REGISTRY)) or "(none)"
        raise KeyError(f"Unknown signal type '{key.value}'. Available: {available}")
    return cls(**kwargs)


def list_generators() -> list[SignalType]:
    """Return registered signal types."""
    return sorted(_REGISTRY.keys(), key=lambda t: t.value)
