"""Feed clients."""

from signal_server.clients.deriv_ws import DerivTickWebSocket, DerivTickListener, parse_tick
from signal_server.clients.simulated import RandomWalk, SimulatedTickFeed

__all__ = [
    "DerivTickWebSocket",
    "DerivTickListener",
    "parse_tick",
    "RandomWalk",
    "SimulatedTickFeed",
]
