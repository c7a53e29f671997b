"""Upstream feed connection state machine and retry policies.

States and transitions:

    DISCONNECTED --connect--> CONNECTING
    CONNECTING   --open-----> AUTHENTICATING   (credential configured)
    CONNECTING   --open-----> SUBSCRIBED       (no credential)
    AUTHENTICATING --authorized--> SUBSCRIBED
    SUBSCRIBED   --tick-----> SUBSCRIBED
    any          --close/error--> DISCONNECTED

Events that do not apply to the current state are ignored and logged.
The retry policy decides how long to wait before the next connect
attempt; the attempt counter resets once a tick arrives.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

DEFAULT_RECONNECT_DELAY = 3.0


class ConnectionState(str, Enum):
    """Upstream connection states."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    SUBSCRIBED = "subscribed"


class FeedEvent(str, Enum):
    """Inputs driving the connection state machine."""

    CONNECT = "connect"
    OPEN = "open"
    AUTHORIZED = "authorized"
    TICK = "tick"
    CLOSE = "close"
    ERROR = "error"


# Lifecycle handler: (previous state, new state)
LifecycleHandler = Callable[[ConnectionState, ConnectionState], None]


# ---------------------------------------------------------------------------
# Retry policies
# ---------------------------------------------------------------------------
@runtime_checkable
class RetryPolicy(Protocol):
    """Decide the delay after *attempt* consecutive attempts (1-based)."""

    def next_delay(self, attempt: int) -> float:
        ...


class FixedDelayRetry:
    """Retry forever after the same delay."""

    def __init__(self, delay: float = DEFAULT_RECONNECT_DELAY):
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        self.delay = delay

    def next_delay(self, attempt: int) -> float:
        return self.delay


class ExponentialBackoffRetry:
    """Double the delay on every attempt up to a ceiling."""

    def __init__(
        self,
        initial: float = 1.0,
        maximum: float = 60.0,
        factor: float = 2.0,
    ):
        self.initial = initial
        self.maximum = maximum
        self.factor = factor

    def next_delay(self, attempt: int) -> float:
        exponent = max(attempt - 1, 0)
        return min(self.initial * self.factor ** exponent, self.maximum)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------
_ANY = None

# (state, event) -> next state; state None matches any state
_TRANSITIONS: dict[tuple[ConnectionState | None, FeedEvent], ConnectionState] = {
    (ConnectionState.DISCONNECTED, FeedEvent.CONNECT): ConnectionState.CONNECTING,
    (ConnectionState.AUTHENTICATING, FeedEvent.AUTHORIZED): ConnectionState.SUBSCRIBED,
    (ConnectionState.SUBSCRIBED, FeedEvent.TICK): ConnectionState.SUBSCRIBED,
    (_ANY, FeedEvent.CLOSE): ConnectionState.DISCONNECTED,
    (_ANY, FeedEvent.ERROR): ConnectionState.DISCONNECTED,
}


class ConnectionStateMachine:
    """Track the upstream connection lifecycle.

    Parameters
    ----------
    requires_auth : bool
        Whether an authorize step follows ``open``.
    retry_policy : RetryPolicy
        Delay source for reconnect attempts. Defaults to a fixed 3s delay.
    """

    def __init__(
        self,
        requires_auth: bool = False,
        retry_policy: RetryPolicy | None = None,
    ):
        self.requires_auth = requires_auth
        self.retry_policy = retry_policy or FixedDelayRetry()
        self._state = ConnectionState.DISCONNECTED
        self._attempts = 0
        self._handler: LifecycleHandler | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def attempts(self) -> int:
        """Connect attempts since the last tick was received."""
        return self._attempts

    def on_transition(self, handler: LifecycleHandler | None) -> None:
        """Register the single lifecycle handler (replaces any previous one)."""
        self._handler = handler

    def _next_state(self, event: FeedEvent) -> ConnectionState | None:
        if event is FeedEvent.OPEN:
            if self._state is not ConnectionState.CONNECTING:
                return None
            if self.requires_auth:
                return ConnectionState.AUTHENTICATING
            return ConnectionState.SUBSCRIBED

        target = _TRANSITIONS.get((self._state, event))
        if target is None:
            target = _TRANSITIONS.get((_ANY, event))
        return target

    def handle(self, event: FeedEvent) -> ConnectionState:
        """Apply an event and return the resulting state."""
        target = self._next_state(event)
        if target is None:
            logger.warning(
                f"Ignoring feed event '{event.value}' in state '{self._state.value}'"
            )
            return self._state

        if event is FeedEvent.CONNECT:
            self._attempts += 1
        elif event is FeedEvent.TICK:
            self._attempts = 0

        previous = self._state
        self._state = target
        if previous is not target:
            logger.info(f"Feed connection: {previous.value} -> {target.value}")
            if self._handler is not None:
                try:
                    self._handler(previous, target)
                except Exception as e:
                    logger.error(f"Lifecycle handler error: {e}")
        return self._state

    def reconnect_delay(self) -> float:
        """Delay before retrying after the current run of failed attempts."""
        return self.retry_policy.next_delay(max(self._attempts, 1))
