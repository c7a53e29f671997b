"""Tests for the feed connection state machine and retry policies."""

import pytest

from signal_core.feed import (
    ConnectionState,
    ConnectionStateMachine,
    ExponentialBackoffRetry,
    FeedEvent,
    FixedDelayRetry,
)


class TestTransitions:
    """Tests for state transitions."""

    def test_without_credential(self):
        machine = ConnectionStateMachine(requires_auth=False)

        assert machine.state is ConnectionState.DISCONNECTED
        assert machine.handle(FeedEvent.CONNECT) is ConnectionState.CONNECTING
        assert machine.handle(FeedEvent.OPEN) is ConnectionState.SUBSCRIBED

    def test_with_credential(self):
        machine = ConnectionStateMachine(requires_auth=True)
        machine.handle(FeedEvent.CONNECT)

        assert machine.handle(FeedEvent.OPEN) is ConnectionState.AUTHENTICATING
        assert machine.handle(FeedEvent.AUTHORIZED) is ConnectionState.SUBSCRIBED
        assert machine.handle(FeedEvent.TICK) is ConnectionState.SUBSCRIBED

    @pytest.mark.parametrize("event", [FeedEvent.CLOSE, FeedEvent.ERROR])
    def test_close_and_error_from_any_state(self, event):
        for steps in ([], [FeedEvent.CONNECT], [FeedEvent.CONNECT, FeedEvent.OPEN]):
            machine = ConnectionStateMachine(requires_auth=True)
            for step in steps:
                machine.handle(step)
            assert machine.handle(event) is ConnectionState.DISCONNECTED

    def test_invalid_events_ignored(self):
        machine = ConnectionStateMachine()

        assert machine.handle(FeedEvent.OPEN) is ConnectionState.DISCONNECTED
        assert machine.handle(FeedEvent.TICK) is ConnectionState.DISCONNECTED
        assert machine.handle(FeedEvent.AUTHORIZED) is ConnectionState.DISCONNECTED

    def test_tick_before_subscribed_ignored(self):
        machine = ConnectionStateMachine(requires_auth=True)
        machine.handle(FeedEvent.CONNECT)
        machine.handle(FeedEvent.OPEN)

        assert machine.handle(FeedEvent.TICK) is ConnectionState.AUTHENTICATING


class TestLifecycleHandler:
    def test_handler_called_on_change(self):
        calls = []
        machine = ConnectionStateMachine()
        machine.on_transition(lambda prev, new: calls.append((prev, new)))

        machine.handle(FeedEvent.CONNECT)
        machine.handle(FeedEvent.OPEN)
        machine.handle(FeedEvent.TICK)  # no change
        machine.handle(FeedEvent.CLOSE)

        assert calls == [
            (ConnectionState.DISCONNECTED, ConnectionState.CONNECTING),
            (ConnectionState.CONNECTING, ConnectionState.SUBSCRIBED),
            (ConnectionState.SUBSCRIBED, ConnectionState.DISCONNECTED),
        ]

    def test_handler_error_does_not_break_machine(self):
        machine = ConnectionStateMachine()

        def broken(prev, new):
            raise RuntimeError("handler failed")

        machine.on_transition(broken)
        assert machine.handle(FeedEvent.CONNECT) is ConnectionState.CONNECTING


class TestRetry:
    """Tests for retry policies."""

    def test_fixed_delay(self):
        policy = FixedDelayRetry(3.0)
        assert [policy.next_delay(n) for n in (1, 2, 10)] == [3.0, 3.0, 3.0]

    def test_fixed_delay_rejects_negative(self):
        with pytest.raises(ValueError):
            FixedDelayRetry(-1)

    def test_exponential_backoff(self):
        policy = ExponentialBackoffRetry(initial=1.0, maximum=10.0)
        assert [policy.next_delay(n) for n in range(1, 7)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]

    def test_attempts_reset_on_tick(self):
        machine = ConnectionStateMachine(retry_policy=ExponentialBackoffRetry())

        for _ in range(3):
            machine.handle(FeedEvent.CONNECT)
            machine.handle(FeedEvent.ERROR)
        assert machine.attempts == 3
        assert machine.reconnect_delay() == 4.0

        machine.handle(FeedEvent.CONNECT)
        machine.handle(FeedEvent.OPEN)
        machine.handle(FeedEvent.TICK)
        assert machine.attempts == 0
        assert machine.reconnect_delay() == 1.0

    def test_default_fixed_delay(self):
        assert ConnectionStateMachine().reconnect_delay() == 3.0
