"""Deriv WebSocket client for real-time tick data using picows."""

import asyncio
import logging
from typing import Callable

import orjson
from picows import ws_connect, WSFrame, WSTransport, WSListener, WSMsgType, WSCloseCode

from signal_core.feed import (
    ConnectionState,
    ConnectionStateMachine,
    FeedEvent,
    LifecycleHandler,
    RetryPolicy,
)
from signal_core.models import Tick

logger = logging.getLogger(__name__)

# Type alias for the tick handler (synchronous: the engine never suspends)
TickHandler = Callable[[Tick], None]


def parse_tick(data: dict) -> Tick:
    """Convert a Deriv ``tick`` message into a Tick.

    Raises:
        KeyError, TypeError, ValueError: If the message is incomplete or
            carries an invalid price (pydantic ValidationError is a ValueError).
    """
    body = data["tick"]
    return Tick(
        symbol=body["symbol"],
        price=float(body["quote"]),
        timestamp=int(body["epoch"]) * 1000,
    )


class DerivTickListener(WSListener):
    """picows listener for the Deriv websocket API."""

    def __init__(
        self,
        on_connected: Callable[[], None],
        on_disconnected: Callable[[], None],
        on_message: Callable[[str], None],
    ):
        self._on_connected = on_connected
        self._on_disconnected = on_disconnected
        self._on_message = on_message
        self._transport: WSTransport | None = None

    def on_ws_connected(self, transport: WSTransport):
        """Called when WebSocket connection is established."""
        self._transport = transport
        logger.info("picows: Deriv WebSocket connected")
        self._on_connected()

    def on_ws_disconnected(self, transport: WSTransport):
        """Called when WebSocket is disconnected."""
        logger.info("picows: Deriv WebSocket disconnected")
        self._transport = None
        self._on_disconnected()

    def on_ws_frame(self, transport: WSTransport, frame: WSFrame):
        """Called when a new frame is received."""
        if frame.msg_type == WSMsgType.TEXT:
            self._on_message(frame.get_payload_as_utf8_text())
        elif frame.msg_type == WSMsgType.PING:
            transport.send_pong(frame.get_payload_as_bytes())

    def send_json(self, msg: dict) -> None:
        """Send a JSON request if connected."""
        if not self._transport:
            return
        self._transport.send(WSMsgType.TEXT, orjson.dumps(msg))

    def disconnect(self) -> None:
        """Disconnect the WebSocket."""
        if self._transport:
            self._transport.send_close(WSCloseCode.OK)
            self._transport.disconnect()


class DerivTickWebSocket:
    """Tick feed for one set of symbols over a single Deriv connection.

    Reconnects after close or error according to the retry policy,
    forever. Ticks missed while disconnected are not recovered.
    """

    WS_URL = "wss://ws.derivws.com/websockets/v3"

    def __init__(
        self,
        symbols: list[str],
        app_id: str = "1089",
        api_token: str = "",
        url: str | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self.symbols = list(symbols)
        self.app_id = app_id
        self._api_token = api_token
        self.url = f"{url or self.WS_URL}?app_id={app_id}"
        self.state_machine = ConnectionStateMachine(
            requires_auth=bool(api_token),
            retry_policy=retry_policy,
        )
        self._tick_handler: TickHandler | None = None
        self._running = False
        self._task: asyncio.Task | None = None
        self._listener: DerivTickListener | None = None
        self._disconnected = asyncio.Event()
        self._malformed = 0

    # ------------------------------------------------------------------
    # Handler registration
    # ------------------------------------------------------------------

    def on_tick(self, handler: TickHandler) -> None:
        """Register the tick handler (replaces any previous one)."""
        self._tick_handler = handler

    def on_lifecycle(self, handler: LifecycleHandler) -> None:
        """Register the lifecycle handler (replaces any previous one)."""
        self.state_machine.on_transition(handler)

    @property
    def state(self) -> ConnectionState:
        return self.state_machine.state

    @property
    def malformed_messages(self) -> int:
        return self._malformed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the WebSocket connection and message processing."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the WebSocket connection."""
        self._running = False
        if self._listener:
            self._listener.disconnect()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _run(self) -> None:
        """Main WebSocket loop with reconnection."""
        while self._running:
            self.state_machine.handle(FeedEvent.CONNECT)
            try:
                await self._connect_and_process()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"picows Deriv error: {e}")
                self.state_machine.handle(FeedEvent.ERROR)

            if self._running:
                delay = self.state_machine.reconnect_delay()
                logger.info(f"Reconnecting Deriv WS in {delay} seconds...")
                await asyncio.sleep(delay)

    async def _connect_and_process(self) -> None:
        """Connect to WebSocket and wait for disconnection."""
        self._disconnected.clear()

        def listener_factory():
            self._listener = DerivTickListener(
                on_connected=self._on_connected,
                on_disconnected=self._on_disconnected,
                on_message=self._handle_message,
            )
            return self._listener

        logger.info(f"Connecting Deriv WS to {self.url}")
        await ws_connect(
            listener_factory,
            self.url,
            enable_auto_ping=True,
            auto_ping_idle_timeout=30,
            auto_ping_reply_timeout=10,
        )

        # Wait until disconnected
        await self._disconnected.wait()

    def _on_connected(self) -> None:
        state = self.state_machine.handle(FeedEvent.OPEN)
        if state is ConnectionState.AUTHENTICATING:
            self._send({"authorize": self._api_token})
        elif state is ConnectionState.SUBSCRIBED:
            self._send_subscribe()

    def _on_disconnected(self) -> None:
        self.state_machine.handle(FeedEvent.CLOSE)
        self._disconnected.set()

    def _send(self, msg: dict) -> None:
        if self._listener:
            self._listener.send_json(msg)

    def _send_subscribe(self) -> None:
        for symbol in self.symbols:
            self._send({"ticks": symbol, "subscribe": 1})
        logger.info(f"Subscribed to Deriv ticks: {self.symbols}")

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    def _handle_message(self, message: str) -> None:
        """Handle one incoming text frame. Malformed input is logged and dropped."""
        try:
            data = orjson.loads(message)
        except orjson.JSONDecodeError as e:
            self._malformed += 1
            logger.warning(f"Failed to parse Deriv message: {e}")
            return

        if not isinstance(data, dict):
            self._malformed += 1
            logger.warning(f"Unexpected Deriv message: {message[:200]}")
            return

        msg_type = data.get("msg_type")

        if "error" in data:
            error = data.get("error") or {}
            logger.error(
                f"Deriv error on '{msg_type}': "
                f"{error.get('code', '?')} {error.get('message', '')}"
            )
            if msg_type == "authorize":
                # Authorization failure: drop the connection and retry later
                self.state_machine.handle(FeedEvent.ERROR)
                if self._listener:
                    self._listener.disconnect()
            return

        if msg_type == "authorize":
            state = self.state_machine.handle(FeedEvent.AUTHORIZED)
            if state is ConnectionState.SUBSCRIBED:
                self._send_subscribe()
        elif msg_type == "tick":
            self._process_tick(data)
        else:
            logger.debug(f"Ignoring Deriv message type: {msg_type}")

    def _process_tick(self, data: dict) -> None:
        try:
            tick = parse_tick(data)
        except (KeyError, TypeError, ValueError) as e:
            self._malformed += 1
            logger.warning(f"Discarding malformed Deriv tick: {e}")
            return

        if self.state_machine.handle(FeedEvent.TICK) is not ConnectionState.SUBSCRIBED:
            return

        if self._tick_handler is None:
            return
        try:
            self._tick_handler(tick)
        except Exception as e:
            logger.error(f"Tick handler error: {e}")
