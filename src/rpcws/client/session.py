"""JSON-RPC client session over a transport adapter.

Owns every piece of per-connection state: the adapter, the pending-call
table, the subscriber lists, the envelope builder and the configuration.
Everything runs on the event loop thread; inbound frames are handled one at
a time in the order the adapter delivers them.
"""

import asyncio
import logging
from enum import Enum
from types import TracebackType
from typing import Any, Callable, Self, Sequence

from rpcws.client.callbacks import CallbackManager, EventCategory
from rpcws.client.config import SessionConfig
from rpcws.protocol.base import ErrorResponse, MessageKind, SuccessResponse
from rpcws.shared.exceptions import ConnectionClosedError
from rpcws.shared.ids import IdGenerator, default_id
from rpcws.shared.message_builder import MessageBuilder, serialize_message
from rpcws.shared.message_parser import MessageParser, decode_frame
from rpcws.shared.request_tracker import RequestTracker
from rpcws.transport.base import (
    CloseEvent,
    ErrorEvent,
    MessageEvent,
    OpenEvent,
    TransportAdapter,
)
from rpcws.transport.websocket import WebSocketTransport

logger = logging.getLogger(__name__)

TransportFactory = Callable[[str, str | Sequence[str] | None], TransportAdapter]

_CATEGORY_BY_KIND = {
    MessageKind.NOTIFICATION: EventCategory.NOTIFICATION,
    MessageKind.REQUEST: EventCategory.REQUEST,
    MessageKind.SUCCESS_RESPONSE: EventCategory.SUCCESS_RESPONSE,
    MessageKind.ERROR_RESPONSE: EventCategory.ERROR_RESPONSE,
}


class SessionState(str, Enum):
    UNCONNECTED = "unconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class RpcSession:
    """JSON-RPC 2.0 client over a persistent WebSocket.

    Creating a session doesn't connect. Call connect() first, or hand over an
    already open adapter with change_socket() followed by listen_messages().

    Example:
        async with RpcSession() as rpc:
            await rpc.connect("ws://localhost:4000")
            total = await rpc.call("sum", [1, 2])
    """

    def __init__(
        self,
        transport_factory: TransportFactory = WebSocketTransport,
        id_generator: IdGenerator = default_id,
        config: SessionConfig | None = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.callbacks = CallbackManager()
        self.parser = MessageParser()
        self.builder = MessageBuilder(id_generator)
        self.tracker = RequestTracker()
        self._transport_factory = transport_factory
        self._transport: TransportAdapter | None = None
        self._owns_transport = False
        self._state = SessionState.UNCONNECTED
        self._opened: asyncio.Future[None] | None = None
        self._message_binding: Callable[[MessageEvent], None] | None = None
        self._previous_on_message: Callable[[MessageEvent], None] | None = None

    # ================================
    # Lifecycle
    # ================================

    @property
    def state(self) -> SessionState:
        """Last lifecycle transition observed. Advisory for swapped adapters."""
        return self._state

    @property
    def transport(self) -> TransportAdapter | None:
        return self._transport

    @property
    def pending_count(self) -> int:
        """Number of calls still waiting for a response."""
        return len(self.tracker)

    async def connect(
        self, url: str, protocols: str | Sequence[str] | None = None
    ) -> None:
        """Open a connection and wait until it is established.

        Open subscribers run before this returns. Calling connect() again
        closes and replaces the adapter the previous connect() created; calls
        pending on the old one are not carried over.

        Args:
            url: Server endpoint.
            protocols: Subprotocol name(s) to offer.

        Raises:
            ConnectionClosedError: If the connection closes before opening.
        """
        replaced = self._transport if self._owns_transport else None
        transport = self._transport_factory(url, protocols)
        self.change_socket(transport)
        self._owns_transport = True
        if replaced is not None and replaced is not transport:
            logger.debug("Closing transport replaced by a new connect()")
            await replaced.close()

        self._state = SessionState.CONNECTING
        self._opened = asyncio.get_running_loop().create_future()
        self._listen(transport)

        logger.debug(f"Connecting to {url}")
        transport.start()
        await self._opened

    async def close(self) -> None:
        """Close the adapter and fail any calls still pending.

        Safe to call multiple times.
        """
        if self._transport is not None:
            await self._transport.close()
        self.tracker.reject_all(ConnectionClosedError(reason="Session closed"))
        self._state = SessionState.CLOSED

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
        return None

    # ================================
    # Register callbacks
    # ================================

    def on_open(self, callback: Callable[[OpenEvent], Any]) -> None:
        self.callbacks.on_open(callback)

    def on_any_message(self, callback: Callable[[MessageEvent], Any]) -> None:
        """Raw frame callback. Use the typed callbacks unless debugging."""
        self.callbacks.on_any_message(callback)

    def on_error(self, callback: Callable[[ErrorEvent], Any]) -> None:
        self.callbacks.on_error(callback)

    def on_close(self, callback: Callable[[CloseEvent], Any]) -> None:
        self.callbacks.on_close(callback)

    def on_notification(self, callback: Callable[[Any], Any]) -> None:
        self.callbacks.on_notification(callback)

    def on_request(self, callback: Callable[[Any], Any]) -> None:
        self.callbacks.on_request(callback)

    def on_success_response(self, callback: Callable[[Any], Any]) -> None:
        self.callbacks.on_success_response(callback)

    def on_error_response(self, callback: Callable[[Any], Any]) -> None:
        self.callbacks.on_error_response(callback)

    # ================================
    # Send messages
    # ================================

    async def call(self, method: str, params: Any = None) -> Any:
        """Send a request and wait for the matching response.

        Args:
            method: Remote method name.
            params: Optional positional (list) or named (dict) parameters.

        Returns:
            The `result` of the success response.

        Raises:
            RemoteError: The server answered with an error response.
            RequestTimeoutError: No response within config.response_timeout.
            ConnectionClosedError: The connection closed while waiting.
            ConnectionError: There is no adapter or the send failed.
        """
        transport = self._require_transport()
        request = self.builder.build_request(method, params)
        data = serialize_message(request.to_wire())

        future = self.tracker.register(
            request.id, method, self.config.response_timeout
        )
        try:
            await transport.send(data)
            return await future
        finally:
            self.tracker.evict(request.id, future)

    async def notify(self, method: str, params: Any = None) -> None:
        """Send a notification. Nothing is awaited beyond the send itself."""
        transport = self._require_transport()
        notification = self.builder.build_notification(method, params)
        await transport.send(serialize_message(notification.to_wire()))

    # ================================
    # Setup
    # ================================

    def custom_id(self, id_generator: IdGenerator) -> None:
        """Replace the request id generator for this session.

        The generator must not repeat ids that are still pending.
        """
        self.builder.id_generator = id_generator

    def no_rpc(self) -> None:
        """Leave the `jsonrpc` version tag out of every outgoing envelope."""
        self.builder.versioned = False

    def configure(self, **options: Any) -> None:
        """Update configuration. Applies to calls made afterwards.

        Raises:
            pydantic.ValidationError: Unknown option or invalid value.
        """
        self.config = SessionConfig.model_validate(
            {**self.config.model_dump(), **options}
        )

    def change_socket(self, transport: TransportAdapter) -> None:
        """Swap in another adapter, e.g. one that is already connected.

        No lifecycle bindings are installed; call listen_messages() so inbound
        frames get classified.
        """
        self._transport = transport
        self._owns_transport = False
        self._message_binding = None
        self._previous_on_message = None

    def listen_messages(self) -> None:
        """Install the RPC message handler on the current adapter.

        A handler already present on the adapter keeps working: it is called
        first for every frame.

        Raises:
            ConnectionError: If no adapter is set.
        """
        transport = self._require_transport()
        previous = transport.on_message
        if previous is not None and previous is self._message_binding:
            previous = self._previous_on_message

        def on_message(event: MessageEvent) -> None:
            if previous is not None:
                try:
                    previous(event)
                except Exception:
                    logger.exception(f"Previous message handler {previous!r} failed")
            self._handle_message(event)

        self._previous_on_message = previous
        self._message_binding = on_message
        transport.on_message = on_message

    # ================================
    # Handle transport events
    # ================================

    def _listen(self, transport: TransportAdapter) -> None:
        transport.on_open = lambda event: self._handle_open(transport, event)
        self.listen_messages()
        transport.on_error = lambda event: self._handle_error(transport, event)
        transport.on_close = lambda event: self._handle_close(transport, event)

    def _handle_open(self, transport: TransportAdapter, event: OpenEvent) -> None:
        if transport is not self._transport:
            return
        self._state = SessionState.OPEN
        self.callbacks.dispatch(EventCategory.OPEN, event)
        if self._opened is not None and not self._opened.done():
            self._opened.set_result(None)

    def _handle_error(self, transport: TransportAdapter, event: ErrorEvent) -> None:
        if transport is not self._transport:
            return
        self.callbacks.dispatch(EventCategory.ERROR, event)

    def _handle_close(self, transport: TransportAdapter, event: CloseEvent) -> None:
        if transport is not self._transport:
            logger.debug("Ignoring close from a replaced transport")
            return
        self._state = SessionState.CLOSED
        self.callbacks.dispatch(EventCategory.CLOSE, event)

        if len(self.tracker):
            logger.debug(f"Failing {len(self.tracker)} pending call(s) on close")
        self.tracker.reject_all(ConnectionClosedError(event.code, event.reason))

        if self._opened is not None and not self._opened.done():
            self._opened.set_exception(ConnectionClosedError(event.code, event.reason))

    def _handle_message(self, event: MessageEvent) -> None:
        """Classify one inbound frame and route it.

        Raises:
            MessageParseError: If the frame isn't valid JSON.
        """
        self.callbacks.dispatch(EventCategory.ANY_MESSAGE, event)

        payload = decode_frame(event.data)
        message = self.parser.classify(payload)
        if message is None:
            return

        self.callbacks.dispatch(_CATEGORY_BY_KIND[message.kind], message)

        if isinstance(message, (SuccessResponse, ErrorResponse)):
            if not self.tracker.resolve(message.id, message):
                logger.warning(f"No pending call for response id {message.id!r}")

    def _require_transport(self) -> TransportAdapter:
        if self._transport is None:
            raise ConnectionError("No transport: call connect() or change_socket()")
        return self._transport
