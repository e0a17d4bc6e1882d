import asyncio
import logging
from typing import Any, Callable, Sequence

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError

from rpcws.transport.base import (
    CloseEvent,
    ErrorEvent,
    MessageEvent,
    OpenEvent,
    TransportAdapter,
)

logger = logging.getLogger(__name__)


def _normalize_protocols(protocols: str | Sequence[str] | None) -> list[str] | None:
    if protocols is None:
        return None
    if isinstance(protocols, str):
        return [protocols]
    return list(protocols)


class WebSocketTransport(TransportAdapter):
    """Transport adapter over a `websockets` client connection.

    start() spawns a reader task that connects, reports on_open, delivers
    every frame to on_message in arrival order, and finally reports on_close
    (preceded by on_error when the connection dropped abnormally).
    """

    def __init__(
        self,
        url: str,
        protocols: str | Sequence[str] | None = None,
        **connect_options: Any,
    ) -> None:
        """Describe how to reach the server (doesn't connect yet).

        Args:
            url: ws:// or wss:// endpoint.
            protocols: Subprotocol name(s) to offer during the handshake.
            **connect_options: Passed through to `websockets.connect`.
        """
        super().__init__()
        self.url = url
        self.protocols = _normalize_protocols(protocols)
        self.connect_options = connect_options
        self._ws: Any | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open and self._ws is not None

    @property
    def subprotocol(self) -> str | None:
        """Subprotocol the server selected, if any."""
        return self._ws.subprotocol if self._ws is not None else None

    def start(self) -> None:
        if self._reader_task is not None:
            raise RuntimeError(f"Transport for {self.url} was already started")
        self._reader_task = asyncio.create_task(
            self._run(), name=f"websocket_reader_{self.url}"
        )

    async def send(self, data: str) -> None:
        if not self.is_open:
            raise ConnectionError(f"WebSocket to {self.url} is not open")
        try:
            await self._ws.send(data)
            logger.debug(f"Sent frame to {self.url}: {data}")
        except ConnectionClosed as e:
            raise ConnectionError(f"WebSocket to {self.url} closed during send") from e

    async def close(self) -> None:
        """Close the connection and wait for the reader to report on_close."""
        task = self._reader_task
        if self._ws is not None:
            await self._ws.close()
        elif task is not None and not task.done():
            task.cancel()

        if task is not None and task is not asyncio.current_task():
            try:
                await task
            except asyncio.CancelledError:
                pass

    # ================================
    # Reader
    # ================================

    async def _run(self) -> None:
        try:
            ws = await websockets.connect(
                self.url, subprotocols=self.protocols, **self.connect_options
            )
        except asyncio.CancelledError:
            self._emit(self.on_close, CloseEvent(reason="Connection attempt cancelled"))
            raise
        except Exception as e:
            logger.error(f"Failed to connect to {self.url}: {e}")
            self._emit(self.on_error, ErrorEvent(exception=e))
            self._emit(self.on_close, CloseEvent(reason=str(e)))
            return

        self._ws = ws
        self._open = True
        logger.debug(f"Connected to {self.url} (subprotocol: {ws.subprotocol})")
        self._emit(self.on_open, OpenEvent(metadata={"subprotocol": ws.subprotocol}))

        try:
            async for frame in ws:
                self._emit(self.on_message, MessageEvent(data=frame))
        except ConnectionClosedError as e:
            logger.warning(f"Connection to {self.url} dropped: {e}")
            self._emit(self.on_error, ErrorEvent(exception=e))
        finally:
            self._open = False

        logger.debug(
            f"Connection to {self.url} closed "
            f"(code: {ws.close_code}, reason: {ws.close_reason!r})"
        )
        self._emit(
            self.on_close, CloseEvent(code=ws.close_code, reason=ws.close_reason or "")
        )

    def _emit(self, handler: Callable[[Any], None] | None, event: Any) -> None:
        """Invoke a slot handler. Handler errors are logged and don't stop reading."""
        if handler is None:
            return
        try:
            handler(event)
        except Exception as e:
            logger.warning(
                f"Error handling {type(event).__name__} from {self.url}: {e}",
                exc_info=True,
            )
