from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, Callable, Self


@dataclass
class OpenEvent:
    """The connection is established and ready to send."""

    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class MessageEvent:
    """One inbound frame, exactly as the transport received it."""

    data: str | bytes
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ErrorEvent:
    """A transport-level failure. Usually, but not always, followed by close."""

    exception: BaseException | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class CloseEvent:
    """The connection is gone. `code` is None if no close frame was seen."""

    code: int | None = None
    reason: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


OpenHandler = Callable[[OpenEvent], None]
MessageHandler = Callable[[MessageEvent], None]
ErrorHandler = Callable[[ErrorEvent], None]
CloseHandler = Callable[[CloseEvent], None]


class TransportAdapter(ABC):
    """Abstract message-oriented duplex connection.

    Knows nothing about JSON-RPC. Inbound activity is reported through four
    assignable slots, each holding at most one handler:

    - `on_open` when the connection is ready
    - `on_message` for every inbound frame, in arrival order
    - `on_error` for transport failures
    - `on_close` once the connection is gone

    Slot handlers are plain functions called on the event loop thread.
    Outbound traffic goes through send().
    """

    def __init__(self) -> None:
        self.on_open: OpenHandler | None = None
        self.on_message: MessageHandler | None = None
        self.on_error: ErrorHandler | None = None
        self.on_close: CloseHandler | None = None

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """True if the connection is open and ready to send."""

    @abstractmethod
    def start(self) -> None:
        """Begin connecting in the background.

        Returns immediately. Progress is reported through on_open, or through
        on_error and on_close on failure. Must be called from a running loop.
        """

    @abstractmethod
    async def send(self, data: str) -> None:
        """Send one text frame.

        Raises:
            ConnectionError: If the connection is not open or the send failed
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""

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
