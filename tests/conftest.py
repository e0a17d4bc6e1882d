import asyncio
import json
from typing import Any

from rpcws.transport.base import (
    CloseEvent,
    ErrorEvent,
    MessageEvent,
    OpenEvent,
    TransportAdapter,
)


class MockTransport(TransportAdapter):
    """Mock transport adapter for testing."""

    def __init__(self, auto_open: bool = True):
        super().__init__()
        self.sent_messages: list[str] = []
        self.auto_open = auto_open
        self.started = False
        self.closed = False
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open and not self.closed

    @property
    def sent_payloads(self) -> list[dict[str, Any]]:
        return [json.loads(message) for message in self.sent_messages]

    def start(self) -> None:
        self.started = True
        if self.auto_open:
            asyncio.get_running_loop().call_soon(self.simulate_open)

    async def send(self, data: str) -> None:
        if self.closed:
            raise ConnectionError("Transport closed")
        self.sent_messages.append(data)

    async def close(self) -> None:
        if self.closed:
            return
        self.simulate_close(1000, "client closed")

    # Test helpers
    def simulate_open(self) -> None:
        """Simulate the connection opening."""
        self._open = True
        if self.on_open is not None:
            self.on_open(OpenEvent())

    def receive_message(self, payload: dict[str, Any] | str | bytes) -> None:
        """Simulate receiving a frame from the network."""
        data = payload if isinstance(payload, (str, bytes)) else json.dumps(payload)
        if self.on_message is not None:
            self.on_message(MessageEvent(data=data))

    def simulate_error(self, exc: BaseException | None = None) -> None:
        if self.on_error is not None:
            self.on_error(ErrorEvent(exception=exc or ConnectionError("Network down")))

    def simulate_close(self, code: int | None = 1006, reason: str = "") -> None:
        self.closed = True
        self._open = False
        if self.on_close is not None:
            self.on_close(CloseEvent(code=code, reason=reason))


async def yield_loop(times: int = 3) -> None:
    """Let pending tasks and callbacks run."""
    for _ in range(times):
        await asyncio.sleep(0)


async def wait_for_sent_message(
    transport: MockTransport, count: int = 1
) -> list[dict[str, Any]]:
    """Wait until the transport has sent at least `count` messages."""
    for _ in range(100):  # Max 100ms wait
        if len(transport.sent_messages) >= count:
            return transport.sent_payloads
        await asyncio.sleep(0.001)
    raise AssertionError(f"Expected {count} sent message(s)")
