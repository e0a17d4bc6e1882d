"""Exception hierarchy for RPC client failures.

Call-level failures (timeouts, remote errors, lost connections) are raised
from the awaiting `call()`. Frame decoding failures surface from the
dispatch routine.
"""

from __future__ import annotations

from typing import Any

from rpcws.protocol.base import ErrorObject, RequestId


class RpcClientError(Exception):
    """Base exception for all rpcws errors."""

    pass


class RequestTimeoutError(RpcClientError, TimeoutError):
    """Raised when no response arrives within the configured window."""

    def __init__(self, method: str, request_id: RequestId, timeout: float):
        super().__init__(
            f"Awaiting response to: {method} with id: {request_id} "
            f"timed out after {timeout}s."
        )
        self.method = method
        self.request_id = request_id
        self.timeout = timeout


class RemoteError(RpcClientError):
    """Raised when the server answers a call with an error response.

    The error object is kept verbatim on `error`.
    """

    def __init__(self, error: ErrorObject, request_id: RequestId | None = None):
        super().__init__(f"rpc error {error.code}: {error.message}")
        self.error = error
        self.request_id = request_id

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def data(self) -> Any:
        return self.error.data


class ConnectionClosedError(RpcClientError, ConnectionError):
    """Raised for calls still pending when the connection closes."""

    def __init__(self, code: int | None = None, reason: str = ""):
        detail = f" (code {code}: {reason})" if code is not None else ""
        super().__init__(f"Connection closed{detail}")
        self.code = code
        self.reason = reason


class MessageParseError(RpcClientError, ValueError):
    """Raised when an inbound frame isn't valid JSON text."""

    def __init__(self, raw: str | bytes, reason: str):
        super().__init__(f"Failed to parse inbound frame: {reason}")
        self.raw = raw
