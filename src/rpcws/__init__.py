"""JSON-RPC 2.0 client over WebSocket."""

from rpcws.client.callbacks import CallbackManager, EventCategory
from rpcws.client.config import SessionConfig
from rpcws.client.session import RpcSession, SessionState
from rpcws.protocol.base import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    ErrorObject,
    ErrorResponse,
    Message,
    MessageKind,
    Notification,
    Request,
    RequestId,
    SuccessResponse,
)
from rpcws.shared.exceptions import (
    ConnectionClosedError,
    MessageParseError,
    RemoteError,
    RequestTimeoutError,
    RpcClientError,
)
from rpcws.shared.ids import default_id
from rpcws.shared.message_builder import MessageBuilder
from rpcws.shared.message_parser import MessageParser
from rpcws.transport.base import (
    CloseEvent,
    ErrorEvent,
    MessageEvent,
    OpenEvent,
    TransportAdapter,
)
from rpcws.transport.websocket import WebSocketTransport

__all__ = [
    "CallbackManager",
    "CloseEvent",
    "ConnectionClosedError",
    "ErrorEvent",
    "ErrorObject",
    "ErrorResponse",
    "EventCategory",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "JSONRPC_VERSION",
    "METHOD_NOT_FOUND",
    "Message",
    "MessageBuilder",
    "MessageEvent",
    "MessageKind",
    "MessageParseError",
    "MessageParser",
    "Notification",
    "OpenEvent",
    "PARSE_ERROR",
    "RemoteError",
    "Request",
    "RequestId",
    "RequestTimeoutError",
    "RpcClientError",
    "RpcSession",
    "SessionConfig",
    "SessionState",
    "SuccessResponse",
    "TransportAdapter",
    "WebSocketTransport",
    "default_id",
]
