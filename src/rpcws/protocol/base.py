"""
JSON-RPC 2.0 envelopes exchanged over the socket.

Every frame on the wire is one of four shapes. None of them carries an
explicit type field, so the shape itself is the tag:

- **Notification** - `{method, params?}`, no identifier, never answered
- **Request** - `{id, method, params?}`, answered by exactly one response
- **SuccessResponse** - `{id, result}`
- **ErrorResponse** - `{id, error: {code, message, data?}}`

All four may carry `"jsonrpc": "2.0"`. Sessions in reduced-overhead mode
leave it out of everything they send.

Models only emit the fields that were actually set, so an omitted `params`
never shows up as `null` on the wire while an explicit `"result": null` does.
"""

from enum import Enum
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

RequestId = StrictStr | StrictInt


class MessageKind(str, Enum):
    """The four envelope variants a frame can classify as."""

    NOTIFICATION = "notification"
    REQUEST = "request"
    SUCCESS_RESPONSE = "success_response"
    ERROR_RESPONSE = "error_response"


class ProtocolModel(BaseModel):
    """Base class for wire envelopes.

    Unknown inbound fields are ignored so peers can attach extras without
    breaking classification.
    """

    model_config = ConfigDict(extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """Convert to a JSON-ready dict containing only the fields that were set."""
        return self.model_dump(exclude_unset=True)

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> Self:
        """Build the model from a decoded JSON object.

        Raises:
            pydantic.ValidationError: If the payload doesn't fit the shape.
        """
        return cls.model_validate(payload)


class ErrorObject(ProtocolModel):
    """
    The `error` member of an error response.

    Members beyond code, message and data are kept, so servers that attach
    their own fields reach the caller unchanged.
    """

    model_config = ConfigDict(extra="allow")

    code: StrictInt
    """
    Integer error code. -32768 to -32000 are reserved by JSON-RPC.
    """

    message: str
    """
    Short human-readable description of the error.
    """

    data: Any = None
    """
    Optional extra information defined by the server.
    """


class Notification(ProtocolModel):
    """
    A one-way message. No response is expected or matched.
    """

    kind: ClassVar[MessageKind] = MessageKind.NOTIFICATION

    jsonrpc: str | None = None
    method: str
    params: Any = None


class Request(ProtocolModel):
    """
    A call that expects exactly one response carrying the same `id`.
    """

    kind: ClassVar[MessageKind] = MessageKind.REQUEST

    jsonrpc: str | None = None
    id: RequestId
    method: str
    params: Any = None


class SuccessResponse(ProtocolModel):
    kind: ClassVar[MessageKind] = MessageKind.SUCCESS_RESPONSE

    jsonrpc: str | None = None
    id: RequestId
    result: Any


class ErrorResponse(ProtocolModel):
    """
    A failed call. `id` is null when the server couldn't read the request id.
    """

    kind: ClassVar[MessageKind] = MessageKind.ERROR_RESPONSE

    jsonrpc: str | None = None
    id: RequestId | None
    error: ErrorObject


Message = Notification | Request | SuccessResponse | ErrorResponse
Response = SuccessResponse | ErrorResponse
