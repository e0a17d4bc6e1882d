"""Outbound envelope construction."""

import json
from typing import Any, Mapping

from rpcws.protocol.base import (
    JSONRPC_VERSION,
    ErrorObject,
    ErrorResponse,
    Notification,
    Request,
    RequestId,
    SuccessResponse,
)
from rpcws.shared.ids import IdGenerator, default_id


def serialize_message(message: dict[str, Any]) -> str:
    """Serialize message to compact JSON text.

    Raises:
        ValueError: If the message holds values JSON can't represent.
    """
    try:
        return json.dumps(message, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Failed to serialize message to JSON: {e}") from e


class MessageBuilder:
    """Builds outgoing JSON-RPC envelopes.

    With `versioned` set every envelope carries `"jsonrpc": "2.0"`; without
    it the tag is left out. `params` is only included when given.
    """

    def __init__(
        self, id_generator: IdGenerator = default_id, versioned: bool = True
    ) -> None:
        self.id_generator = id_generator
        self.versioned = versioned

    def _envelope(self, **fields: Any) -> dict[str, Any]:
        if self.versioned:
            return {"jsonrpc": JSONRPC_VERSION, **fields}
        return fields

    def build_request(self, method: str, params: Any = None) -> Request:
        fields = self._envelope(id=self.id_generator(), method=method)
        if params is not None:
            fields["params"] = params
        return Request(**fields)

    def build_notification(self, method: str, params: Any = None) -> Notification:
        fields = self._envelope(method=method)
        if params is not None:
            fields["params"] = params
        return Notification(**fields)

    def build_success_response(
        self, request_id: RequestId, result: Any
    ) -> SuccessResponse:
        return SuccessResponse(**self._envelope(id=request_id, result=result))

    def build_error_response(
        self,
        request_id: RequestId | None,
        error: ErrorObject | Mapping[str, Any],
    ) -> ErrorResponse:
        if not isinstance(error, ErrorObject):
            error = ErrorObject.model_validate(dict(error))
        return ErrorResponse(**self._envelope(id=request_id, error=error))
