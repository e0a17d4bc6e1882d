"""JSON-RPC message classification.

Turns decoded frames into exactly one of the four envelope variants. This is
the only place untrusted input becomes a typed message.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from rpcws.protocol.base import (
    ErrorResponse,
    Message,
    Notification,
    Request,
    SuccessResponse,
)
from rpcws.shared.exceptions import MessageParseError

logger = logging.getLogger(__name__)


def decode_frame(data: str | bytes) -> Any:
    """Decode a text frame into a JSON value.

    Args:
        data: Raw frame contents. Bytes are decoded as UTF-8.

    Returns:
        The decoded JSON value (not necessarily an object).

    Raises:
        MessageParseError: If the frame isn't valid UTF-8 JSON.
    """
    try:
        text = data.decode("utf-8") if isinstance(data, bytes) else data
        return json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MessageParseError(data, str(e)) from e


def _has_id(payload: dict[str, Any]) -> bool:
    return payload.get("id") is not None


class MessageParser:
    """Classifies decoded JSON-RPC payloads.

    Checks run in a fixed priority order, so every object lands in at most
    one variant:

    1. no identifier and a `method` - Notification
    2. a `method` - Request
    3. a `result` - SuccessResponse
    4. an `error` - ErrorResponse

    Key presence is what counts, not truthiness: `"id": 0` and
    `"result": null` are both meaningful.

    A missing or null identifier only makes a Notification when a `method`
    is present. `{"id": null, "error": {...}}` is an ErrorResponse, which is
    how servers report requests they couldn't read; it never matches a
    pending call. An `error` with no `id` key at all fails validation and is
    dropped.
    """

    def is_notification(self, payload: dict[str, Any]) -> bool:
        """Check if payload is a JSON-RPC notification."""
        return not _has_id(payload) and "method" in payload

    def is_request(self, payload: dict[str, Any]) -> bool:
        """Check if payload is a JSON-RPC request."""
        return not self.is_notification(payload) and "method" in payload

    def is_success_response(self, payload: dict[str, Any]) -> bool:
        """Check if payload is a JSON-RPC success response."""
        return "method" not in payload and "result" in payload

    def is_error_response(self, payload: dict[str, Any]) -> bool:
        """Check if payload is a JSON-RPC error response."""
        return (
            "method" not in payload
            and "result" not in payload
            and "error" in payload
        )

    def classify(self, payload: Any) -> Message | None:
        """Classify a decoded payload into its envelope variant.

        Args:
            payload: A decoded JSON value.

        Returns:
            The typed message, or None if the payload is not an object, matches
            no variant, or its fields don't validate for the matched variant.
        """
        if not isinstance(payload, dict):
            logger.warning(f"Ignoring non-object JSON-RPC payload: {payload!r}")
            return None

        if self.is_notification(payload):
            message_type = Notification
        elif self.is_request(payload):
            message_type = Request
        elif self.is_success_response(payload):
            message_type = SuccessResponse
        elif self.is_error_response(payload):
            message_type = ErrorResponse
        else:
            logger.debug(f"Unclassifiable payload dropped: {payload}")
            return None

        try:
            return message_type.from_wire(payload)
        except ValidationError as e:
            logger.warning(
                f"Malformed {message_type.__name__} dropped: {payload} ({e})"
            )
            return None
