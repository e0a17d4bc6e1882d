import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from rpcws.protocol.base import ErrorResponse, RequestId, Response
from rpcws.shared.exceptions import RemoteError, RequestTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class PendingCall:
    """An outbound request waiting for its response."""

    method: str
    future: asyncio.Future[Any]
    timer: asyncio.TimerHandle | None = None


class RequestTracker:
    """Maps outstanding request ids to the futures awaiting them.

    Each record is removed by whichever of response, timeout, eviction or
    bulk rejection gets to it first. Later paths find nothing and do nothing.
    """

    def __init__(self) -> None:
        self._outbound_requests: dict[RequestId, PendingCall] = {}

    def __len__(self) -> int:
        return len(self._outbound_requests)

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._outbound_requests

    @property
    def pending_ids(self) -> list[RequestId]:
        return list(self._outbound_requests)

    def register(
        self, request_id: RequestId, method: str, timeout: float | None = None
    ) -> asyncio.Future[Any]:
        """Track an outbound request and return the future for its outcome.

        Args:
            request_id: Identifier the response will carry.
            method: Method name, used in timeout errors.
            timeout: Seconds to wait before failing the call. Falsy waits forever.

        Returns:
            Future resolved with the response result, or failed with
            RemoteError / RequestTimeoutError.
        """
        loop = asyncio.get_running_loop()
        pending = PendingCall(method=method, future=loop.create_future())

        if request_id in self._outbound_requests:
            logger.warning(
                f"Request id {request_id!r} is already pending; "
                "the earlier call will never resolve"
            )
            self._cancel_timer(self._outbound_requests[request_id])

        if timeout:
            pending.timer = loop.call_later(
                timeout, self._expire, request_id, pending, timeout
            )

        self._outbound_requests[request_id] = pending
        return pending.future

    def get(self, request_id: RequestId) -> PendingCall | None:
        return self._outbound_requests.get(request_id)

    def resolve(self, request_id: RequestId | None, response: Response) -> bool:
        """Complete the pending call matching a response.

        Success responses resolve with `result`. Error responses fail with
        RemoteError carrying the error object.

        Returns:
            True if a pending call was completed, False if none matched.
        """
        if request_id is None:
            return False
        pending = self._outbound_requests.pop(request_id, None)
        if pending is None:
            return False

        self._cancel_timer(pending)
        if pending.future.done():
            return False

        if isinstance(response, ErrorResponse):
            pending.future.set_exception(RemoteError(response.error, request_id))
        else:
            pending.future.set_result(response.result)
        return True

    def evict(
        self, request_id: RequestId, future: asyncio.Future[Any] | None = None
    ) -> None:
        """Stop tracking a request without completing it.

        Args:
            request_id: Request to drop.
            future: If given, only drop the record if it still owns this future.
        """
        pending = self._outbound_requests.get(request_id)
        if pending is None or (future is not None and pending.future is not future):
            return
        del self._outbound_requests[request_id]
        self._cancel_timer(pending)

    def reject_all(self, exc: BaseException) -> None:
        """Fail every outstanding call with `exc` and clear the table."""
        pending_calls = list(self._outbound_requests.values())
        self._outbound_requests.clear()
        for pending in pending_calls:
            self._cancel_timer(pending)
            if not pending.future.done():
                pending.future.set_exception(exc)

    def _expire(
        self, request_id: RequestId, pending: PendingCall, timeout: float
    ) -> None:
        if self._outbound_requests.get(request_id) is not pending:
            return
        del self._outbound_requests[request_id]
        logger.debug(f"Request {request_id!r} ({pending.method}) timed out")
        if not pending.future.done():
            pending.future.set_exception(
                RequestTimeoutError(pending.method, request_id, timeout)
            )

    @staticmethod
    def _cancel_timer(pending: PendingCall) -> None:
        if pending.timer is not None:
            pending.timer.cancel()
            pending.timer = None
