import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Callback = Callable[[Any], Any]


class EventCategory(str, Enum):
    OPEN = "open"
    ANY_MESSAGE = "any_message"
    ERROR = "error"
    CLOSE = "close"
    NOTIFICATION = "notification"
    REQUEST = "request"
    SUCCESS_RESPONSE = "success_response"
    ERROR_RESPONSE = "error_response"


class CallbackManager:
    """Ordered subscriber lists for session events.

    Registration is append-only. Callbacks run in the order they were added,
    and one failing callback never stops the rest of its list.
    """

    def __init__(self) -> None:
        self._callbacks: dict[EventCategory, list[Callback]] = {
            category: [] for category in EventCategory
        }
        self._background_tasks: set[asyncio.Task[Any]] = set()

    def on_open(self, callback: Callable[[Any], Any]) -> None:
        """Register your callback for when the connection opens.

        Args:
            callback: Called with the transport's OpenEvent.
        """
        self._register(EventCategory.OPEN, callback)

    def on_any_message(self, callback: Callable[[Any], Any]) -> None:
        """Register your callback for every raw inbound frame.

        Runs before the frame is decoded, so it sees frames that later fail
        to parse or classify. Meant for debugging; prefer the typed callbacks.

        Args:
            callback: Called with the transport's MessageEvent.
        """
        self._register(EventCategory.ANY_MESSAGE, callback)

    def on_error(self, callback: Callable[[Any], Any]) -> None:
        """Register your callback for transport errors.

        Args:
            callback: Called with the transport's ErrorEvent.
        """
        self._register(EventCategory.ERROR, callback)

    def on_close(self, callback: Callable[[Any], Any]) -> None:
        """Register your callback for when the connection closes.

        Args:
            callback: Called with the transport's CloseEvent.
        """
        self._register(EventCategory.CLOSE, callback)

    def on_notification(self, callback: Callable[[Any], Any]) -> None:
        self._register(EventCategory.NOTIFICATION, callback)

    def on_request(self, callback: Callable[[Any], Any]) -> None:
        self._register(EventCategory.REQUEST, callback)

    def on_success_response(self, callback: Callable[[Any], Any]) -> None:
        self._register(EventCategory.SUCCESS_RESPONSE, callback)

    def on_error_response(self, callback: Callable[[Any], Any]) -> None:
        self._register(EventCategory.ERROR_RESPONSE, callback)

    def handler_count(self, category: EventCategory) -> int:
        return len(self._callbacks[category])

    def dispatch(self, category: EventCategory, event: Any) -> None:
        """Invoke every callback registered for `category` with `event`.

        Plain functions run inline. Coroutine results are scheduled on the
        running loop. Exceptions are logged, never raised.

        Args:
            category: Which subscriber list to run.
            event: The value passed to each callback.
        """
        for callback in list(self._callbacks[category]):
            try:
                result = callback(event)
            except Exception:
                logger.exception(f"{category.value} callback {callback!r} failed")
                continue

            if inspect.isawaitable(result):
                self._schedule(category, result)

    def _register(self, category: EventCategory, callback: Callback) -> None:
        if not callable(callback):
            raise TypeError(f"{category.value} callback must be callable")
        self._callbacks[category].append(callback)

    def _schedule(self, category: EventCategory, awaitable: Any) -> None:
        task = asyncio.ensure_future(awaitable)
        self._background_tasks.add(task)

        def _done(t: asyncio.Task[Any]) -> None:
            self._background_tasks.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                logger.error(
                    f"{category.value} callback failed: {exc}", exc_info=exc
                )

        task.add_done_callback(_done)
