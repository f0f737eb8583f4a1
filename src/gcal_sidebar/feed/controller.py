"""Event feed controller.

Owns the panel's `FeedState` and drives it through the reducer as fetches
are issued and resolve.

## Concurrency

All work runs on one asyncio event loop. `mount`, `select_view` and
`refresh` are plain calls that record the new request and schedule the
fetch as a task, so several fetches can be in flight at once (e.g. when the
user clicks through tabs quickly). Switching views does not cancel earlier
fetches. Instead each fetch is tagged with its request id and view, and a
response is applied only if it still matches the latest request for the
active view.

Outstanding fetches are cancelled only by `close()`, when the panel is
unmounted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from gcal_sidebar.classifiers.errors import classify_error
from gcal_sidebar.client.base import CalendarClient, CalendarClientError
from gcal_sidebar.feed.reducer import (
    FeedAction,
    FetchFailed,
    FetchStarted,
    FetchSucceeded,
    SessionChecked,
    initial_state,
    is_current,
    reduce,
)
from gcal_sidebar.models.event import ViewSelection
from gcal_sidebar.models.feed import ErrorKind, ErrorSource, FeedState

logger = logging.getLogger(__name__)

FeedListener = Callable[[FeedState], None]


class EventFeedController:
    """Stateful controller behind the calendar sidebar.

    Example:
        ```python
        controller = EventFeedController(client)
        controller.subscribe(render)

        await controller.mount()
        controller.select_view(ViewSelection.WEEK)
        ...
        await controller.close()
        ```
    """

    def __init__(
        self,
        client: CalendarClient,
        view: ViewSelection = ViewSelection.TODAY,
    ):
        """Initialize the controller.

        Args:
            client: Calendar backend
            view: View selected when the panel mounts
        """
        self._client = client
        self._state = initial_state(view)
        self._listeners: list[FeedListener] = []
        self._tasks: set[asyncio.Task] = set()
        self._closed = False

    @property
    def state(self) -> FeedState:
        """Current feed snapshot."""
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Register a listener called with each new snapshot.

        Returns:
            Callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mount(self) -> asyncio.Task[FeedState]:
        """Start the initial fetch for the selected view."""
        return self._issue_fetch(self._state.view)

    def select_view(self, view: ViewSelection) -> asyncio.Task[FeedState]:
        """Switch to a view and fetch its events.

        Always issues exactly one fetch, even when the view is unchanged.
        Fetches already in flight keep running but their results are
        discarded.
        """
        if view != self._state.view:
            logger.debug(f"Switching view {self._state.view.value} -> {view.value}")
        return self._issue_fetch(view)

    def refresh(self) -> asyncio.Task[FeedState]:
        """Re-fetch the current view.

        Never suppressed, even while a fetch is in flight; callers debounce.
        """
        return self._issue_fetch(self._state.view)

    def check_connection(self) -> asyncio.Task[FeedState]:
        """Ask the backend whether the calendar session is connected."""
        self._ensure_open()
        return self._spawn(self._check_session())

    def handle_connection_change(self, connected: bool) -> asyncio.Task[FeedState] | None:
        """Apply a connect/disconnect notification pushed by the plugin.

        A connect refreshes the feed. A disconnect switches to the connect
        prompt without a request.
        """
        self._ensure_open()
        self._dispatch(SessionChecked(connected=connected))
        if connected:
            return self.refresh()
        return None

    async def close(self) -> None:
        """Unmount: cancel outstanding requests and drop listeners."""
        if self._closed:
            return
        self._closed = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._listeners.clear()
        logger.debug(f"Feed controller closed, cancelled {len(tasks)} requests")

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Feed controller is closed")

    def _spawn(self, coro) -> asyncio.Task[FeedState]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _issue_fetch(self, view: ViewSelection) -> asyncio.Task[FeedState]:
        self._ensure_open()
        self._dispatch(FetchStarted(view=view))
        request_id = self._state.request_seq
        logger.debug(f"Fetch #{request_id} issued for view {view.value}")
        return self._spawn(self._load(request_id, view))

    async def _load(self, request_id: int, view: ViewSelection) -> FeedState:
        action: FeedAction
        try:
            payload = await self._client.fetch_events(view)
        except CalendarClientError as e:
            action = FetchFailed(request_id=request_id, view=view, source=e.to_source())
        except Exception:
            logger.exception(f"Unexpected error fetching events for view {view.value}")
            action = FetchFailed(request_id=request_id, view=view, source=ErrorSource())
        else:
            action = FetchSucceeded(request_id=request_id, view=view, payload=payload)

        if not is_current(self._state, request_id, view):
            logger.debug(
                f"Discarding stale response #{request_id} for view {view.value} "
                f"(latest #{self._state.request_seq}, view {self._state.view.value})"
            )
            return self._state

        self._dispatch(action)
        if self._state.error_message:
            logger.warning(f"Fetch #{request_id} failed: {self._state.error_message}")
        return self._state

    async def _check_session(self) -> FeedState:
        try:
            status = await self._client.check_session()
        except CalendarClientError as e:
            if classify_error(e.to_source()) is ErrorKind.CONNECTIVITY:
                self._dispatch(SessionChecked(connected=False))
            else:
                logger.warning(f"Session check failed: {e.message}")
            return self._state

        self._dispatch(SessionChecked(connected=status.connected, email=status.email))
        return self._state

    def _dispatch(self, action: FeedAction) -> None:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state is previous:
            return

        if self._state.connection != previous.connection:
            logger.info(
                f"Calendar connection {previous.connection.value} -> "
                f"{self._state.connection.value}"
            )
        for listener in list(self._listeners):
            listener(self._state)
