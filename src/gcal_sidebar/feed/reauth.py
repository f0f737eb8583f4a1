"""Out-of-band sign-in handling.

Signing in happens in a separate browser tab that has no channel back to
the panel. The panel cannot know when the flow finishes, so it re-checks
opportunistically: after the sign-in tab is opened, each time the host
window regains focus a refresh is scheduled after a short delay to let the
OAuth redirect settle.

This is best-effort. If the user returns before the redirect completes, or
the window never loses focus, the panel stays on the connect prompt until
the user retries manually.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import Callable

from gcal_sidebar.feed.controller import EventFeedController
from gcal_sidebar.models.feed import ConnectionState, FeedState

logger = logging.getLogger(__name__)

DEFAULT_FOCUS_DELAY_SECONDS = 0.5

UrlOpener = Callable[[str], object]


class ReauthCoordinator:
    """Opens the sign-in flow and re-checks the feed on window focus.

    Example:
        ```python
        reauth = ReauthCoordinator(controller, settings.connect_url)
        reauth.start_sign_in()

        # wired to the host window's focus event
        reauth.on_focus()
        ```
    """

    def __init__(
        self,
        controller: EventFeedController,
        connect_url: str,
        delay: float = DEFAULT_FOCUS_DELAY_SECONDS,
        opener: UrlOpener | None = None,
    ):
        """Initialize the coordinator.

        Args:
            controller: Feed to refresh after sign-in
            connect_url: Provider sign-in entry point
            delay: Seconds to wait after focus before re-checking
            opener: Opens a URL in a new browsing context
        """
        self.controller = controller
        self.connect_url = connect_url
        self.delay = delay
        self._opener = opener or webbrowser.open_new_tab
        self._armed = False
        self._pending: set[asyncio.Task] = set()
        self._unsubscribe = controller.subscribe(self._on_state)

    @property
    def armed(self) -> bool:
        """Whether focus events currently schedule re-checks."""
        return self._armed

    @property
    def pending_rechecks(self) -> int:
        """Re-checks scheduled by focus events that have not finished."""
        return len(self._pending)

    def start_sign_in(self) -> None:
        """Open the sign-in page and start watching for focus."""
        logger.info(f"Opening calendar sign-in at {self.connect_url}")
        self._opener(self.connect_url)
        self._armed = True

    def on_focus(self) -> asyncio.Task[FeedState] | None:
        """Handle the host window regaining focus.

        Returns:
            Task resolving to the feed state once the re-check settles, or
            None when not waiting for sign-in
        """
        if not self._armed:
            return None

        task = asyncio.create_task(self._recheck())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.debug(f"Re-check scheduled in {self.delay}s after focus")
        return task

    def close(self) -> None:
        """Cancel pending re-checks and stop watching."""
        self._armed = False
        for task in list(self._pending):
            task.cancel()
        self._unsubscribe()

    async def _recheck(self) -> FeedState:
        await asyncio.sleep(self.delay)
        if self.controller.closed:
            return self.controller.state
        return await self.controller.refresh()

    def _on_state(self, state: FeedState) -> None:
        if self._armed and state.connection is ConnectionState.CONNECTED:
            logger.info("Calendar connected after sign-in")
            self._armed = False
