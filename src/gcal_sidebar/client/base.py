"""Base calendar client abstraction.

The feed controller only depends on the `CalendarClient` contract defined
here. The concrete implementation talks to the Mattermost calendar plugin
over HTTP (see `gcal_sidebar.client.plugin`); tests substitute fakes.

## Contract

- `fetch_events(view)` returns an `EventsPayload`. A payload may carry an
  ``error`` string instead of events; that is a resolved response, not a
  failure.
- `check_session()` returns a `SessionStatus`.
- `create_event(request)` returns a `CreatedEvent`.

All three raise `CalendarClientError` (or a subclass) when the request
itself fails: transport errors, unparseable responses, or HTTP errors
without an error payload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gcal_sidebar.models.event import (
    CreatedEvent,
    CreateEventRequest,
    EventsPayload,
    SessionStatus,
    ViewSelection,
)
from gcal_sidebar.models.feed import ErrorSource


class CalendarClientError(Exception):
    """Base exception for calendar client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body

    def to_source(self) -> ErrorSource:
        """Convert to the input format of the error classifier."""
        return ErrorSource(http_status=self.status_code, message=self.message or None)


class NotConnectedError(CalendarClientError):
    """Raised when the plugin reports no calendar session for the user."""

    pass


class PluginUnavailableError(CalendarClientError):
    """Raised when the plugin cannot be reached after retries."""

    pass


class CalendarClient(ABC):
    """Abstract base class for calendar backends.

    Example:
        ```python
        class FakeClient(CalendarClient):
            async def fetch_events(self, view):
                return EventsPayload(events=[])

            async def check_session(self):
                return SessionStatus(connected=True, email="me@example.com")

            async def create_event(self, request):
                return CreatedEvent()
        ```
    """

    @abstractmethod
    async def fetch_events(self, view: ViewSelection) -> EventsPayload:
        """Get events for a view.

        Args:
            view: Time window to fetch

        Returns:
            Events payload, possibly carrying an error string

        Raises:
            CalendarClientError: If the request fails
        """
        pass

    @abstractmethod
    async def check_session(self) -> SessionStatus:
        """Check whether the user has a connected calendar account.

        Raises:
            CalendarClientError: If the request fails
        """
        pass

    @abstractmethod
    async def create_event(self, request: CreateEventRequest) -> CreatedEvent:
        """Create an event in the user's calendar.

        Raises:
            CalendarClientError: If the request fails or the plugin rejects it
        """
        pass

    async def aclose(self) -> None:
        """Release any held resources."""
        return None
