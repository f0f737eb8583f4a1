"""Pytest fixtures for calendar sidebar tests.

This module provides test fixtures that ensure:
1. No requests reach a real Mattermost server or browser
2. Isolated test environment with controlled configuration
3. A scriptable calendar client for driving the feed controller
"""

import asyncio
import os
from datetime import datetime, timezone

import pytest

# Set test environment BEFORE importing application modules
os.environ.setdefault("SITE_URL", "https://chat.example.com")
os.environ.setdefault("MATTERMOST_USER_ID", "test-user-id")

from gcal_sidebar.client.base import CalendarClient, CalendarClientError
from gcal_sidebar.models.event import (
    CreatedEvent,
    CreateEventRequest,
    EventRecord,
    EventsPayload,
    SessionStatus,
    ViewSelection,
)


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from gcal_sidebar.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# =============================================================================
# Fake Calendar Client
# =============================================================================


class ScriptedCalendarClient(CalendarClient):
    """Calendar client whose responses are released by the test.

    Each `fetch_events` call parks on a future. Tests resolve or reject the
    pending call for a view with `resolve` / `reject`, in any order, to
    simulate out-of-order completion.
    """

    def __init__(self):
        self.calls: list[ViewSelection] = []
        self._pending: list[tuple[ViewSelection, asyncio.Future]] = []
        self.session = SessionStatus(connected=True, email="user@example.com")
        self.session_error: CalendarClientError | None = None
        self.created: list[CreateEventRequest] = []

    async def fetch_events(self, view: ViewSelection) -> EventsPayload:
        self.calls.append(view)
        future = asyncio.get_running_loop().create_future()
        self._pending.append((view, future))
        return await future

    async def check_session(self) -> SessionStatus:
        if self.session_error is not None:
            raise self.session_error
        return self.session

    async def create_event(self, request: CreateEventRequest) -> CreatedEvent:
        self.created.append(request)
        return CreatedEvent()

    @property
    def pending(self) -> int:
        return sum(1 for _, future in self._pending if not future.done())

    def _take(self, view: ViewSelection, index: int) -> asyncio.Future:
        matching = [f for v, f in self._pending if v == view and not f.done()]
        return matching[index]

    def resolve(
        self,
        view: ViewSelection,
        payload: EventsPayload,
        index: int = 0,
    ) -> None:
        """Resolve the index-th pending fetch for a view."""
        self._take(view, index).set_result(payload)

    def reject(
        self,
        view: ViewSelection,
        error: Exception,
        index: int = 0,
    ) -> None:
        """Reject the index-th pending fetch for a view."""
        self._take(view, index).set_exception(error)


async def settle() -> None:
    """Let scheduled tasks run until they block again."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def scripted_client() -> ScriptedCalendarClient:
    return ScriptedCalendarClient()


# =============================================================================
# Sample Data Fixtures
# =============================================================================


def make_event(
    event_id: str = "evt-1",
    subject: str = "Standup",
    conference: str | None = None,
    **kwargs,
) -> EventRecord:
    """Build an event with sensible defaults."""
    return EventRecord(
        id=event_id,
        subject=subject,
        start=kwargs.pop("start", datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)),
        end=kwargs.pop("end", datetime(2025, 1, 15, 11, 0, tzinfo=timezone.utc)),
        conference=conference,
        **kwargs,
    )


@pytest.fixture
def today_events() -> list[EventRecord]:
    return [
        make_event("today-1", "Standup", "https://meet.google.com/abc-defg-hij"),
        make_event(
            "today-2",
            "Lunch",
            start=datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc),
            end=datetime(2025, 1, 15, 13, 0, tzinfo=timezone.utc),
            location="Cafe",
        ),
    ]


@pytest.fixture
def week_events() -> list[EventRecord]:
    return [
        make_event("week-1", "Planning", "https://zoom.us/j/123456789"),
        make_event(
            "week-2",
            "Offsite",
            start=datetime(2025, 1, 17, 0, 0, tzinfo=timezone.utc),
            end=datetime(2025, 1, 18, 0, 0, tzinfo=timezone.utc),
            is_all_day=True,
        ),
    ]


@pytest.fixture
def sample_event_json() -> dict:
    """Event as serialized by the plugin's events API."""
    return {
        "id": "AAMkAGI2",
        "subject": "Design review",
        "start": "2025-01-15T10:00:00Z",
        "end": "2025-01-15T11:00:00Z",
        "location": "Room 4",
        "isAllDay": False,
        "webLink": "https://calendar.google.com/event?eid=abc",
        "organizer": "Alice",
        "description": "Quarterly review",
        "conference": "https://meet.google.com/abc-defg-hij",
    }
