"""Domain models for the calendar sidebar."""

from gcal_sidebar.models.event import (
    ConferenceCategory,
    CreatedEvent,
    CreateEventRequest,
    EventRecord,
    EventsPayload,
    SessionStatus,
    ViewSelection,
)
from gcal_sidebar.models.feed import (
    ConnectionState,
    ErrorKind,
    ErrorSource,
    FeedPhase,
    FeedState,
)

__all__ = [
    # Event
    "ConferenceCategory",
    "CreatedEvent",
    "CreateEventRequest",
    "EventRecord",
    "EventsPayload",
    "SessionStatus",
    "ViewSelection",
    # Feed
    "ConnectionState",
    "ErrorKind",
    "ErrorSource",
    "FeedPhase",
    "FeedState",
]
