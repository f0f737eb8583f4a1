"""Event models for the calendar sidebar."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class ViewSelection(str, Enum):
    """Time window shown in the panel.

    Values match the plugin's ``range`` query parameter.
    """

    TODAY = "today"
    TOMORROW = "tomorrow"
    WEEK = "week"

    def window(self, now: datetime) -> tuple[datetime, datetime]:
        """Get the (start, end) window the plugin resolves for this view.

        Day boundaries are taken in ``now``'s timezone.
        """
        if self is ViewSelection.TOMORROW:
            day = now.date() + timedelta(days=1)
            return _start_of_day(day, now), _end_of_day(day, now)
        if self is ViewSelection.WEEK:
            return (
                _start_of_day(now.date(), now),
                _end_of_day(now.date() + timedelta(days=7), now),
            )
        return _start_of_day(now.date(), now), _end_of_day(now.date(), now)

    @property
    def label(self) -> str:
        """Tab label for the view."""
        return {
            ViewSelection.TODAY: "Today",
            ViewSelection.TOMORROW: "Tomorrow",
            ViewSelection.WEEK: "Week",
        }[self]


def _start_of_day(day: date, now: datetime) -> datetime:
    return datetime.combine(day, time.min, tzinfo=now.tzinfo)


def _end_of_day(day: date, now: datetime) -> datetime:
    return datetime.combine(day, time.max, tzinfo=now.tzinfo)


class ConferenceCategory(str, Enum):
    """Conference provider inferred from a meeting URL."""

    GOOGLE_MEET = "google_meet"
    ZOOM = "zoom"
    MATTERMOST = "mattermost"
    GENERIC = "generic"


class EventRecord(BaseModel):
    """A calendar event as returned by the plugin's events API.

    Records are immutable. A successful fetch replaces the whole list.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Event identifier in the remote calendar")
    subject: str = Field(default="", description="Event title, may be empty")
    start: datetime = Field(..., description="Event start time")
    end: datetime = Field(..., description="Event end time")
    is_all_day: bool = Field(default=False, description="Whether this is an all-day event")
    location: str | None = Field(default=None, description="Location display name")
    web_link: str | None = Field(
        default=None, description="Link to the event in the provider's web UI"
    )
    conference: str | None = Field(default=None, description="Conference/meeting URL")
    organizer: str | None = Field(default=None, description="Organizer display name")
    description: str | None = Field(default=None, description="Event body text")

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EventRecord:
        """Create from the plugin's JSON event representation."""
        return cls(
            id=data["id"],
            subject=data.get("subject") or "",
            start=_parse_timestamp(data["start"]),
            end=_parse_timestamp(data["end"]),
            is_all_day=data.get("isAllDay", False),
            location=data.get("location") or None,
            web_link=data.get("webLink") or None,
            conference=data.get("conference"),
            organizer=data.get("organizer") or None,
            description=data.get("description") or None,
        )

    @property
    def display_subject(self) -> str:
        """Subject to show, with a placeholder for untitled events."""
        return self.subject.strip() or "(No title)"


def _parse_timestamp(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _has_times(data: dict[str, Any]) -> bool:
    if data.get("start") and data.get("end"):
        return True
    logger.warning(f"Skipping event {data.get('id')!r} without start or end time")
    return False


class EventsPayload(BaseModel):
    """Body of an events API response."""

    events: list[EventRecord] = Field(default_factory=list)
    timezone: str | None = None
    error: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> EventsPayload:
        """Create from the plugin's JSON response.

        ``events`` may be missing or null when the plugin reports an error.
        Events without a start or end time are skipped.
        """
        return cls(
            events=[
                EventRecord.from_api(item)
                for item in data.get("events") or []
                if _has_times(item)
            ],
            timezone=data.get("timezone") or None,
            error=data.get("error") or None,
        )


class SessionStatus(BaseModel):
    """Whether the user has a connected calendar account."""

    connected: bool
    email: str | None = None


class CreateEventRequest(BaseModel):
    """Request body for creating an event through the plugin.

    Only the contract the plugin enforces is checked here: a subject, a
    ``YYYY-MM-DD`` date and, unless the event is all-day, both times.
    """

    subject: str = Field(..., min_length=1)
    all_day: bool = False
    attendees: list[str] = Field(default_factory=list)
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    start_time: str = ""
    end_time: str = ""
    description: str = ""
    location: str = ""
    channel_id: str = ""
    add_mattermost_call: bool = True

    @field_validator("subject")
    @classmethod
    def subject_not_blank(cls, v: str) -> str:
        """Reject whitespace-only subjects."""
        if not v.strip():
            raise ValueError("Subject is required")
        return v

    @field_validator("date")
    @classmethod
    def date_is_real(cls, v: str) -> str:
        """Ensure the date exists on the calendar."""
        date.fromisoformat(v)
        return v

    @model_validator(mode="after")
    def times_required_unless_all_day(self) -> CreateEventRequest:
        if not self.all_day and (not self.start_time or not self.end_time):
            raise ValueError(
                "start_time and end_time are required for non-all-day events"
            )
        return self


class CreatedEvent(BaseModel):
    """Result of creating an event."""

    event: EventRecord | None = None
    call_link: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CreatedEvent:
        """Create from the plugin's create-event response."""
        event_data = data.get("event")
        return cls(
            event=EventRecord.from_api(event_data) if event_data else None,
            call_link=data.get("call_link") or None,
        )
