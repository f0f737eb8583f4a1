"""Plain-text rendering of the feed for the command line."""

from __future__ import annotations

from datetime import datetime

from gcal_sidebar.classifiers.conference import event_conference
from gcal_sidebar.models.event import ConferenceCategory, EventRecord, ViewSelection
from gcal_sidebar.models.feed import FeedState

CONFERENCE_LABELS: dict[ConferenceCategory, str] = {
    ConferenceCategory.GOOGLE_MEET: "Google Meet",
    ConferenceCategory.ZOOM: "Zoom",
    ConferenceCategory.MATTERMOST: "Mattermost Call",
    ConferenceCategory.GENERIC: "Join Meeting",
}

CONNECT_PROMPT = (
    "Your Google Calendar is not connected.\n"
    "Run `gcal-sidebar connect` to sign in."
)


def format_time(event: EventRecord) -> str:
    """Format an event's time span, e.g. '10:00 - 11:00' or 'All day'."""
    if event.is_all_day:
        return "All day"
    return f"{event.start:%H:%M} - {event.end:%H:%M}"


def format_date(value: datetime) -> str:
    """Format a date heading, e.g. 'Wed, Jan 15'."""
    return f"{value:%a, %b} {value.day}"


def format_event(event: EventRecord, show_date: bool = False) -> str:
    """Render one event as a multi-line block."""
    when = format_time(event)
    if show_date:
        when = f"{format_date(event.start)}  {when}"

    lines = [f"{when}  {event.display_subject}"]
    if event.location:
        lines.append(f"    @ {event.location}")
    conference = event_conference(event)
    if conference is not None:
        link, category = conference
        lines.append(f"    [{CONFERENCE_LABELS[category]}] {link}")
    if event.web_link:
        lines.append(f"    {event.web_link}")
    return "\n".join(lines)


def format_heading(view: ViewSelection, now: datetime | None = None) -> str:
    """Format a view heading with its dates, e.g. '== Week: Wed, Jan 15 - Wed, Jan 22 =='."""
    start, end = view.window(now or datetime.now().astimezone())
    if start.date() == end.date():
        return f"== {view.label}: {format_date(start)} =="
    return f"== {view.label}: {format_date(start)} - {format_date(end)} =="


def format_feed(state: FeedState, now: datetime | None = None) -> str:
    """Render the whole panel for a settled feed state.

    ``now`` anchors the heading dates and defaults to the local time.
    """
    if state.show_connect_prompt:
        return CONNECT_PROMPT
    if state.is_loading:
        return "Loading..."

    header = format_heading(state.view, now)
    if state.error_message:
        return f"{header}\n! {state.error_message}"
    if not state.events:
        return f"{header}\nNo events"

    show_date = state.view is ViewSelection.WEEK
    blocks = [format_event(event, show_date=show_date) for event in state.events]
    return "\n".join([header, *blocks])
