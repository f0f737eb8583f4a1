"""Conference provider detection for meeting URLs."""

from __future__ import annotations

from urllib.parse import urlparse

from gcal_sidebar.models.event import ConferenceCategory, EventRecord

# Checked in order; first match wins
CONFERENCE_PATTERNS: tuple[tuple[ConferenceCategory, tuple[str, ...]], ...] = (
    (ConferenceCategory.GOOGLE_MEET, ("meet.google.com",)),
    (ConferenceCategory.ZOOM, ("zoom.us", "zoom.com")),
    (ConferenceCategory.MATTERMOST, ("mm.", "mattermost")),
)


def classify_conference(url: str) -> ConferenceCategory:
    """Detect the conference provider from a meeting URL.

    Callers are expected to pass a usable URL; see `conference_link`.
    """
    text = url.lower()
    for category, patterns in CONFERENCE_PATTERNS:
        for pattern in patterns:
            if pattern in text:
                return category
    return ConferenceCategory.GENERIC


def conference_link(event: EventRecord) -> str | None:
    """Get the event's conference URL if it is usable.

    Empty, whitespace-only and non-URL values (no scheme or no host) are
    treated as absent.
    """
    value = (event.conference or "").strip()
    if not value:
        return None
    parsed = urlparse(value)
    if not parsed.scheme or not parsed.netloc:
        return None
    return value


def event_conference(event: EventRecord) -> tuple[str, ConferenceCategory] | None:
    """Get the conference link and its provider, or None when absent."""
    link = conference_link(event)
    if link is None:
        return None
    return link, classify_conference(link)
