"""Heuristic classifiers for fetch failures and conference links."""

from gcal_sidebar.classifiers.conference import (
    classify_conference,
    conference_link,
    event_conference,
)
from gcal_sidebar.classifiers.errors import classify_error, is_connectivity_error

__all__ = [
    "classify_conference",
    "conference_link",
    "event_conference",
    "classify_error",
    "is_connectivity_error",
]
