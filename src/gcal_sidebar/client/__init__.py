"""Calendar clients."""

from gcal_sidebar.client.base import (
    CalendarClient,
    CalendarClientError,
    NotConnectedError,
    PluginUnavailableError,
)
from gcal_sidebar.client.plugin import PluginCalendarClient

__all__ = [
    "CalendarClient",
    "CalendarClientError",
    "NotConnectedError",
    "PluginUnavailableError",
    "PluginCalendarClient",
]
