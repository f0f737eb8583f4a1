"""Feed state models.

`FeedState` is the snapshot the presentation layer reads. It is immutable;
every transition produces a new snapshot through `gcal_sidebar.feed.reducer`.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from gcal_sidebar.models.event import EventRecord, ViewSelection


class ConnectionState(str, Enum):
    """Whether the user's calendar session is connected."""

    UNKNOWN = "unknown"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class FeedPhase(str, Enum):
    """Lifecycle phase of the feed."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class ErrorKind(str, Enum):
    """Classification of a failed fetch."""

    CONNECTIVITY = "connectivity"  # session missing or expired
    TRANSIENT = "transient"  # anything else, recoverable by retry


class ErrorSource(BaseModel):
    """Raw failure signal handed to the error classifier."""

    http_status: int | None = None
    message: str | None = None


class FeedState(BaseModel):
    """Observable snapshot of the event feed.

    While ``is_loading`` is true, ``events`` and ``error_message`` belong to
    the previous fetch and must not drive user-facing decisions.
    """

    model_config = ConfigDict(frozen=True)

    connection: ConnectionState = ConnectionState.UNKNOWN
    view: ViewSelection = ViewSelection.TODAY
    events: tuple[EventRecord, ...] = ()
    is_loading: bool = False
    error_message: str | None = None
    phase: FeedPhase = FeedPhase.IDLE
    request_seq: int = Field(
        default=0, ge=0, description="ID of the most recently issued fetch"
    )
    account_email: str | None = None

    @property
    def show_connect_prompt(self) -> bool:
        """Whether the panel should replace the feed with a connect screen."""
        return self.connection is ConnectionState.DISCONNECTED

    @property
    def show_error_banner(self) -> bool:
        """Whether a transient error banner should be shown."""
        return (
            not self.is_loading
            and not self.show_connect_prompt
            and self.error_message is not None
        )
