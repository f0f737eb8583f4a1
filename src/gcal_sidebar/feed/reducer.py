"""Pure state transitions for the event feed.

Every change to `FeedState` goes through `reduce(state, action)`, which
returns a new snapshot and never mutates its input. The controller owns the
current snapshot and feeds actions in as requests start and finish.

## Transitions

| Action | Result |
|---|---|
| FetchStarted(view) | loading, view set, new request id |
| FetchSucceeded, no error | ready, connected, events replaced |
| FetchSucceeded, error text, Connectivity | ready, disconnected, no events, no message |
| FetchSucceeded, error text, Transient | ready, no events, message shown |
| FetchFailed | classified like an error payload |
| SessionChecked(connected) | connected, account email recorded |
| SessionChecked(not connected) | disconnected, no events |

Fetch results are applied only when they carry the most recently issued
request id and the active view. Anything else is stale and returned as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from gcal_sidebar.classifiers.errors import classify_error
from gcal_sidebar.models.event import EventsPayload, ViewSelection
from gcal_sidebar.models.feed import (
    ConnectionState,
    ErrorKind,
    ErrorSource,
    FeedPhase,
    FeedState,
)

GENERIC_FAILURE_MESSAGE = "Failed to load events"


@dataclass(frozen=True)
class FetchStarted:
    """A fetch was issued for a view."""

    view: ViewSelection


@dataclass(frozen=True)
class FetchSucceeded:
    """A fetch resolved with a payload (which may carry an error string)."""

    request_id: int
    view: ViewSelection
    payload: EventsPayload


@dataclass(frozen=True)
class FetchFailed:
    """A fetch was rejected."""

    request_id: int
    view: ViewSelection
    source: ErrorSource


@dataclass(frozen=True)
class SessionChecked:
    """The session state was observed outside a fetch."""

    connected: bool
    email: str | None = None


FeedAction = Union[FetchStarted, FetchSucceeded, FetchFailed, SessionChecked]


def initial_state(view: ViewSelection = ViewSelection.TODAY) -> FeedState:
    """Create the state of a freshly mounted panel."""
    return FeedState(view=view)


def is_current(state: FeedState, request_id: int, view: ViewSelection) -> bool:
    """Check whether a response belongs to the latest request for the active view."""
    return request_id == state.request_seq and view == state.view


def reduce(state: FeedState, action: FeedAction) -> FeedState:
    """Apply an action to a feed state.

    Args:
        state: Current snapshot
        action: What happened

    Returns:
        The next snapshot (the same object when the action is stale)
    """
    if isinstance(action, FetchStarted):
        return state.model_copy(
            update={
                "view": action.view,
                "phase": FeedPhase.LOADING,
                "is_loading": True,
                "request_seq": state.request_seq + 1,
            }
        )

    if isinstance(action, FetchSucceeded):
        if not is_current(state, action.request_id, action.view):
            return state
        if action.payload.error:
            return _apply_failure(state, ErrorSource(message=action.payload.error))
        return state.model_copy(
            update={
                "phase": FeedPhase.READY,
                "is_loading": False,
                "connection": ConnectionState.CONNECTED,
                "events": tuple(action.payload.events),
                "error_message": None,
            }
        )

    if isinstance(action, FetchFailed):
        if not is_current(state, action.request_id, action.view):
            return state
        return _apply_failure(state, action.source)

    if isinstance(action, SessionChecked):
        if action.connected:
            return state.model_copy(
                update={
                    "connection": ConnectionState.CONNECTED,
                    "account_email": action.email or state.account_email,
                }
            )
        return state.model_copy(
            update={
                "connection": ConnectionState.DISCONNECTED,
                "events": (),
                "error_message": None,
                "account_email": None,
            }
        )

    raise TypeError(f"Unknown feed action: {action!r}")


def _apply_failure(state: FeedState, source: ErrorSource) -> FeedState:
    """Apply a classified failure to the current request's state."""
    kind = classify_error(source)

    if kind is ErrorKind.CONNECTIVITY:
        return state.model_copy(
            update={
                "phase": FeedPhase.READY,
                "is_loading": False,
                "connection": ConnectionState.DISCONNECTED,
                "events": (),
                "error_message": None,
            }
        )

    # Transient failures never demote the connection; a prior Disconnected
    # stays until a successful fetch or session check.
    connection = state.connection
    if connection is ConnectionState.UNKNOWN:
        connection = ConnectionState.CONNECTED

    return state.model_copy(
        update={
            "phase": FeedPhase.READY,
            "is_loading": False,
            "connection": connection,
            "events": (),
            "error_message": source.message or GENERIC_FAILURE_MESSAGE,
        }
    )
