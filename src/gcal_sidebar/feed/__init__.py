"""Event feed state management.

## Components

- `reducer`: pure transitions over `FeedState`
- `controller`: owns the state, issues fetches, discards stale responses
- `reauth`: opens the sign-in flow and re-checks on window focus

## Feed Lifecycle

1. Panel mounts; a fetch is issued for the default view
2. The response is classified: events, transient error, or not connected
3. When not connected the panel shows a connect prompt
4. Sign-in opens in a new tab; on focus the feed re-fetches
5. Switching tabs or retrying re-fetches; stale responses are dropped
"""

from gcal_sidebar.feed.controller import EventFeedController
from gcal_sidebar.feed.reauth import ReauthCoordinator
from gcal_sidebar.feed.reducer import (
    FetchFailed,
    FetchStarted,
    FetchSucceeded,
    SessionChecked,
    initial_state,
    reduce,
)

__all__ = [
    "EventFeedController",
    "ReauthCoordinator",
    "FetchFailed",
    "FetchStarted",
    "FetchSucceeded",
    "SessionChecked",
    "initial_state",
    "reduce",
]
