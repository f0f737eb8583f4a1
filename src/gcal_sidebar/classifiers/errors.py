"""Classification of failed event fetches.

The plugin does not return structured error codes, only free text and an
HTTP status, so classification is a best-effort keyword match. Rules are
evaluated in order and the first match wins.

## Rules

1. HTTP 401 or 404 -> Connectivity
2. Message contains a session keyword (case-insensitive) -> Connectivity
3. Anything else -> Transient

Connectivity hides the error text and sends the user to the connect screen,
so the keyword list stays narrow and uncertain cases fall through to
Transient.
"""

from __future__ import annotations

from gcal_sidebar.models.feed import ErrorKind, ErrorSource

# Statuses the plugin uses when the user has no stored calendar session
CONNECTIVITY_STATUSES: frozenset[int] = frozenset({401, 404})

# Substrings that indicate a missing or expired session
CONNECTIVITY_KEYWORDS: tuple[str, ...] = (
    "not connected",
    "user not found",
    "token",
    "not authorized",
    "unauthorized",
    "not logged in",
    "oauth",
    "connect your account",
)


def classify_error(source: ErrorSource) -> ErrorKind:
    """Classify a failure as Connectivity or Transient.

    Args:
        source: HTTP status and/or message describing the failure

    Returns:
        ErrorKind.CONNECTIVITY if the session is missing, else TRANSIENT
    """
    if source.http_status in CONNECTIVITY_STATUSES:
        return ErrorKind.CONNECTIVITY

    text = (source.message or "").lower()
    for keyword in CONNECTIVITY_KEYWORDS:
        if keyword in text:
            return ErrorKind.CONNECTIVITY

    return ErrorKind.TRANSIENT


def is_connectivity_error(
    message: str | None = None,
    http_status: int | None = None,
) -> bool:
    """Shorthand for checking a message/status pair."""
    kind = classify_error(ErrorSource(http_status=http_status, message=message))
    return kind is ErrorKind.CONNECTIVITY
