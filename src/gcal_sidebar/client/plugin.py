"""HTTP client for the Mattermost calendar plugin.

## Endpoints

All routes are relative to ``{site_url}/plugins/{plugin_id}``.

- ``GET /api/v1/events?range=today|tomorrow|week``
  -> ``{"events": [...], "timezone": "...", "error": "..."}``
- ``GET /api/v1/me``
  -> ``{"mattermost_user_id": "...", "remote_id": "...", "mail": "..."}``
- ``POST /api/v1/events/create``
  -> ``{"event": {...}, "call_link": "...", "error": "..."}``

## Authentication

The plugin identifies the caller by the ``Mattermost-User-Id`` header, which
the Mattermost server sets for authenticated sessions. When running outside
the browser a personal access token is sent as a Bearer token.

## Errors

HTTP errors are raised as `CalendarClientError` carrying the status code and
the plugin's ``error`` text when the body has one. 401 and 404 are raised as
`NotConnectedError`. Timeouts and network errors are retried before raising
`PluginUnavailableError`.
Successful responses whose body cannot be parsed into events raise
`CalendarClientError` with "Invalid response from calendar service".
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from gcal_sidebar.client.base import (
    CalendarClient,
    CalendarClientError,
    NotConnectedError,
    PluginUnavailableError,
)
from gcal_sidebar.config import Settings, get_settings
from gcal_sidebar.models.event import (
    CreatedEvent,
    CreateEventRequest,
    EventsPayload,
    SessionStatus,
    ViewSelection,
)

logger = logging.getLogger(__name__)

EVENTS_PATH = "/api/v1/events"
SESSION_PATH = "/api/v1/me"
CREATE_EVENT_PATH = "/api/v1/events/create"

NOT_CONNECTED_STATUSES = frozenset({401, 404})


class PluginCalendarClient(CalendarClient):
    """Calendar client backed by the plugin's HTTP API.

    Example:
        ```python
        async with PluginCalendarClient.from_settings() as client:
            payload = await client.fetch_events(ViewSelection.TODAY)
            for event in payload.events:
                print(event.subject)
        ```
    """

    def __init__(
        self,
        plugin_url: str,
        user_id: str,
        token: str | None = None,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_wait: wait_base | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            plugin_url: Base URL of the plugin's routes
            user_id: Mattermost user ID sent with each request
            token: Optional personal access token
            timeout: Request timeout in seconds
            retry_attempts: Attempts for timeouts and network errors
            retry_wait: Backoff strategy between attempts
            transport: Custom httpx transport (used in tests)
        """
        self.plugin_url = plugin_url.rstrip("/")
        self.user_id = user_id
        self.token = token
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> PluginCalendarClient:
        """Create a client from application settings."""
        settings = settings or get_settings()
        return cls(
            plugin_url=settings.plugin_url,
            user_id=settings.mattermost_user_id,
            token=settings.mattermost_token,
            timeout=settings.request_timeout_seconds,
            retry_attempts=settings.request_retry_attempts,
        )

    async def __aenter__(self) -> PluginCalendarClient:
        """Enter async context manager."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit async context manager."""
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.plugin_url,
                timeout=self.timeout,
                headers=self._get_default_headers(),
                transport=self._transport,
            )
        return self._client

    def _get_default_headers(self) -> dict[str, str]:
        """Get default headers for requests."""
        headers = {
            "Accept": "application/json",
            "Mattermost-User-Id": self.user_id,
            "X-Requested-With": "XMLHttpRequest",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send a request, retrying timeouts and network errors.

        Raises:
            PluginUnavailableError: If the plugin cannot be reached
            CalendarClientError: For any other transport failure
        """
        client = self._get_client()
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.retry_attempts),
                wait=self.retry_wait,
                retry=retry_if_exception_type(
                    (httpx.TimeoutException, httpx.NetworkError)
                ),
                reraise=True,
            ):
                with attempt:
                    response = await client.request(
                        method, path, params=params, json=json
                    )
        except (httpx.TimeoutException, httpx.NetworkError) as e:
            logger.warning(f"Calendar plugin unreachable at {path}: {e}")
            raise PluginUnavailableError(
                f"Calendar service unavailable: {e.__class__.__name__}"
            ) from e
        except httpx.HTTPError as e:
            raise CalendarClientError(f"Request failed: {e}") from e

        return response

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Raise a client error for HTTP error responses."""
        if response.status_code < 400:
            return

        message = _error_text(response) or f"Request failed: {response.status_code}"
        error_cls = (
            NotConnectedError
            if response.status_code in NOT_CONNECTED_STATUSES
            else CalendarClientError
        )
        raise error_cls(
            message,
            status_code=response.status_code,
            response_body=response.text,
        )

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Unparseable response from calendar plugin: {response.text!r}")
            raise CalendarClientError(
                "Invalid response from calendar service",
                status_code=response.status_code,
                response_body=response.text,
            ) from e
        if not isinstance(data, dict):
            raise CalendarClientError(
                "Invalid response from calendar service",
                status_code=response.status_code,
                response_body=response.text,
            )
        return data

    async def fetch_events(self, view: ViewSelection) -> EventsPayload:
        """Get events for a view from the plugin."""
        response = await self._request("GET", EVENTS_PATH, params={"range": view.value})
        self._raise_for_status(response)
        data = self._json(response)
        try:
            payload = EventsPayload.from_api(data)
        except (KeyError, TypeError, AttributeError, ValueError, ValidationError) as e:
            logger.error(f"Malformed events payload from calendar plugin: {e}")
            raise CalendarClientError(
                "Invalid response from calendar service",
                status_code=response.status_code,
                response_body=response.text,
            ) from e
        logger.debug(
            f"Fetched {len(payload.events)} events for view {view.value}"
            + (f" (error: {payload.error})" if payload.error else "")
        )
        return payload

    async def check_session(self) -> SessionStatus:
        """Check whether the user has connected a calendar account.

        The plugin answers 401/404 when no account is stored; those map to
        ``connected=False`` rather than an error.
        """
        response = await self._request("GET", SESSION_PATH)
        if response.status_code in NOT_CONNECTED_STATUSES:
            return SessionStatus(connected=False)
        self._raise_for_status(response)
        data = self._json(response)
        return SessionStatus(
            connected=True,
            email=data.get("mail") or data.get("email") or None,
        )

    async def create_event(self, request: CreateEventRequest) -> CreatedEvent:
        """Create an event through the plugin."""
        response = await self._request(
            "POST", CREATE_EVENT_PATH, json=request.model_dump()
        )
        self._raise_for_status(response)
        data = self._json(response)
        if data.get("error"):
            raise CalendarClientError(data["error"], status_code=response.status_code)
        try:
            created = CreatedEvent.from_api(data)
        except (KeyError, TypeError, AttributeError, ValueError, ValidationError) as e:
            logger.error(f"Malformed create-event response from calendar plugin: {e}")
            raise CalendarClientError(
                "Invalid response from calendar service",
                status_code=response.status_code,
                response_body=response.text,
            ) from e
        logger.info(f"Created event {created.event.id if created.event else '(unknown)'}")
        return created


def _error_text(response: httpx.Response) -> str | None:
    """Extract the plugin's error message from an error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or None
    if isinstance(data, dict):
        for key in ("error", "message"):
            if data.get(key):
                return str(data[key])
    return None
