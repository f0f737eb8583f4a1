"""Tests for sign-in re-check scheduling."""

import asyncio
from unittest.mock import MagicMock

import pytest

from conftest import ScriptedCalendarClient, settle

from gcal_sidebar.client.base import NotConnectedError
from gcal_sidebar.feed.controller import EventFeedController
from gcal_sidebar.feed.reauth import DEFAULT_FOCUS_DELAY_SECONDS, ReauthCoordinator
from gcal_sidebar.models.event import EventsPayload, ViewSelection
from gcal_sidebar.models.feed import ConnectionState

CONNECT_URL = "https://chat.example.com/plugins/com.mattermost.gcal/oauth2/connect"
DELAY = 0.01


@pytest.fixture
def opener() -> MagicMock:
    return MagicMock()


async def disconnected_controller(client: ScriptedCalendarClient) -> EventFeedController:
    controller = EventFeedController(client)
    task = controller.mount()
    await settle()
    client.reject(ViewSelection.TODAY, NotConnectedError("Not authorized", status_code=401))
    await task
    return controller


class TestStartSignIn:
    """Tests for opening the sign-in flow."""

    @pytest.mark.asyncio
    async def test_opens_connect_url(self, scripted_client, opener):
        controller = EventFeedController(scripted_client)
        reauth = ReauthCoordinator(controller, CONNECT_URL, delay=DELAY, opener=opener)

        reauth.start_sign_in()
        opener.assert_called_once_with(CONNECT_URL)
        assert reauth.armed is True

    def test_default_delay(self, scripted_client):
        controller = EventFeedController(scripted_client)
        reauth = ReauthCoordinator(controller, CONNECT_URL)
        assert reauth.delay == DEFAULT_FOCUS_DELAY_SECONDS == 0.5


class TestOnFocus:
    """Tests for focus-triggered re-checks."""

    @pytest.mark.asyncio
    async def test_focus_before_sign_in_does_nothing(self, scripted_client, opener):
        controller = EventFeedController(scripted_client)
        reauth = ReauthCoordinator(controller, CONNECT_URL, delay=DELAY, opener=opener)

        assert reauth.on_focus() is None
        await asyncio.sleep(DELAY * 2)
        assert scripted_client.calls == []

    @pytest.mark.asyncio
    async def test_focus_schedules_refresh_after_delay(self, scripted_client, opener):
        controller = await disconnected_controller(scripted_client)
        reauth = ReauthCoordinator(controller, CONNECT_URL, delay=DELAY, opener=opener)
        reauth.start_sign_in()

        recheck = reauth.on_focus()
        assert recheck is not None
        assert reauth.pending_rechecks == 1
        await settle()
        assert scripted_client.calls == [ViewSelection.TODAY]  # not yet

        await asyncio.sleep(DELAY * 3)
        await settle()
        assert scripted_client.calls == [ViewSelection.TODAY, ViewSelection.TODAY]
        assert controller.state.is_loading is True
        assert recheck.done() is False

        scripted_client.resolve(ViewSelection.TODAY, EventsPayload())
        state = await recheck
        assert state.connection is ConnectionState.CONNECTED
        assert controller.state is state
        assert reauth.pending_rechecks == 0
        assert reauth.armed is False
        await controller.close()

    @pytest.mark.asyncio
    async def test_one_recheck_per_focus_event(self, scripted_client, opener):
        controller = await disconnected_controller(scripted_client)
        reauth = ReauthCoordinator(controller, CONNECT_URL, delay=DELAY, opener=opener)
        reauth.start_sign_in()

        reauth.on_focus()
        reauth.on_focus()
        await asyncio.sleep(DELAY * 3)
        await settle()
        assert len(scripted_client.calls) == 3  # mount + one per focus
        reauth.close()
        await controller.close()

    @pytest.mark.asyncio
    async def test_stays_armed_while_still_disconnected(self, scripted_client, opener):
        """Test returning before sign-in completes leaves the watcher on."""
        controller = await disconnected_controller(scripted_client)
        reauth = ReauthCoordinator(controller, CONNECT_URL, delay=DELAY, opener=opener)
        reauth.start_sign_in()

        reauth.on_focus()
        await asyncio.sleep(DELAY * 3)
        await settle()
        scripted_client.reject(
            ViewSelection.TODAY, NotConnectedError("Not authorized", status_code=401)
        )
        await settle()
        assert controller.state.show_connect_prompt is True
        assert reauth.armed is True
        assert reauth.on_focus() is not None
        reauth.close()
        await controller.close()

    @pytest.mark.asyncio
    async def test_close_cancels_pending(self, scripted_client, opener):
        controller = await disconnected_controller(scripted_client)
        reauth = ReauthCoordinator(controller, CONNECT_URL, delay=DELAY, opener=opener)
        reauth.start_sign_in()

        recheck = reauth.on_focus()
        reauth.close()
        assert reauth.armed is False
        with pytest.raises(asyncio.CancelledError):
            await recheck

        await asyncio.sleep(DELAY * 3)
        assert len(scripted_client.calls) == 1
        await controller.close()

    @pytest.mark.asyncio
    async def test_recheck_skipped_after_unmount(self, scripted_client, opener):
        controller = await disconnected_controller(scripted_client)
        reauth = ReauthCoordinator(controller, CONNECT_URL, delay=DELAY, opener=opener)
        reauth.start_sign_in()

        recheck = reauth.on_focus()
        await controller.close()
        state = await recheck
        assert state.show_connect_prompt is True
        assert len(scripted_client.calls) == 1
