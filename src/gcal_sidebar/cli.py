"""Command-line interface for the calendar sidebar."""

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from gcal_sidebar import __version__
from gcal_sidebar.classifiers.errors import is_connectivity_error
from gcal_sidebar.client.base import CalendarClientError
from gcal_sidebar.client.plugin import PluginCalendarClient
from gcal_sidebar.config import Settings, get_settings
from gcal_sidebar.feed.controller import EventFeedController
from gcal_sidebar.feed.reauth import ReauthCoordinator
from gcal_sidebar.models.event import CreateEventRequest, ViewSelection
from gcal_sidebar.models.feed import ConnectionState, FeedState
from gcal_sidebar.render import CONNECT_PROMPT, format_event, format_feed

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_NOT_CONNECTED = 2


def feed_exit_code(state: FeedState) -> int:
    """Map a settled feed state to a process exit code."""
    if state.show_connect_prompt:
        return EXIT_NOT_CONNECTED
    if state.error_message:
        return EXIT_FAILED
    return EXIT_OK


async def show_events(settings: Settings, view: ViewSelection) -> int:
    async with PluginCalendarClient.from_settings(settings) as client:
        controller = EventFeedController(client, view=view)
        try:
            state = await controller.mount()
        finally:
            await controller.close()
    print(format_feed(state))
    return feed_exit_code(state)


async def show_status(settings: Settings) -> int:
    async with PluginCalendarClient.from_settings(settings) as client:
        controller = EventFeedController(client, view=settings.default_view)
        try:
            state = await controller.check_connection()
        finally:
            await controller.close()

    if state.show_connect_prompt:
        print(CONNECT_PROMPT)
        return EXIT_NOT_CONNECTED
    if state.connection is ConnectionState.CONNECTED:
        print(f"Connected as {state.account_email}" if state.account_email else "Connected")
        return EXIT_OK
    print("Could not determine calendar connection status")
    return EXIT_FAILED


async def connect(settings: Settings, wait: bool) -> int:
    async with PluginCalendarClient.from_settings(settings) as client:
        controller = EventFeedController(client, view=settings.default_view)
        reauth = ReauthCoordinator(
            controller,
            settings.connect_url,
            delay=settings.reauth_focus_delay_seconds,
        )
        try:
            reauth.start_sign_in()
            print(f"Opened {settings.connect_url} in your browser.")
            if not wait:
                return EXIT_OK

            # Enter stands in for the window regaining focus
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(
                None, input, "Press Enter once you have signed in... "
            )
            recheck = reauth.on_focus()
            state = await recheck if recheck is not None else controller.state
        finally:
            reauth.close()
            await controller.close()

    print(format_feed(state))
    return feed_exit_code(state)


async def create_event(settings: Settings, request: CreateEventRequest) -> int:
    async with PluginCalendarClient.from_settings(settings) as client:
        try:
            created = await client.create_event(request)
        except CalendarClientError as e:
            if is_connectivity_error(e.message, e.status_code):
                print(CONNECT_PROMPT)
                return EXIT_NOT_CONNECTED
            print(f"Failed to create event: {e.message}", file=sys.stderr)
            return EXIT_FAILED

    if created.event is not None:
        print("Created:")
        print(format_event(created.event, show_date=True))
    else:
        print("Event created.")
    if created.call_link:
        print(f"Call link: {created.call_link}")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gcal-sidebar",
        description="Google Calendar Sidebar - View and create calendar events from Mattermost",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Events command
    events_parser = subparsers.add_parser("events", help="List calendar events")
    events_parser.add_argument(
        "--view",
        choices=[view.value for view in ViewSelection],
        default=None,
        help="Time window to show (default: from settings)",
    )

    # Status command
    subparsers.add_parser("status", help="Show calendar connection status")

    # Connect command
    connect_parser = subparsers.add_parser(
        "connect", help="Sign in to Google Calendar in your browser"
    )
    connect_parser.add_argument(
        "--wait",
        action="store_true",
        help="Wait for sign-in to finish and show today's events",
    )

    # Create command
    create_parser = subparsers.add_parser("create", help="Create a calendar event")
    create_parser.add_argument("subject", help="Event title")
    create_parser.add_argument("--date", required=True, help="Date (YYYY-MM-DD)")
    create_parser.add_argument("--start", default="", help="Start time (e.g. 14:00)")
    create_parser.add_argument("--end", default="", help="End time (e.g. 15:00)")
    create_parser.add_argument("--all-day", action="store_true", help="All-day event")
    create_parser.add_argument("--location", default="", help="Event location")
    create_parser.add_argument("--description", default="", help="Event description")
    create_parser.add_argument(
        "--attendee",
        action="append",
        default=[],
        help="Attendee email (repeatable)",
    )
    create_parser.add_argument("--channel", default="", help="Channel ID to notify")
    create_parser.add_argument(
        "--no-call",
        action="store_true",
        help="Do not add a Mattermost call link",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration:\n{e}", file=sys.stderr)
        return EXIT_FAILED

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "events":
        view = ViewSelection(args.view) if args.view else settings.default_view
        return asyncio.run(show_events(settings, view))

    if args.command == "status":
        return asyncio.run(show_status(settings))

    if args.command == "connect":
        return asyncio.run(connect(settings, wait=args.wait))

    if args.command == "create":
        try:
            request = CreateEventRequest(
                subject=args.subject,
                all_day=args.all_day,
                attendees=args.attendee,
                date=args.date,
                start_time=args.start,
                end_time=args.end,
                description=args.description,
                location=args.location,
                channel_id=args.channel,
                add_mattermost_call=not args.no_call,
            )
        except ValidationError as e:
            print(f"Invalid event:\n{e}", file=sys.stderr)
            return EXIT_FAILED
        return asyncio.run(create_event(settings, request))

    parser.error(f"Unknown command: {args.command}")
    return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
