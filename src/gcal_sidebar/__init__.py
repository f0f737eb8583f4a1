"""Google Calendar sidebar for Mattermost.

Shows the user's calendar events for today, tomorrow or the coming week,
detects when the calendar account needs to be (re)connected, and creates
events through the Mattermost calendar plugin.
"""

__version__ = "0.1.0"
