"""
Google Integration

- GoogleOAuthClient: refresh_token grant against the OAuth token endpoint
- GoogleCalendarClient: Calendar v3 events (create, list, delete)
"""

from citenly.integrations.google.calendar_client import GoogleCalendarClient
from citenly.integrations.google.oauth_client import GoogleOAuthClient

__all__ = [
    "GoogleCalendarClient",
    "GoogleOAuthClient",
]
