"""
YCloud Integration

WhatsApp delivery through the YCloud API:
- YCloudHttpClient: HTTP transport with per-clinic API keys
- YCloudMessenger: template/text payloads (INotificationService)
"""

from citenly.integrations.ycloud.http_client import YCloudHttpClient
from citenly.integrations.ycloud.messenger import YCloudMessenger

__all__ = [
    "YCloudHttpClient",
    "YCloudMessenger",
]
