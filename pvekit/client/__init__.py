"""Authenticated request dispatch and the underlying HTTP transport."""

from pvekit.client.api import ApiClient, parse_data
from pvekit.client.transport import send_request, session_headers

__all__ = [
    "ApiClient",
    "parse_data",
    "send_request",
    "session_headers",
]
