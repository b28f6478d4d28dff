"""Authenticated request dispatch against the Proxmox VE JSON API."""

import json
import logging

from pvekit.client.transport import send_request, session_headers
from pvekit.errors import ApiRequestError, InvalidArgumentError, NotAuthenticatedError, PveError, TransportError

logger = logging.getLogger(__name__)


def parse_data(body):
    """Return the ``data`` member of a response envelope.

    Falls back to the whole decoded document when there is no ``data`` key.

    Raises:
        PveError: the body is not valid JSON.
    """
    try:
        result = json.loads(body)
    except ValueError as e:
        raise PveError(f"Invalid JSON response: {body}") from e
    if isinstance(result, dict) and "data" in result:
        return result["data"]
    return result


class ApiClient:
    """Issues GET/POST/PUT/DELETE requests on behalf of one authenticated Connection.

    Every request carries the session cookie; every verb except GET also
    carries the CSRF prevention token. The client keeps no state besides the
    connection, so one instance can serve concurrent callers.
    """

    def __init__(self, connection, transport=None):
        if connection is None:
            raise InvalidArgumentError("connection is required")
        self.connection = connection
        self.transport = transport

    def get(self, endpoint: str) -> str:
        return self._send("GET", endpoint)

    def post(self, endpoint: str, params: dict[str, str] | None = None) -> str:
        return self._send("POST", endpoint, params)

    def put(self, endpoint: str, params: dict[str, str] | None = None) -> str:
        return self._send("PUT", endpoint, params)

    def delete(self, endpoint: str) -> str:
        return self._send("DELETE", endpoint)

    def get_data(self, endpoint: str):
        """GET *endpoint* and return the decoded ``data`` member."""
        return parse_data(self.get(endpoint))

    def test_connection(self) -> tuple[bool, str]:
        """Check the session with a GET on ``version``.

        Returns:
            Tuple of (success, message).
        """
        try:
            result = self.get_data("version")
        except PveError as e:
            logger.debug(f"Connection test failed: {e}")
            return False, str(e)

        version = result.get("version") if isinstance(result, dict) else None
        if not version:
            return False, "Connected but received unexpected response"
        return True, f"Connected to Proxmox VE {version}"

    def _send(self, method, endpoint, params=None):
        """Build and send one request; return the body text on 2xx.

        Raises:
            NotAuthenticatedError: the connection has no session (checked before any I/O).
            ApiRequestError: failure status with a readable body.
            TransportError: no response, or a failure status with an empty body.
        """
        conn = self.connection
        if not conn.is_authenticated:
            raise NotAuthenticatedError("Not authenticated. Log in before sending API requests.")

        url = f"{conn.api_base_url}/{endpoint}"
        # GET is exempt from CSRF protection on the server side
        csrf_token = None if method == "GET" else conn.csrf_token
        headers = session_headers(conn.ticket, csrf_token)
        form = params if method in ("POST", "PUT") else None

        response = send_request(method, url, headers=headers, form=form, verify=conn.verify_tls, transport=self.transport)
        if response.is_success:
            return response.text

        body = response.text
        if body:
            raise ApiRequestError(response.status_code, body)
        raise TransportError(f"{method} {url} failed with HTTP {response.status_code} {response.reason_phrase} and no response body")
