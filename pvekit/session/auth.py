"""Login/logout handshake against the /access/ticket endpoint.

The password is sent once, in the form body of the login POST, and is not
kept anywhere after ``login`` returns. The issued ticket and CSRF token are
registered with the redaction filter for the life of the session and dropped
again on logout.
"""

import json
import logging

from pvekit.client.transport import send_request, session_headers
from pvekit.errors import AuthenticationError
from pvekit.redact import register_secret, unregister_secret
from pvekit.session.connection import DEFAULT_PORT, DEFAULT_REALM, Connection, with_authentication

logger = logging.getLogger(__name__)

TICKET_ENDPOINT = "access/ticket"


def _parse_ticket(body):
    """Extract (ticket, csrf_token) from a login response envelope.

    Raises:
        AuthenticationError: body is not JSON, has no data object, or lacks either field.
    """
    try:
        envelope = json.loads(body)
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Invalid response from server: body is not JSON", detail=body or "") from e

    data = envelope.get("data") if isinstance(envelope, dict) else None
    if not isinstance(data, dict):
        raise AuthenticationError("Invalid response from server: missing ticket data", detail=body)

    ticket = data.get("ticket")
    csrf_token = data.get("CSRFPreventionToken")
    if not ticket or not csrf_token:
        missing = [name for name, value in (("ticket", ticket), ("CSRFPreventionToken", csrf_token)) if not value]
        raise AuthenticationError(f"Invalid response from server: missing {', '.join(missing)}", detail=body)
    return ticket, csrf_token


def login(
    server,
    port=DEFAULT_PORT,
    use_tls=True,
    skip_cert_validation=False,
    username=None,
    password=None,
    realm=DEFAULT_REALM,
    transport=None,
) -> Connection:
    """Authenticate against Proxmox VE and return an authenticated Connection.

    POST {api_base_url}/access/ticket with form fields username, password, realm.

    Raises:
        AuthenticationError: non-2xx status, or a malformed/empty success body.
        TransportError: no HTTP response was obtained.
    """
    connection = Connection(
        server=server,
        port=port,
        use_tls=use_tls,
        skip_cert_validation=skip_cert_validation,
        username=username,
        realm=realm,
    )
    url = f"{connection.api_base_url}/{TICKET_ENDPOINT}"
    logger.debug(f"Authenticating {connection.user_id} at {url}")
    if not connection.verify_tls:
        logger.debug("Certificate validation disabled for this connection")

    form = {"username": username or "", "password": password or "", "realm": realm}
    response = send_request("POST", url, form=form, verify=connection.verify_tls, transport=transport)

    if not response.is_success:
        detail = response.text
        raise AuthenticationError(
            f"Authentication failed ({response.status_code}): {detail or response.reason_phrase}",
            detail=detail,
            status_code=response.status_code,
        )

    ticket, csrf_token = _parse_ticket(response.text)
    register_secret(ticket)
    register_secret(csrf_token)
    logger.debug(f"Authenticated as {connection.user_id}")
    return with_authentication(connection, ticket, csrf_token)


def logout(connection, transport=None) -> None:
    """Ask the server to invalidate the connection's ticket.

    Best effort: no-op for unauthenticated connections, and every failure is
    swallowed. The connection value itself is left untouched; its ticket and
    CSRF token are removed from the redaction set whatever the outcome.
    """
    if connection is None or not connection.is_authenticated:
        return

    url = f"{connection.api_base_url}/{TICKET_ENDPOINT}"
    logger.debug(f"Logging out from {url}")
    try:
        send_request(
            "DELETE",
            url,
            headers=session_headers(connection.ticket, connection.csrf_token),
            verify=connection.verify_tls,
            transport=transport,
        )
    except Exception as e:
        logger.debug(f"Ignoring logout failure: {e}")
    finally:
        unregister_secret(connection.ticket)
        unregister_secret(connection.csrf_token)
