"""HTTP transport: one short-lived httpx client per request."""

import logging

import httpx

from pvekit.errors import TransportError

logger = logging.getLogger(__name__)


def send_request(method, url, headers=None, form=None, verify=True, transport=None):
    """Send a single request and return the ``httpx.Response``.

    *form* is form-urlencoded into the body only when it is non-empty;
    otherwise the request has no body and no Content-Type header.
    *verify* applies to this request only. *transport* is an optional
    ``httpx.BaseTransport`` (tests pass an ``httpx.MockTransport``).

    Failure statuses are returned to the caller, not raised.

    Raises:
        TransportError: no HTTP response was obtained, or *url* is malformed.
    """
    logger.debug(f"{method} {url}")
    try:
        with httpx.Client(verify=verify, transport=transport) as client:
            return client.request(method, url, headers=headers, data=form or None)
    except (httpx.RequestError, httpx.InvalidURL) as e:
        raise TransportError(f"{method} {url} failed: {e}") from e


def session_headers(ticket, csrf_token=None):
    """Cookie header for a session ticket, plus the CSRF header when a token is given."""
    headers = {"Cookie": f"PVEAuthCookie={ticket}"}
    if csrf_token is not None:
        headers["CSRFPreventionToken"] = csrf_token
    return headers
