"""Error taxonomy shared by the session, client, builder and template layers."""


class PveError(Exception):
    """Base class for every error raised by pvekit."""


class InvalidArgumentError(PveError, ValueError):
    """Bad caller input, detected synchronously at the call site."""


class NotAuthenticatedError(PveError):
    """An API call was attempted on a connection that has not logged in."""


class AuthenticationError(PveError):
    """Login was rejected by the server or its response was malformed.

    ``detail`` holds the remote error body (possibly empty) and
    ``status_code`` the HTTP status when a response was received.
    """

    def __init__(self, message: str, detail: str = "", status_code: int | None = None):
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code


class TransportError(PveError):
    """No usable HTTP response was obtained (DNS, refused connection, TLS failure)."""


class ApiRequestError(PveError):
    """The server answered with a failure status. ``body`` is the remote payload verbatim."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"API request failed ({status_code}): {body}")
        self.status_code = status_code
        self.body = body
