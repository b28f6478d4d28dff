"""Session handling: connection values and the login/logout handshake."""

from pvekit.session.auth import login, logout
from pvekit.session.connection import Connection, with_authentication

__all__ = [
    "Connection",
    "with_authentication",
    "login",
    "logout",
]
