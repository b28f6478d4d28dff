"""Connection value: server coordinates plus the session ticket once logged in."""

import ipaddress
from dataclasses import dataclass, field, replace

DEFAULT_PORT = 8006
DEFAULT_REALM = "pam"


def _url_host(server):
    """*server* as it goes into a URL authority: IPv6 literals are bracketed."""
    try:
        address = ipaddress.ip_address(server)
    except ValueError:
        return server
    return f"[{server}]" if address.version == 6 else server


@dataclass(frozen=True)
class Connection:
    """Immutable description of a Proxmox VE endpoint and, after login, its session.

    A new value is produced on every login; nothing mutates an existing one.
    """

    server: str
    port: int = DEFAULT_PORT
    use_tls: bool = True
    skip_cert_validation: bool = False
    username: str | None = None
    realm: str = DEFAULT_REALM
    ticket: str | None = field(default=None, repr=False)
    csrf_token: str | None = field(default=None, repr=False)

    @property
    def scheme(self) -> str:
        return "https" if self.use_tls else "http"

    @property
    def api_base_url(self) -> str:
        """Root of the JSON API, e.g. https://pve1:8006/api2/json."""
        return f"{self.scheme}://{_url_host(self.server)}:{self.port}/api2/json"

    @property
    def is_authenticated(self) -> bool:
        return bool(self.ticket) and bool(self.csrf_token)

    @property
    def verify_tls(self) -> bool:
        """Whether server certificates are checked for requests on this connection."""
        return not (self.skip_cert_validation and self.use_tls)

    @property
    def user_id(self) -> str:
        """``user@realm`` as Proxmox displays it."""
        return f"{self.username}@{self.realm}"


def with_authentication(connection: Connection, ticket: str, csrf_token: str) -> Connection:
    """Return a copy of *connection* carrying the given session ticket and CSRF token."""
    return replace(connection, ticket=ticket, csrf_token=csrf_token)
