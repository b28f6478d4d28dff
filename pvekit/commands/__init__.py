"""Shared CLI plumbing: connection flags, session lifecycle, key=value params."""

import logging
from contextlib import contextmanager

from pvekit.client.api import ApiClient
from pvekit.config import load_config, resolve_connection_settings
from pvekit.errors import InvalidArgumentError
from pvekit.session.auth import login, logout

logger = logging.getLogger(__name__)


def add_connection_args(parser):
    """Add --server/--port/--username/... flags. Unset flags fall back to the config file."""
    group = parser.add_argument_group("connection")
    group.add_argument("--server", default=None, help="Proxmox VE host name or IP")
    group.add_argument("--port", type=int, default=None, help="API port (default: 8006)")
    group.add_argument("--username", default=None, help="User name without realm (e.g. root)")
    group.add_argument("--password", default=None, help="Password (fallback: PVE_PASSWORD env var)")
    group.add_argument("--realm", default=None, help="Authentication realm (default: pam)")
    group.add_argument("--no-tls", action="store_true", help="Use plain HTTP instead of HTTPS")
    group.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate validation (self-signed certificates; vulnerable to interception)",
    )


@contextmanager
def api_session(args):
    """Log in with the resolved settings, yield an ApiClient, always log out."""
    config = load_config(args.config)
    settings = resolve_connection_settings(args, config)
    connection = login(
        server=settings.server,
        port=settings.port,
        use_tls=settings.use_tls,
        skip_cert_validation=settings.skip_cert_validation,
        username=settings.username,
        password=settings.password,
        realm=settings.realm,
    )
    try:
        yield ApiClient(connection)
    finally:
        logout(connection)


def parse_params(pairs):
    """Turn ['key=value', ...] into a dict. Values may contain '='."""
    params = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidArgumentError(f"Expected key=value, got '{pair}'")
        params[key] = value
    return params
