"""'connect' command: log in, query the API version, log out."""

import logging
import sys

from pvekit.commands import add_connection_args, api_session

logger = logging.getLogger(__name__)


def handle_connect(args):
    """CLI handler for 'connect'."""
    with api_session(args) as client:
        ok, message = client.test_connection()
        conn = client.connection
    if not ok:
        logger.error(f"Error: {message}")
        sys.exit(1)
    logger.info(message)
    logger.info(f"  Server:   {conn.server}:{conn.port} ({conn.scheme})")
    logger.info(f"  User:     {conn.user_id}")
    if conn.skip_cert_validation:
        logger.info("  WARNING: certificate validation disabled")


def register_connect_command(subparsers):
    """Register the 'connect' command."""
    parser = subparsers.add_parser("connect", help="Test login against a Proxmox VE server")
    add_connection_args(parser)
    parser.set_defaults(func=handle_connect)
