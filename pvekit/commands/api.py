"""'api' command: raw GET/POST/PUT/DELETE against any endpoint."""

import logging

from pvekit.commands import add_connection_args, api_session, parse_params

logger = logging.getLogger(__name__)


def handle_api(args):
    """CLI handler for 'api <method> <endpoint>'."""
    params = parse_params(args.param)
    endpoint = args.endpoint.lstrip("/")
    with api_session(args) as client:
        if args.method == "get":
            body = client.get(endpoint)
        elif args.method == "post":
            body = client.post(endpoint, params)
        elif args.method == "put":
            body = client.put(endpoint, params)
        else:
            body = client.delete(endpoint)
    logger.info(body)


def register_api_command(subparsers):
    """Register the 'api' command."""
    parser = subparsers.add_parser("api", help="Send a raw request and print the response body")
    parser.add_argument("method", choices=["get", "post", "put", "delete"], help="HTTP method")
    parser.add_argument("endpoint", help="Endpoint relative to /api2/json (e.g. nodes/pve1/qemu)")
    parser.add_argument(
        "-p",
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Form parameter for post/put (repeatable)",
    )
    add_connection_args(parser)
    parser.set_defaults(func=handle_api)
