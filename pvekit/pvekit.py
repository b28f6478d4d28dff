#!/usr/bin/env python3
"""Proxmox VE client tools: CLI entrypoint."""

import argparse
import logging
import sys

from pvekit.commands.api import register_api_command
from pvekit.commands.connect import register_connect_command
from pvekit.commands.template import register_template_command
from pvekit.commands.vm import register_vm_command
from pvekit.errors import PveError
from pvekit.logging_setup import setup_cli_logging

logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Proxmox VE client tools")
    parser.add_argument("--config", default=None, help="Config file (default: $PVEKIT_CONFIG or ~/.config/pvekit/config.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log request details")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_connect_command(subparsers)
    register_api_command(subparsers)
    register_vm_command(subparsers)
    register_template_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    try:
        args.func(args)
    except PveError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
