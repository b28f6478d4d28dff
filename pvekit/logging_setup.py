"""CLI logging setup: simple %(message)s format with secret redaction."""

import logging
import sys

from pvekit.redact import SecretRedactingFilter


def setup_cli_logging(verbose=False):
    """Configure root logger with plain message format for CLI commands.

    Produces output identical to print(). With ``verbose`` the level drops to
    DEBUG so request URLs and methods are shown.
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.INFO)
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    # Filter on the handler so records from child loggers are redacted too
    handler.addFilter(SecretRedactingFilter())
    root.addHandler(handler)
    # httpx logs every request line at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
