"""Configuration loading: YAML config file, env vars and CLI flags."""

import logging
import os
import sys
from dataclasses import dataclass

import yaml

from pvekit.errors import InvalidArgumentError
from pvekit.session.connection import DEFAULT_PORT, DEFAULT_REALM

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.config/pvekit/config.yaml"
DEFAULT_TEMPLATE_DIR = "~/.config/pvekit/templates"


@dataclass
class ConnectionSettings:
    """Everything login() needs. The password is kept only until login."""

    server: str
    username: str
    password: str
    port: int = DEFAULT_PORT
    realm: str = DEFAULT_REALM
    use_tls: bool = True
    skip_cert_validation: bool = False

    def __repr__(self):
        return (
            f"ConnectionSettings(server={self.server!r}, port={self.port}, username={self.username!r}, "
            f"realm={self.realm!r}, use_tls={self.use_tls}, skip_cert_validation={self.skip_cert_validation})"
        )


def _expand_path(path: str) -> str:
    """Expand user home directory and environment variables in path."""
    return os.path.expanduser(os.path.expandvars(path))


def default_config_path() -> str:
    return _expand_path(os.environ.get("PVEKIT_CONFIG", DEFAULT_CONFIG_PATH))


def load_config(config_path: str | None = None) -> dict:
    """Load configuration from a YAML file.

    A missing file yields an empty config.

    Raises:
        InvalidArgumentError: the file is not valid YAML or not a mapping.
    """
    path = _expand_path(config_path) if config_path else default_config_path()
    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        logger.debug(f"No config file at {path}")
        return {}
    except yaml.YAMLError as e:
        raise InvalidArgumentError(f"Error parsing YAML config {path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise InvalidArgumentError(f"Config file {path} must contain a mapping")
    return config


def template_dir(config: dict, override: str | None = None) -> str:
    """Template directory: CLI flag > PVEKIT_TEMPLATE_DIR > config file > default."""
    path = (
        override
        or os.environ.get("PVEKIT_TEMPLATE_DIR")
        or (config.get("templates") or {}).get("dir")
        or DEFAULT_TEMPLATE_DIR
    )
    return _expand_path(path)


def _pick(flag, section, key, default=None):
    if flag is not None:
        return flag
    value = section.get(key)
    return default if value is None else value


def resolve_connection_settings(args, config: dict) -> ConnectionSettings:
    """Merge CLI flags over the config file's ``connection`` section.

    The password comes from --password or the PVE_PASSWORD env var; it is not
    read from the config file. Exits with status 1 when server, username or
    password is missing.
    """
    section = config.get("connection") or {}

    server = _pick(args.server, section, "server")
    username = _pick(args.username, section, "username")
    password = args.password or os.environ.get("PVE_PASSWORD")

    missing = [name for name, value in (("server", server), ("username", username)) if not value]
    if missing:
        logger.error(f"Error: missing {', '.join(missing)}. Use --server/--username or the config file.")
        sys.exit(1)
    if not password:
        logger.error("Error: password required. Use --password or set PVE_PASSWORD.")
        sys.exit(1)

    insecure = True if args.insecure else None
    no_tls = False if args.no_tls else None
    return ConnectionSettings(
        server=server,
        username=username,
        password=password,
        port=int(_pick(args.port, section, "port", DEFAULT_PORT)),
        realm=_pick(args.realm, section, "realm", DEFAULT_REALM),
        use_tls=bool(_pick(no_tls, section, "use_tls", True)),
        skip_cert_validation=bool(_pick(insecure, section, "skip_cert_validation", False)),
    )
