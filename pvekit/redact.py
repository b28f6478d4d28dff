"""Secret redaction for log output: passwords, session tickets, CSRF tokens."""

import logging
import os
import re
import threading

# Env vars whose values should be redacted from all output
_SECRET_ENV_VARS = [
    "PVE_PASSWORD",
    "PVE_TICKET",
    "PVE_CSRF_TOKEN",
]

_MIN_SECRET_LENGTH = 8  # skip short values to avoid false positives

# Values handed over at runtime (issued session tickets and CSRF tokens),
# present only while their session is live
_registered: set[str] = set()

# Guards _registered and _patterns
_lock = threading.Lock()


def _collect_secret_values() -> set[str]:
    values = set()
    for var in _SECRET_ENV_VARS:
        val = os.environ.get(var, "")
        if len(val) >= _MIN_SECRET_LENGTH:
            values.add(val)
    return values | _registered


def _build_patterns(values: set[str]) -> list[re.Pattern]:
    # Sort by length descending so longer values match first
    return [re.compile(re.escape(v)) for v in sorted(values, key=len, reverse=True)]


# Lazy-initialized module cache
_patterns: list[re.Pattern] | None = None


def _get_patterns() -> list[re.Pattern]:
    global _patterns
    with _lock:
        if _patterns is None:
            _patterns = _build_patterns(_collect_secret_values())
        return _patterns


def register_secret(value: str | None) -> None:
    """Add a runtime secret to the redaction set.

    Values shorter than the minimum length are ignored, like env var secrets.
    """
    global _patterns
    if not value or len(value) < _MIN_SECRET_LENGTH:
        return
    with _lock:
        if value in _registered:
            return
        _registered.add(value)
        _patterns = None


def unregister_secret(value: str | None) -> None:
    """Drop a runtime secret once it is no longer valid (e.g. after logout)."""
    global _patterns
    with _lock:
        if value not in _registered:
            return
        _registered.discard(value)
        _patterns = None


def redact_secrets(text: str) -> str:
    """Replace known secret values with '***'."""
    return _apply(text, _get_patterns())


def _apply(text: str, patterns: list[re.Pattern]) -> str:
    for p in patterns:
        text = p.sub("***", text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Logging filter that replaces secret values in log records with '***'.

    Attached to the CLI output handler by setup_cli_logging().
    Handles both f-string messages (msg is pre-formatted) and
    %-style messages (msg + args).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        patterns = _get_patterns()
        if patterns:
            record.msg = _apply(str(record.msg), patterns)
            if record.args:
                if isinstance(record.args, dict):
                    record.args = {k: _apply(v, patterns) if isinstance(v, str) else v for k, v in record.args.items()}
                elif isinstance(record.args, tuple):
                    record.args = tuple(_apply(a, patterns) if isinstance(a, str) else a for a in record.args)
        return True
