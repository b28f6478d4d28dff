"""Shared pytest fixtures for all test modules."""

import os
import subprocess
import sys

import httpx
import pytest

import pvekit.redact as redact_module
from pvekit.session.connection import Connection, with_authentication

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))

TICKET = "PVE:root@pam:65F0A1B2::c2lnbmF0dXJlLWJ5dGVz"
CSRF_TOKEN = "65F0A1B2:Yk9kZXhhbXBsZXRva2Vu"


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the pvekit CLI as a subprocess."""

    def _run(*args, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "pvekit.pvekit", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env={**os.environ, **(env or {})},
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture(autouse=True)
def _reset_redaction():
    """Runtime-registered secrets are process-global; isolate each test."""
    redact_module._registered.clear()
    redact_module._patterns = None
    yield
    redact_module._registered.clear()
    redact_module._patterns = None


# ── Unit-test fixtures ──────────────────────────────────────────────


@pytest.fixture
def connection():
    """An unauthenticated connection to a TLS endpoint."""
    return Connection(server="pve1.example.com", username="root")


@pytest.fixture
def authed_connection(connection):
    """The same connection after a successful login."""
    return with_authentication(connection, TICKET, CSRF_TOKEN)


@pytest.fixture
def make_transport():
    """Return a factory for an httpx.MockTransport that records every request.

    The factory returns (transport, requests). Pass ``exc`` to simulate a
    transport failure, ``json_body`` or ``body`` for the response payload.
    """

    def _make(status_code=200, body="", json_body=None, exc=None):
        requests = []

        def handler(request):
            request.read()
            requests.append(request)
            if exc is not None:
                raise exc
            if json_body is not None:
                return httpx.Response(status_code, json=json_body)
            return httpx.Response(status_code, text=body)

        return httpx.MockTransport(handler), requests

    return _make
