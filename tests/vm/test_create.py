"""Unit tests for VM creation helpers."""

from unittest.mock import MagicMock
from urllib.parse import parse_qs

import httpx
import pytest

from pvekit.client.api import ApiClient
from pvekit.errors import InvalidArgumentError, PveError
from pvekit.templates.types import VMTemplate
from pvekit.vm.builder import VMBuilder
from pvekit.vm.create import create_vm, create_vm_from_template, next_vmid

BASE = "https://pve1.example.com:8006/api2/json"


def _routed_client(connection, routes):
    """ApiClient whose transport answers from {(method, path): json_body}."""
    requests = []

    def handler(request):
        request.read()
        requests.append(request)
        path = request.url.path.removeprefix("/api2/json/")
        return httpx.Response(200, json=routes.get((request.method, path), {"data": None}))

    return ApiClient(connection, transport=httpx.MockTransport(handler)), requests


def _form(request):
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


def test_next_vmid(authed_connection):
    client, _ = _routed_client(authed_connection, {("GET", "cluster/nextid"): {"data": "105"}})

    assert next_vmid(client) == 105


def test_next_vmid_unexpected_response():
    client = MagicMock()
    client.get_data.return_value = None

    with pytest.raises(PveError):
        next_vmid(client)


def test_create_vm_allocates_vmid(authed_connection):
    client, requests = _routed_client(
        authed_connection,
        {
            ("GET", "cluster/nextid"): {"data": "105"},
            ("POST", "nodes/pve1/qemu"): {"data": "UPID:pve1:00001234:qmcreate:105:root@pam:"},
        },
    )
    builder = VMBuilder("web-01").with_memory(2048).with_disk(32, "local-lvm")

    vmid = create_vm(client, builder, node="pve1")

    assert vmid == 105
    assert [(r.method, str(r.url)) for r in requests] == [
        ("GET", f"{BASE}/cluster/nextid"),
        ("POST", f"{BASE}/nodes/pve1/qemu"),
    ]
    form = _form(requests[1])
    assert form["vmid"] == "105"
    assert form["name"] == "web-01"
    assert form["scsi0"] == "local-lvm:32,format=raw"


def test_create_vm_uses_builder_node_and_vmid(authed_connection):
    client, requests = _routed_client(authed_connection, {})
    builder = VMBuilder("db-01").with_vmid(200).with_node("pve2")

    vmid = create_vm(client, builder, node="pve1")

    assert vmid == 200
    assert len(requests) == 1
    assert str(requests[0].url) == f"{BASE}/nodes/pve2/qemu"


def test_create_vm_starts_when_requested(authed_connection):
    client, requests = _routed_client(authed_connection, {})
    builder = VMBuilder("vm").with_vmid(300).with_node("pve1").with_start()

    create_vm(client, builder)

    assert [str(r.url) for r in requests] == [
        f"{BASE}/nodes/pve1/qemu",
        f"{BASE}/nodes/pve1/qemu/300/status/start",
    ]
    assert requests[1].content == b""


def test_create_vm_requires_node():
    with pytest.raises(InvalidArgumentError):
        create_vm(MagicMock(), VMBuilder("vm"))


def test_create_vm_dry_run_sends_nothing(caplog):
    client = MagicMock()
    builder = VMBuilder("vm").with_node("pve1").with_memory(1024)

    with caplog.at_level("INFO"):
        vmid = create_vm(client, builder, dry_run=True)

    assert vmid == 0
    assert client.method_calls == []
    assert "[dry-run] POST nodes/pve1/qemu" in caplog.text
    assert "memory=1024" in caplog.text


def test_create_vm_from_template(authed_connection):
    client, requests = _routed_client(authed_connection, {("GET", "cluster/nextid"): {"data": 110}})
    template = VMTemplate(
        name="small-linux",
        parameters={"name": "old", "vmid": "99", "memory": "1024", "cores": "1", "net0": "virtio,bridge=vmbr0"},
    )

    vmid = create_vm_from_template(client, template, "pve1", "app-01", start=True)

    assert vmid == 110
    assert [str(r.url) for r in requests] == [
        f"{BASE}/cluster/nextid",
        f"{BASE}/nodes/pve1/qemu",
        f"{BASE}/nodes/pve1/qemu/110/status/start",
    ]
    form = _form(requests[1])
    assert form["name"] == "app-01"
    assert form["vmid"] == "110"
    assert form["memory"] == "1024"
    assert template.parameters["name"] == "old"


def test_create_vm_from_template_explicit_vmid(authed_connection):
    client, requests = _routed_client(authed_connection, {})
    template = VMTemplate(name="t", parameters={"memory": "512"})

    assert create_vm_from_template(client, template, "pve1", "app-02", vmid=120) == 120
    assert len(requests) == 1
    assert _form(requests[0])["vmid"] == "120"


@pytest.mark.parametrize("node, name", [("", "vm"), ("pve1", "")])
def test_create_vm_from_template_validates(node, name):
    with pytest.raises(InvalidArgumentError):
        create_vm_from_template(MagicMock(), VMTemplate(name="t"), node, name)
