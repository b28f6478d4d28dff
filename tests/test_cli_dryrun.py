"""End-to-end CLI tests that need no Proxmox server (dry-run and local registry)."""

import pytest


@pytest.fixture
def cli(run_cli, tmp_path):
    """run_cli with an isolated config path and template directory."""
    env = {
        "PVEKIT_CONFIG": str(tmp_path / "absent.yaml"),
        "PVEKIT_TEMPLATE_DIR": str(tmp_path / "templates"),
        "PVE_PASSWORD": "",
    }

    def _run(*args):
        return run_cli(*args, env=env)

    return _run


# ── vm create --dry-run ──────────────────────────────────────────


def test_vm_create_dry_run(cli):
    rc, stdout, stderr = cli(
        "vm", "create",
        "--name", "test-vm",
        "--node", "pve1",
        "--vmid", "100",
        "--memory", "2048",
        "--cores", "2",
        "--disk", "32:local-lvm",
        "--net", "virtio:vmbr0",
        "--ip", "192.168.1.10/24",
        "--gw", "192.168.1.1",
        "--boot", "disk;net",
        "--vga", "std",
        "--dry-run",
    )
    assert rc == 0, f"stderr: {stderr}\nstdout: {stdout}"
    assert "[dry-run] POST nodes/pve1/qemu" in stdout
    assert "vmid=100" in stdout
    assert "scsi0=local-lvm:32,format=raw" in stdout
    assert "net0=virtio,bridge=vmbr0,ip=192.168.1.10/24,gw=192.168.1.1" in stdout
    assert "boot=disk;net" in stdout
    assert "cpu=host" in stdout


def test_vm_create_dry_run_without_vmid(cli):
    rc, stdout, stderr = cli("vm", "create", "--name", "vm", "--node", "pve1", "--dry-run")
    assert rc == 0, f"stderr: {stderr}\nstdout: {stdout}"
    assert "[dry-run] GET cluster/nextid" in stdout


def test_vm_create_invalid_memory(cli):
    rc, stdout, stderr = cli("vm", "create", "--name", "vm", "--node", "pve1", "--memory", "0", "--dry-run")
    assert rc == 1
    assert "Memory must be a positive integer" in stdout


def test_vm_create_bad_disk_format(cli):
    rc, stdout, stderr = cli("vm", "create", "--name", "vm", "--node", "pve1", "--disk", "local-lvm", "--dry-run")
    assert rc == 1
    assert "SIZE_GB:STORAGE" in stdout


# ── template registry ────────────────────────────────────────────


def test_template_lifecycle(cli, tmp_path):
    rc, stdout, stderr = cli(
        "template", "create", "small-linux",
        "--memory", "1024",
        "--disk", "16:local-lvm",
        "--net", "virtio:vmbr0",
        "--description", "Small Linux guest",
        "--tags", "linux,small",
    )
    assert rc == 0, f"stderr: {stderr}\nstdout: {stdout}"
    assert (tmp_path / "templates" / "small-linux.yaml").exists()

    rc, stdout, _ = cli("template", "list")
    assert rc == 0
    assert "small-linux" in stdout
    assert "Small Linux guest" in stdout

    rc, stdout, _ = cli("template", "show", "small-linux")
    assert rc == 0
    assert "memory=1024" in stdout
    assert "scsi0=local-lvm:16,format=raw" in stdout

    rc, stdout, _ = cli("template", "create", "small-linux", "--memory", "2048")
    assert rc == 1
    assert "already exists" in stdout

    rc, _, _ = cli("template", "update", "small-linux", "--memory", "2048")
    assert rc == 0
    rc, stdout, _ = cli("template", "show", "small-linux")
    assert "memory=2048" in stdout

    rc, stdout, _ = cli(
        "vm", "create", "--template", "small-linux", "--name", "app-01", "--node", "pve1", "--vmid", "150", "--dry-run"
    )
    assert rc == 0, stdout
    assert "template 'small-linux'" in stdout
    assert "name=app-01" in stdout
    assert "vmid=150" in stdout

    rc, _, _ = cli("template", "delete", "small-linux")
    assert rc == 0
    assert not (tmp_path / "templates" / "small-linux.yaml").exists()

    rc, stdout, _ = cli("template", "delete", "small-linux")
    assert rc == 1
    assert "not found" in stdout


def test_template_list_empty(cli):
    rc, stdout, _ = cli("template", "list")
    assert rc == 0
    assert "No templates" in stdout


def test_vm_create_unknown_template(cli):
    rc, stdout, _ = cli("vm", "create", "--template", "nope", "--name", "vm", "--node", "pve1", "--dry-run")
    assert rc == 1
    assert "not found" in stdout


def test_template_invalid_name(cli):
    rc, stdout, _ = cli("template", "create", "../escape")
    assert rc == 1
    assert "Invalid template name" in stdout


# ── connection errors ────────────────────────────────────────────


def test_connect_requires_server(cli):
    rc, stdout, _ = cli("connect", "--username", "root", "--password", "pw")
    assert rc == 1
    assert "missing server" in stdout


def test_connect_requires_password(cli):
    rc, stdout, _ = cli("connect", "--server", "pve1", "--username", "root")
    assert rc == 1
    assert "password required" in stdout


def test_api_refused_connection(cli):
    rc, stdout, _ = cli(
        "api", "get", "version",
        "--server", "127.0.0.1", "--port", "1", "--no-tls",
        "--username", "root", "--password", "secret-password-1",
    )
    assert rc == 1
    assert "Error:" in stdout
    assert "secret-password-1" not in stdout


def test_api_bad_param(cli):
    rc, stdout, _ = cli(
        "api", "post", "nodes/pve1/qemu", "-p", "novalue",
        "--server", "127.0.0.1", "--username", "root", "--password", "pw",
    )
    assert rc == 1
    assert "Expected key=value" in stdout
