"""Fluent builder for the parameter set POSTed to nodes/{node}/qemu."""

from pvekit.errors import InvalidArgumentError

DEFAULT_MEMORY_MB = 512
DEFAULT_CORES = 1
DEFAULT_CPU_TYPE = "host"
DEFAULT_OS_TYPE = "l26"  # Linux 2.6+ kernel


def _require_text(value, what):
    if not isinstance(value, str) or not value:
        raise InvalidArgumentError(f"{what} must be a non-empty string")
    return value


def _require_positive(value, what):
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(f"{what} must be a positive integer, got {value!r}")
    return value


class VMBuilder:
    """Accumulates VM creation parameters.

    Setters validate immediately and return the builder, so calls chain::

        params = (
            VMBuilder("web-01")
            .with_memory(4096)
            .with_cores(2)
            .with_disk(32, "local-lvm")
            .with_network("virtio", "vmbr0")
            .with_ip_config("192.168.1.10/24", "192.168.1.1")
            .build()
        )

    Disks and NICs take the next free ``scsiN`` / ``netN`` slot in call order.
    ``with_ip_config`` has no slot argument: it extends whichever NIC was
    added last, so it must directly follow the ``with_network`` it belongs to.
    """

    def __init__(self, name):
        self.name = _require_text(name, "Name")
        self.vmid: int | None = None
        self.node: str | None = None
        self.memory = DEFAULT_MEMORY_MB
        self.cores = DEFAULT_CORES
        self.cpu_type = DEFAULT_CPU_TYPE
        self.os_type = DEFAULT_OS_TYPE
        self.description: str | None = None
        self.tags: str | None = None
        self.start = False
        self._disks: list[str] = []
        self._networks: list[str] = []
        self._extra: dict[str, str] = {}

    def with_vmid(self, vmid):
        self.vmid = _require_positive(vmid, "VMID")
        return self

    def with_node(self, node):
        """Target node. Used to build the endpoint, not sent as a parameter."""
        self.node = _require_text(node, "Node")
        return self

    def with_memory(self, memory_mb):
        self.memory = _require_positive(memory_mb, "Memory")
        return self

    def with_cores(self, cores):
        self.cores = _require_positive(cores, "Cores")
        return self

    def with_cpu_type(self, cpu_type):
        self.cpu_type = _require_text(cpu_type, "CPU type")
        return self

    def with_os_type(self, os_type):
        self.os_type = _require_text(os_type, "OS type")
        return self

    def with_description(self, description):
        self.description = description
        return self

    def with_tags(self, *tags):
        self.tags = ",".join(tags)
        return self

    def with_start(self, start=True):
        """Start the VM once it has been created."""
        self.start = bool(start)
        return self

    def with_disk(self, size_gb, storage, fmt="raw"):
        _require_positive(size_gb, "Disk size")
        _require_text(storage, "Storage")
        self._disks.append(f"{storage}:{size_gb},format={fmt}")
        return self

    def with_network(self, model="virtio", bridge="vmbr0", vlan=None, mac_address=None):
        _require_text(model, "Network model")
        _require_text(bridge, "Bridge")
        config = f"{model},bridge={bridge}"
        if vlan is not None:
            config += f",tag={_require_positive(vlan, 'VLAN tag')}"
        if mac_address:
            config += f",macaddr={mac_address}"
        self._networks.append(config)
        return self

    def with_ip_config(self, ip_address, gateway):
        """Append a static IP and gateway to the most recently added NIC."""
        _require_text(ip_address, "IP address")
        _require_text(gateway, "Gateway")
        if not self._networks:
            raise InvalidArgumentError("with_ip_config requires a preceding with_network call")
        self._networks[-1] += f",ip={ip_address},gw={gateway}"
        return self

    def with_boot_order(self, *devices):
        if not devices:
            raise InvalidArgumentError("At least one boot device must be specified")
        for device in devices:
            _require_text(device, "Boot device")
        self._extra["boot"] = ";".join(devices)
        return self

    def with_vga(self, vga_type):
        self._extra["vga"] = _require_text(vga_type, "VGA type")
        return self

    def with_parameter(self, name, value):
        """Set an arbitrary qemu create parameter verbatim."""
        self._extra[_require_text(name, "Parameter name")] = str(value)
        return self

    def build(self) -> dict[str, str]:
        """Return a fresh snapshot of the parameter set; builder state is kept."""
        params = dict(self._extra)
        params["name"] = self.name
        if self.vmid is not None:
            params["vmid"] = str(self.vmid)
        params["memory"] = str(self.memory)
        params["cores"] = str(self.cores)
        params["cpu"] = self.cpu_type
        params["ostype"] = self.os_type
        if self.description:
            params["description"] = self.description
        if self.tags:
            params["tags"] = self.tags
        for i, disk in enumerate(self._disks):
            params[f"scsi{i}"] = disk
        for i, nic in enumerate(self._networks):
            params[f"net{i}"] = nic
        return params
