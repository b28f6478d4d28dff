"""VM creation on a node, from a builder or from a stored template."""

import logging

from pvekit.errors import InvalidArgumentError, PveError

logger = logging.getLogger(__name__)


def next_vmid(client) -> int:
    """Ask the cluster for the next free VMID (GET cluster/nextid)."""
    value = client.get_data("cluster/nextid")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise PveError(f"Unexpected cluster/nextid response: {value!r}") from e


def start_vm(client, node, vmid):
    """POST nodes/{node}/qemu/{vmid}/status/start. Returns the raw body (task UPID envelope)."""
    logger.info(f"Starting VM {vmid} on {node}")
    return client.post(f"nodes/{node}/qemu/{vmid}/status/start")


def create_vm(client, builder, node=None, dry_run=False) -> int:
    """Create a VM from *builder* and return its VMID.

    The node comes from the builder, else from *node*. When the builder has no
    VMID, one is allocated via cluster/nextid (and recorded on the builder).
    In dry-run mode nothing is sent and the parameters are logged instead.
    """
    target = builder.node or node
    if not target:
        raise InvalidArgumentError("A node is required to create a VM")
    if builder.node is None:
        builder.with_node(target)

    if builder.vmid is None:
        if dry_run:
            logger.info("[dry-run] GET cluster/nextid")
        else:
            builder.with_vmid(next_vmid(client))

    params = builder.build()
    if dry_run:
        logger.info(f"[dry-run] POST nodes/{target}/qemu")
        for key, value in params.items():
            logger.info(f"[dry-run]   {key}={value}")
        if builder.start:
            logger.info(f"[dry-run] POST nodes/{target}/qemu/<vmid>/status/start")
        return builder.vmid or 0

    logger.info(f"Creating VM {builder.name} ({builder.vmid}) on {target}")
    client.post(f"nodes/{target}/qemu", params)
    if builder.start:
        start_vm(client, target, builder.vmid)
    return builder.vmid


def create_vm_from_template(client, template, node, name, vmid=None, start=False, dry_run=False) -> int:
    """Create a VM on *node* from a stored template's parameter set.

    ``name`` and ``vmid`` override whatever the template recorded.
    """
    if not node:
        raise InvalidArgumentError("A node is required to create a VM")
    if not name:
        raise InvalidArgumentError("Name must be a non-empty string")

    params = dict(template.parameters)
    params["name"] = name
    params.pop("vmid", None)

    if vmid is None and not dry_run:
        vmid = next_vmid(client)
    if vmid is not None:
        params["vmid"] = str(vmid)

    if dry_run:
        logger.info(f"[dry-run] POST nodes/{node}/qemu (template '{template.name}')")
        for key, value in params.items():
            logger.info(f"[dry-run]   {key}={value}")
        return vmid or 0

    logger.info(f"Creating VM {name} ({vmid}) on {node} from template '{template.name}'")
    client.post(f"nodes/{node}/qemu", params)
    if start:
        start_vm(client, node, vmid)
    return vmid
