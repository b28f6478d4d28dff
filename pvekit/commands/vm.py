"""'vm create' command: build a parameter set and POST it to a node."""

import logging
import sys

from pvekit.commands import add_connection_args, api_session, parse_params
from pvekit.config import load_config, template_dir
from pvekit.errors import InvalidArgumentError
from pvekit.templates.registry import TemplateStore
from pvekit.vm.builder import VMBuilder
from pvekit.vm.create import create_vm, create_vm_from_template

logger = logging.getLogger(__name__)


def _split_pair(value, what):
    left, sep, right = value.partition(":")
    if not sep or not left or not right:
        raise InvalidArgumentError(f"Expected {what}, got '{value}'")
    return left, right


def add_builder_args(parser):
    """Flags mapped onto VMBuilder setters."""
    parser.add_argument("--vmid", type=int, default=None, help="VM ID (default: next free ID)")
    parser.add_argument("--memory", type=int, default=None, help="Memory in MB (default: 512)")
    parser.add_argument("--cores", type=int, default=None, help="CPU cores (default: 1)")
    parser.add_argument("--cpu", default=None, help="CPU type (default: host)")
    parser.add_argument("--ostype", default=None, help="OS type (default: l26)")
    parser.add_argument("--disk", action="append", default=[], metavar="SIZE_GB:STORAGE", help="Add a disk (repeatable)")
    parser.add_argument("--net", action="append", default=[], metavar="MODEL:BRIDGE", help="Add a NIC (repeatable)")
    parser.add_argument("--ip", default=None, help="Static IP in CIDR notation for the last --net")
    parser.add_argument("--gw", default=None, help="Gateway for the last --net")
    parser.add_argument("--boot", default=None, help="Boot order, ';'-separated (e.g. 'scsi0;net0')")
    parser.add_argument("--vga", default=None, help="VGA type (e.g. std, qxl, serial0)")
    parser.add_argument("--description", default=None, help="VM description")
    parser.add_argument("--tags", default=None, help="Comma-separated tags")
    parser.add_argument("--set", action="append", default=[], metavar="KEY=VALUE", help="Extra qemu parameter (repeatable)")


def builder_from_args(name, args):
    """Apply builder flags in a fixed order; --ip/--gw attach to the last --net."""
    builder = VMBuilder(name)
    if args.vmid is not None:
        builder.with_vmid(args.vmid)
    if args.memory is not None:
        builder.with_memory(args.memory)
    if args.cores is not None:
        builder.with_cores(args.cores)
    if args.cpu:
        builder.with_cpu_type(args.cpu)
    if args.ostype:
        builder.with_os_type(args.ostype)
    for disk in args.disk:
        size, storage = _split_pair(disk, "SIZE_GB:STORAGE")
        try:
            size_gb = int(size)
        except ValueError:
            raise InvalidArgumentError(f"Disk size must be an integer, got '{size}'") from None
        builder.with_disk(size_gb, storage)
    for net in args.net:
        model, bridge = _split_pair(net, "MODEL:BRIDGE")
        builder.with_network(model, bridge)
    if args.ip or args.gw:
        if not (args.ip and args.gw):
            raise InvalidArgumentError("--ip and --gw must be given together")
        builder.with_ip_config(args.ip, args.gw)
    if args.boot:
        builder.with_boot_order(*args.boot.split(";"))
    if args.vga:
        builder.with_vga(args.vga)
    if args.description:
        builder.with_description(args.description)
    if args.tags:
        builder.with_tags(*[t.strip() for t in args.tags.split(",") if t.strip()])
    for key, value in parse_params(args.set).items():
        builder.with_parameter(key, value)
    return builder


def handle_create(args):
    """CLI handler for 'vm create'."""
    if args.template:
        store = TemplateStore(template_dir(load_config(args.config), args.template_dir))
        result = store.get(args.template)
        if not result.ok:
            logger.error(f"Error: template '{args.template}' not found in {store.directory}")
            sys.exit(1)
        if args.dry_run:
            create_vm_from_template(None, result.template, args.node, args.name, args.vmid, args.start, dry_run=True)
            return
        with api_session(args) as client:
            vmid = create_vm_from_template(client, result.template, args.node, args.name, args.vmid, args.start)
    else:
        builder = builder_from_args(args.name, args).with_node(args.node).with_start(args.start)
        if args.dry_run:
            create_vm(None, builder, dry_run=True)
            return
        with api_session(args) as client:
            vmid = create_vm(client, builder)
    logger.info(f"VM {args.name} created with VMID {vmid} on {args.node}")


def register_vm_command(subparsers):
    """Register the 'vm' command with its 'create' action."""
    vm_parser = subparsers.add_parser("vm", help="Manage virtual machines")
    action_subparsers = vm_parser.add_subparsers(dest="action", required=True)

    parser = action_subparsers.add_parser("create", help="Create a VM")
    parser.add_argument("--name", required=True, help="VM name")
    parser.add_argument("--node", required=True, help="Target node")
    parser.add_argument("--template", default=None, help="Create from a stored template instead of builder flags")
    parser.add_argument("--template-dir", default=None, help="Template directory override")
    parser.add_argument("--start", action="store_true", help="Start the VM after creation")
    parser.add_argument("--dry-run", action="store_true", help="Print requests without executing")
    add_builder_args(parser)
    add_connection_args(parser)
    parser.set_defaults(func=handle_create)
