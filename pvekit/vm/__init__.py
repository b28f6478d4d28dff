"""VM parameter building and creation."""

from pvekit.vm.builder import VMBuilder
from pvekit.vm.create import create_vm, create_vm_from_template, next_vmid, start_vm

__all__ = [
    "VMBuilder",
    "create_vm",
    "create_vm_from_template",
    "next_vmid",
    "start_vm",
]
