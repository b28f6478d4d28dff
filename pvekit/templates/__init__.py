"""Local registry of reusable VM parameter sets."""

from pvekit.templates.registry import TemplateStore
from pvekit.templates.types import StoreResult, StoreStatus, VMTemplate

__all__ = [
    "StoreResult",
    "StoreStatus",
    "TemplateStore",
    "VMTemplate",
]
