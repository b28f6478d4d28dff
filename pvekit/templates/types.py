"""Template registry data types."""

import re
import time
from dataclasses import dataclass, field
from enum import Enum

from pvekit.errors import InvalidArgumentError

_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")


def validate_template_name(name):
    """Template names double as file names: letters, digits, '.', '_' and '-' only."""
    if not isinstance(name, str) or not _NAME_RE.match(name) or name in (".", ".."):
        raise InvalidArgumentError(f"Invalid template name: {name!r}")
    return name


@dataclass
class VMTemplate:
    """A named, reusable VM parameter set."""

    name: str
    parameters: dict[str, str] = field(default_factory=dict)
    description: str = ""
    tags: list[str] = field(default_factory=list)
    created: int = field(default_factory=lambda: int(time.time()))

    def __post_init__(self):
        validate_template_name(self.name)

    @classmethod
    def from_builder(cls, name, builder, description="", tags=()):
        """Snapshot a VMBuilder's parameters; the VM-specific ``vmid`` is dropped."""
        params = builder.build()
        params.pop("vmid", None)
        return cls(name=name, parameters=params, description=description, tags=list(tags))

    @classmethod
    def from_dict(cls, d):
        """Build from a loaded YAML mapping."""
        return cls(
            name=d["name"],
            parameters={str(k): str(v) for k, v in (d.get("parameters") or {}).items()},
            description=d.get("description") or "",
            tags=[str(t) for t in (d.get("tags") or [])],
            created=int(d.get("created") or 0),
        )

    def to_dict(self):
        return {
            "name": self.name,
            "description": self.description,
            "tags": list(self.tags),
            "created": self.created,
            "parameters": dict(self.parameters),
        }


class StoreStatus(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


@dataclass
class StoreResult:
    """Outcome of a registry operation; ``template`` is set when ``status`` is OK."""

    status: StoreStatus
    template: VMTemplate | None = None

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK
