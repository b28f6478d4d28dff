"""YAML-backed template registry.

One file per template (``{name}.yaml``) in a single directory. The store is
created once by the caller and passed around; it loads the directory on first
use, keeps the mapping in memory, and mirrors every change back to disk.
"""

import logging
import os
from pathlib import Path

import yaml

from pvekit.templates.types import StoreResult, StoreStatus, VMTemplate, validate_template_name

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".yaml"


class TemplateStore:
    """Named VM parameter-set presets persisted under *directory*.

    Not-found and name conflicts are reported through ``StoreResult.status``
    rather than raised.
    """

    def __init__(self, directory):
        self.directory = Path(os.path.expanduser(os.path.expandvars(str(directory))))
        self._templates: dict[str, VMTemplate] | None = None

    def _load(self) -> dict[str, VMTemplate]:
        if self._templates is not None:
            return self._templates

        templates = {}
        if self.directory.is_dir():
            for path in sorted(self.directory.glob(f"*{TEMPLATE_SUFFIX}")):
                try:
                    with open(path) as f:
                        template = VMTemplate.from_dict(yaml.safe_load(f))
                except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError, AttributeError) as e:
                    logger.warning(f"Skipping invalid template file {path}: {e}")
                    continue
                # The file name is the template's identity on disk
                if template.name != path.stem:
                    logger.warning(f"Skipping template file {path}: it holds template '{template.name}'")
                    continue
                templates[template.name] = template
        logger.debug(f"Loaded {len(templates)} template(s) from {self.directory}")
        self._templates = templates
        return templates

    def _path(self, name):
        return self.directory / f"{name}{TEMPLATE_SUFFIX}"

    def _save(self, template):
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self._path(template.name), "w") as f:
            yaml.safe_dump(template.to_dict(), f, sort_keys=False)

    def create(self, template: VMTemplate) -> StoreResult:
        templates = self._load()
        if template.name in templates:
            return StoreResult(StoreStatus.CONFLICT)
        self._save(template)
        templates[template.name] = template
        logger.debug(f"Created template '{template.name}'")
        return StoreResult(StoreStatus.OK, template)

    def get(self, name: str) -> StoreResult:
        template = self._load().get(name)
        if template is None:
            return StoreResult(StoreStatus.NOT_FOUND)
        return StoreResult(StoreStatus.OK, template)

    def list(self) -> list[VMTemplate]:
        return sorted(self._load().values(), key=lambda t: t.name)

    def update(self, template: VMTemplate) -> StoreResult:
        templates = self._load()
        if template.name not in templates:
            return StoreResult(StoreStatus.NOT_FOUND)
        self._save(template)
        templates[template.name] = template
        logger.debug(f"Updated template '{template.name}'")
        return StoreResult(StoreStatus.OK, template)

    def delete(self, name: str) -> StoreResult:
        validate_template_name(name)
        templates = self._load()
        template = templates.pop(name, None)
        if template is None:
            return StoreResult(StoreStatus.NOT_FOUND)
        self._path(name).unlink(missing_ok=True)
        logger.debug(f"Deleted template '{name}'")
        return StoreResult(StoreStatus.OK, template)
