"""'template' command: manage the local VM template registry."""

import logging
import sys
from datetime import datetime

from pvekit.commands.vm import add_builder_args, builder_from_args
from pvekit.config import load_config, template_dir
from pvekit.templates.registry import TemplateStore
from pvekit.templates.types import StoreStatus, VMTemplate

logger = logging.getLogger(__name__)


def _open_store(args):
    return TemplateStore(template_dir(load_config(args.config), args.template_dir))


def _split_tags(tags):
    return [t.strip() for t in (tags or "").split(",") if t.strip()]


def handle_list(args):
    """CLI handler for 'template list'."""
    store = _open_store(args)
    templates = store.list()
    if not templates:
        logger.info(f"No templates in {store.directory}")
        return
    for template in templates:
        created = datetime.fromtimestamp(template.created).strftime("%Y-%m-%d %H:%M")
        tags = f" [{', '.join(template.tags)}]" if template.tags else ""
        logger.info(f"{template.name:<24} {created}  {template.description}{tags}")


def handle_show(args):
    """CLI handler for 'template show'."""
    result = _open_store(args).get(args.name)
    if not result.ok:
        logger.error(f"Error: template '{args.name}' not found")
        sys.exit(1)
    template = result.template
    logger.info(f"name: {template.name}")
    if template.description:
        logger.info(f"description: {template.description}")
    if template.tags:
        logger.info(f"tags: {', '.join(template.tags)}")
    for key, value in template.parameters.items():
        logger.info(f"  {key}={value}")


def handle_save(args):
    """CLI handler for 'template create' and 'template update'."""
    store = _open_store(args)
    builder = builder_from_args(args.vm_name or args.name, args)
    template = VMTemplate.from_builder(args.name, builder, description=args.description or "", tags=_split_tags(args.tags))

    if args.action == "update":
        result = store.update(template)
    else:
        result = store.create(template)

    if result.status is StoreStatus.CONFLICT:
        logger.error(f"Error: template '{args.name}' already exists. Use 'template update' to replace it.")
        sys.exit(1)
    if result.status is StoreStatus.NOT_FOUND:
        logger.error(f"Error: template '{args.name}' not found")
        sys.exit(1)
    logger.info(f"Template '{args.name}' saved to {store.directory}")


def handle_delete(args):
    """CLI handler for 'template delete'."""
    result = _open_store(args).delete(args.name)
    if not result.ok:
        logger.error(f"Error: template '{args.name}' not found")
        sys.exit(1)
    logger.info(f"Template '{args.name}' deleted")


def register_template_command(subparsers):
    """Register the 'template' command with list/show/create/update/delete actions."""
    template_parser = subparsers.add_parser("template", help="Manage local VM templates")
    action_subparsers = template_parser.add_subparsers(dest="action", required=True)

    def add_action(name, help_text, func):
        parser = action_subparsers.add_parser(name, help=help_text)
        parser.add_argument("--template-dir", default=None, help="Template directory override")
        parser.set_defaults(func=func)
        return parser

    add_action("list", "List templates", handle_list)

    parser = add_action("show", "Show a template's parameters", handle_show)
    parser.add_argument("name", help="Template name")

    for action, help_text in (("create", "Create a template"), ("update", "Replace an existing template")):
        parser = add_action(action, help_text, handle_save)
        parser.add_argument("name", help="Template name")
        parser.add_argument("--vm-name", default=None, help="VM name stored in the template (default: template name)")
        add_builder_args(parser)

    parser = add_action("delete", "Delete a template", handle_delete)
    parser.add_argument("name", help="Template name")
