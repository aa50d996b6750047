"""Status command: show what is installed and which backups exist."""

import logging

from aiodock.backup import format_size, list_backups, validate_backup
from aiodock.commands import add_config_argument, make_engine, run_async, settings_from_args
from aiodock.detect import detect_existing_install, log_existing_install

logger = logging.getLogger(__name__)


def handle_status(args):
    """Handle the status command."""
    run_async(_handle_status(args))


async def _handle_status(args):
    settings = settings_from_args(args)
    engine, _ = make_engine(settings)

    install = await detect_existing_install(engine, settings)
    log_existing_install(install, settings)

    if install.containers:
        logger.info("")
        health = await engine.container_health(settings.service_name)
        logger.info(f"Mastercontainer health: {health or 'unknown'}")

    backups = list_backups(settings)
    logger.info("")
    if not backups:
        logger.info(f"No backups under {settings.backup_root}")
        return
    logger.info(f"Backups under {settings.backup_root}:")
    for path in backups:
        valid, size, volume_count = validate_backup(path)
        marker = "" if valid else "  (incomplete)"
        logger.info(f"  {path.name}  {volume_count} volume(s)  {format_size(size)}{marker}")


def register_status_command(subparsers):
    """Register the status subcommand."""
    parser = subparsers.add_parser(
        "status",
        help="Show the existing installation and available backups",
    )
    add_config_argument(parser)
    parser.set_defaults(func=handle_status)
