"""Backup command: archive the current installation without touching it."""

import logging
import sys

from aiodock.backup import create_backup, running_as_root
from aiodock.commands import add_config_argument, make_engine, run_async, settings_from_args
from aiodock.errors import FatalError

logger = logging.getLogger(__name__)


def handle_backup(args):
    """Handle the backup command."""
    run_async(_handle_backup(args))


async def _handle_backup(args):
    settings = settings_from_args(args)
    if not running_as_root():
        raise FatalError("Backup must be run as root (sudo)")

    engine, _ = make_engine(settings)
    archive = await create_backup(engine, settings)
    if not archive.valid:
        sys.exit(1)


def register_backup_command(subparsers):
    """Register the backup subcommand."""
    parser = subparsers.add_parser(
        "backup",
        help="Back up the AIO working directory and volumes",
    )
    add_config_argument(parser)
    parser.set_defaults(func=handle_backup)
