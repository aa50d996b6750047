"""Restore command: replace the current installation with a backup archive."""

import logging

from aiodock.backup import read_manifest, run_restore, running_as_root
from aiodock.commands import add_config_argument, make_engine, make_prompter, run_async, settings_from_args
from aiodock.errors import FatalError

logger = logging.getLogger(__name__)


def handle_restore(args):
    """Handle the restore command."""
    run_async(_handle_restore(args))


async def _handle_restore(args):
    if not running_as_root():
        raise FatalError("Restore must be run as root (sudo)")

    settings = settings_from_args(args)
    engine, _ = make_engine(settings)

    try:
        manifest = read_manifest(args.archive)
    except (OSError, ValueError):
        manifest = {}
    if manifest:
        logger.info(f"Archive from {manifest.get('timestamp', '?')}: {manifest.get('volume_count', 0)} volume(s)")
        if not manifest.get("valid", True):
            logger.warning("WARNING: this archive was marked incomplete when it was created")

    logger.info(f"WARNING: This will replace the current Nextcloud AIO installation with {args.archive}")
    confirmed = args.yes or make_prompter().confirm_word("Continue?")
    await run_restore(engine, args.archive, settings, confirmed=confirmed)


def register_restore_command(subparsers):
    """Register the restore subcommand."""
    parser = subparsers.add_parser(
        "restore",
        help="Restore a backup archive created by 'aiodock backup' or 'aiodock deploy'",
    )
    parser.add_argument("archive", help="Backup archive directory")
    add_config_argument(parser)
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Skip the confirmation prompt",
    )
    parser.set_defaults(func=handle_restore)
