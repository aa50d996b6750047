"""Teardown command: full reset without redeploying."""

import logging

from aiodock.backup import running_as_root
from aiodock.commands import add_config_argument, make_engine, make_prompter, run_async, settings_from_args
from aiodock.detect import detect_existing_install, log_existing_install
from aiodock.errors import FatalError
from aiodock.reset import run_reset

logger = logging.getLogger(__name__)


def handle_teardown(args):
    """Handle the teardown command."""
    run_async(_handle_teardown(args))


async def _handle_teardown(args):
    settings = settings_from_args(args)
    if not args.dry_run and not running_as_root():
        raise FatalError("Teardown must be run as root (sudo)")

    engine, _ = make_engine(settings, dry_run=args.dry_run)
    install = await detect_existing_install(engine, settings)
    log_existing_install(install, settings)
    if not install.exists and not args.dry_run:
        logger.info("Nothing to tear down.")
        return

    logger.info(
        f"This will remove ALL Nextcloud AIO containers, volumes, and config under {settings.working_dir}."
    )
    if not (args.yes or make_prompter().confirm("Proceed with full reset?")):
        logger.info("Teardown cancelled.")
        return

    await run_reset(engine, settings, dry_run=args.dry_run)


def register_teardown_command(subparsers):
    """Register the teardown subcommand."""
    parser = subparsers.add_parser(
        "teardown",
        help="Remove AIO containers, volumes and the working directory",
    )
    add_config_argument(parser)
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Skip the confirmation prompt",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print commands without executing",
    )
    parser.set_defaults(func=handle_teardown)
