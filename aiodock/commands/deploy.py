"""Deploy command: the full detect → backup → reset → validate → deploy → check workflow."""

import argparse
import logging
import sys

from aiodock.commands import (
    add_config_argument,
    add_domain_arguments,
    make_engine,
    make_prompter,
    run_async,
    settings_from_args,
)
from aiodock.prompts import OperatorChoices
from aiodock.workflow import WorkflowOutcome, run_workflow

logger = logging.getLogger(__name__)


def choices_from_args(args) -> OperatorChoices:
    """Translate flags into pre-collected answers. Unset flags stay None (ask)."""
    run_health = False if args.skip_health_checks else None
    if args.yes:
        return OperatorChoices.assume_yes(
            manual_ip=args.public_ip,
            run_health_checks=run_health is None,
            create_backup=True if args.backup is None else args.backup,
        )
    return OperatorChoices(
        create_backup=args.backup,
        run_health_checks=run_health,
        manual_ip=args.public_ip,
    )


def handle_deploy(args):
    """Handle the deploy command."""
    run_async(_handle_deploy(args))


async def _handle_deploy(args):
    settings = settings_from_args(args)
    engine, run_cmd = make_engine(settings, dry_run=args.dry_run)

    outcome = await run_workflow(
        engine,
        settings,
        choices_from_args(args),
        make_prompter(),
        run_cmd=run_cmd,
        dry_run=args.dry_run,
    )
    if outcome is WorkflowOutcome.FAILED:
        sys.exit(1)


def register_deploy_command(subparsers):
    """Register the deploy subcommand."""
    parser = subparsers.add_parser(
        "deploy",
        help="Reset and deploy Nextcloud AIO behind Saltbox Traefik",
    )
    add_config_argument(parser)
    add_domain_arguments(parser)
    parser.add_argument(
        "--public-ip",
        default=None,
        help="Public IPv4 to use when automatic lookup fails (required for --dry-run)",
    )
    parser.add_argument(
        "--backup",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Back up the existing installation before the reset (default: ask)",
    )
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Answer yes to every confirmation",
    )
    parser.add_argument(
        "--skip-health-checks",
        action="store_true",
        help="Do not poll the deployment after it starts",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print commands and file writes without executing",
    )
    parser.set_defaults(func=handle_deploy)
