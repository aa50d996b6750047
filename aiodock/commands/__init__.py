"""Shared command plumbing: settings flags, engine construction, error exit."""

import asyncio
import logging
import sys

from aiodock.engine import DockerEngine, make_run_cmd
from aiodock.errors import FatalError
from aiodock.prompts import NonInteractivePrompter, Prompter
from aiodock.settings import DOMAIN_STRUCTURES, ROUTING_MODES, load_settings

logger = logging.getLogger(__name__)


def add_config_argument(parser):
    parser.add_argument(
        "--config",
        default=None,
        help="YAML settings file deep-merged over the built-in defaults",
    )


def add_domain_arguments(parser):
    parser.add_argument("--domain", default=None, help="Base domain, e.g. example.com")
    parser.add_argument(
        "--domain-structure",
        choices=DOMAIN_STRUCTURES,
        default=None,
        help="'subdomain' serves nextcloud.<domain>, 'apex' serves <domain> itself",
    )
    parser.add_argument(
        "--routing",
        choices=ROUTING_MODES,
        default=None,
        help="Traefik routing: dynamic config file or container labels (default: file)",
    )


def settings_from_args(args):
    """Load Settings from --config plus whatever domain/routing flags the command has."""
    overrides = {
        "base_domain": getattr(args, "domain", None),
        "domain_structure": getattr(args, "domain_structure", None),
        "routing_mode": getattr(args, "routing", None),
    }
    try:
        return load_settings(args.config, overrides)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"ERROR: {e}")
        sys.exit(1)


def make_engine(settings, dry_run=False):
    """Docker engine plus the run_cmd it shells out through."""
    run_cmd = make_run_cmd(dry_run=dry_run)
    return DockerEngine(run_cmd, helper_image=settings.helper_image), run_cmd


def make_prompter():
    if sys.stdin is not None and sys.stdin.isatty():
        return Prompter()
    return NonInteractivePrompter()


def run_async(coro):
    """Run a command coroutine; a FatalError ends the process with exit code 1."""
    try:
        return asyncio.run(coro)
    except FatalError as e:
        logger.error(f"ERROR: {e}")
        sys.exit(1)
