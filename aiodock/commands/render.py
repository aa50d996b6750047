"""Render command: print the generated compose file and Traefik config."""

import logging
import sys

from aiodock.commands import add_config_argument, add_domain_arguments, settings_from_args
from aiodock.deploy import DeployParams, render_compose, render_traefik_dynamic
from aiodock.discovery import is_valid_ipv4

logger = logging.getLogger(__name__)


def handle_render(args):
    """Handle the render command. Touches nothing, needs no Docker."""
    settings = settings_from_args(args)
    if not is_valid_ipv4(args.public_ip):
        logger.error(f"ERROR: Invalid IP format: {args.public_ip!r}")
        sys.exit(1)

    params = DeployParams(
        public_ip=args.public_ip,
        certresolver=args.certresolver or settings.default_certresolver,
        domain=settings.public_domain,
    )

    logger.info(f"# {settings.compose_path}")
    logger.info(render_compose(settings, params).rstrip("\n"))
    if settings.routing_mode == "file" and params.domain:
        logger.info("")
        logger.info(f"# {settings.dynamic_config_path}")
        logger.info(render_traefik_dynamic(settings, params).rstrip("\n"))


def register_render_command(subparsers):
    """Register the render subcommand."""
    parser = subparsers.add_parser(
        "render",
        help="Print the docker-compose.yml (and Traefik dynamic config) that deploy would write",
    )
    add_config_argument(parser)
    add_domain_arguments(parser)
    parser.add_argument("--public-ip", required=True, help="Public IPv4 to render with")
    parser.add_argument(
        "--certresolver",
        default=None,
        help="Traefik certificate resolver (default: settings default_certresolver)",
    )
    parser.set_defaults(func=handle_render)
