#!/usr/bin/env python3
"""Nextcloud AIO on Saltbox: CLI entrypoint."""

import argparse

from aiodock.commands.backup import register_backup_command
from aiodock.commands.deploy import register_deploy_command
from aiodock.commands.render import register_render_command
from aiodock.commands.restore import register_restore_command
from aiodock.commands.status import register_status_command
from aiodock.commands.teardown import register_teardown_command
from aiodock.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Deploy Nextcloud AIO behind Saltbox Traefik")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_deploy_command(subparsers)
    register_backup_command(subparsers)
    register_restore_command(subparsers)
    register_status_command(subparsers)
    register_render_command(subparsers)
    register_teardown_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
