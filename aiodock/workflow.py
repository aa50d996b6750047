"""The full deploy workflow: detect, backup, reset, validate, discover, deploy, check."""

import asyncio
import enum
import logging
from datetime import datetime

from aiodock.backup import create_backup, running_as_root
from aiodock.deploy import (
    DEPLOYMENT_INFO_NAME,
    DeployParams,
    render_deployment_info,
    run_deploy,
    run_health_checks,
)
from aiodock.detect import detect_existing_install, log_existing_install
from aiodock.discovery import detect_certresolver, discover_public_ip
from aiodock.engine import make_write_file
from aiodock.errors import FatalError
from aiodock.prompts import decide
from aiodock.proxy import TraefikInspector
from aiodock.reset import run_reset
from aiodock.validate import validate_environment

logger = logging.getLogger(__name__)

RULE = "━" * 52


class WorkflowOutcome(enum.Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


def _section(title):
    logger.info("")
    logger.info(title)
    logger.info(RULE)


async def run_workflow(
    engine,
    settings,
    choices,
    prompter,
    run_cmd=None,
    write_file=None,
    dry_run=False,
    is_root=running_as_root,
    client=None,
    sleep=asyncio.sleep,
    now=None,
) -> WorkflowOutcome:
    """Run every stage in order. Stops at the first fatal problem.

    Args:
        engine: ContainerEngine
        settings: Settings
        choices: OperatorChoices; None answers are resolved with prompter
        prompter: Prompter used for open questions
        run_cmd: host command runner, used for the port check (None skips it)
        write_file: async callable(path, content); defaults to local writes in working_dir
        dry_run: log commands and writes instead of performing them
        is_root: callable reporting whether we run with root privileges
        client: optional httpx.AsyncClient for IP lookup and health checks
        sleep: awaitable sleep used by health polling
        now: callable returning the deployment timestamp string

    Raises:
        FatalError: a hard prerequisite failed or the operator declined a warning.
    """
    if write_file is None:
        write_file = make_write_file(settings.working_dir, dry_run=dry_run)
    now = now or (lambda: datetime.now().strftime("%a %b %d %H:%M:%S %Y"))
    domain = settings.public_domain

    # ── Preflight ───────────────────────────────────────────────
    _section("Running safety checks...")
    if dry_run:
        logger.info("[dry-run] skipping root check")
    elif not is_root():
        raise FatalError("This must be run as root (sudo)")
    logger.info(f"  Public domain: {domain or '(none)'}")
    logger.info(f"  Routing mode:  {settings.routing_mode}")

    # ── Existing install / backup / reset ──────────────────────
    _section("Checking for an existing installation...")
    install = await detect_existing_install(engine, settings)
    log_existing_install(install, settings)

    if install.exists:
        if decide(choices.create_backup, prompter, "Create a backup before the reset?"):
            if dry_run:
                logger.info(f"[dry-run] back up {settings.working_dir} and {install.volume_count} volume(s)")
            else:
                volumes = install.volumes if install.engine_reachable else None
                archive = await create_backup(engine, settings, volumes=volumes)
                if not archive.valid:
                    logger.warning("Continuing with reset although the backup looks incomplete.")

        logger.info("")
        logger.info(
            f"This will remove ALL Nextcloud AIO containers, volumes, and config under {settings.working_dir}."
        )
        if not decide(choices.confirm_reset, prompter, "Proceed with full reset?"):
            logger.info("Full reset cancelled. Exiting.")
            return WorkflowOutcome.CANCELLED
        await run_reset(engine, settings, dry_run=dry_run)

    # ── Environment ─────────────────────────────────────────────
    _section("Validating environment...")
    report = await validate_environment(engine, settings, run_cmd=run_cmd)
    if not report.ok and not decide(choices.accept_warnings, prompter, "Continue anyway?"):
        raise FatalError("Aborted: environment warnings not accepted")
    logger.info("Environment validated")

    # ── Discovery ───────────────────────────────────────────────
    _section("Discovering host parameters...")
    public_ip = await discover_public_ip(
        settings.ip_services,
        client=client,
        manual_ip=choices.manual_ip,
        prompt=prompter.ask,
        timeout=settings.ip_lookup_timeout,
        dry_run=dry_run,
    )
    certresolver = await detect_certresolver(
        TraefikInspector(engine, settings.proxy_container), default=settings.default_certresolver
    )
    params = DeployParams(public_ip=public_ip, certresolver=certresolver, domain=domain)

    # ── Deploy ──────────────────────────────────────────────────
    _section("Deploying Nextcloud AIO...")
    if not await run_deploy(engine, write_file, settings, params, dry_run=dry_run):
        logger.error("Deployment failed. The previous installation (if any) has already been removed.")
        return WorkflowOutcome.FAILED

    # ── Health ──────────────────────────────────────────────────
    if dry_run:
        logger.info("[dry-run] skipping health checks")
    elif decide(choices.run_health_checks, prompter, "Run post-install health checks (backend + public URL)?"):
        _section("Running post-install health checks...")
        await run_health_checks(engine, settings, params, client=client, sleep=sleep)
    else:
        logger.info("Skipping health checks.")

    await write_file(DEPLOYMENT_INFO_NAME, render_deployment_info(settings, params, now()))
    logger.info(f"Deployment info saved: {settings.working_dir}/{DEPLOYMENT_INFO_NAME}")

    logger.info("")
    logger.info("Useful commands:")
    logger.info(f"   cd {settings.working_dir}")
    logger.info("   docker compose ps")
    logger.info("   docker compose logs -f")
    return WorkflowOutcome.COMPLETED
