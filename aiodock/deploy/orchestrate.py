"""Deploy orchestration: write rendered config, pull, up."""

import logging

from aiodock.deploy.compose import render_compose
from aiodock.deploy.params import DeployParams
from aiodock.deploy.traefik import render_traefik_dynamic
from aiodock.proxy import TraefikInspector

logger = logging.getLogger(__name__)

COMPOSE_FILE_NAME = "docker-compose.yml"


async def write_routing(engine, write_file, settings, params: DeployParams):
    """Write the Traefik dynamic config (file routing mode) and reload Traefik."""
    if not params.domain:
        logger.warning("No public domain configured; skipping Traefik routing.")
        return
    if settings.routing_mode != "file":
        logger.info(f"Traefik routing for {params.domain} attached as container labels.")
        return

    logger.info("Writing Traefik dynamic config for Nextcloud AIO...")
    await write_file(settings.dynamic_config_path, render_traefik_dynamic(settings, params))
    logger.info(f"  Traefik dynamic config written to {settings.dynamic_config_path}")

    if settings.restart_proxy:
        logger.info("Restarting Traefik to apply config...")
        if await TraefikInspector(engine, settings.proxy_container).restart():
            logger.info("  Traefik restarted")
        else:
            logger.warning("  WARNING: failed to restart Traefik; restart it manually to load the route")


async def run_deploy(engine, write_file, settings, params: DeployParams, dry_run=False) -> bool:
    """Render config, then reconcile running state with it.

    Args:
        engine: ContainerEngine
        write_file: async callable(path, content) -> None; relative paths land in settings.working_dir
        settings: Settings
        params: discovered DeployParams
        dry_run: only log what would happen

    Returns:
        True if the compose project came up.
    """
    logger.info(f"Generating {COMPOSE_FILE_NAME}...")
    await write_file(COMPOSE_FILE_NAME, render_compose(settings, params))
    logger.info(f"  {settings.compose_path} created")

    await write_routing(engine, write_file, settings, params)

    logger.info("Pulling images...")
    if not await engine.compose_pull(settings.working_dir):
        logger.error("Failed to pull images")
        return False

    logger.info("Starting Nextcloud AIO...")
    if not await engine.compose_up(settings.working_dir):
        logger.error("Failed to start services")
        logger.error("Container logs:")
        await engine.compose_logs(settings.working_dir, tail=100)
        return False

    status = "dry-run (not deployed)" if dry_run else "deployed"
    logger.info("")
    logger.info(f"AIO login: http://{params.public_ip}:{settings.aio_port}")
    if params.domain:
        logger.info(f"Domain:    {params.domain}")
    logger.info(f"Status:    {status}")
    return True
