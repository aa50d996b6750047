"""Full reset: remove AIO containers, volumes and the working directory."""

import logging
import os
import shutil

from aiodock.engine.base import EngineError

logger = logging.getLogger(__name__)


async def run_reset(engine, settings, dry_run=False) -> bool:
    """Remove every trace of a previous deployment. Not reversible.

    Each step tolerates failure so a half-broken install can still be
    cleared. Returns True if every step succeeded.
    """
    ok = True

    logger.info("Stopping and removing existing AIO containers...")
    try:
        containers = await engine.list_containers(settings.container_filter)
    except EngineError as e:
        logger.warning(f"  Could not list containers: {e}")
        containers = []
        ok = False
    if containers and not await engine.remove_containers(containers):
        logger.warning(f"  Failed to remove containers: {', '.join(containers)}")
        ok = False

    logger.info("Removing AIO volumes...")
    try:
        volumes = await engine.list_volumes(settings.volume_prefix)
    except EngineError as e:
        logger.warning(f"  Could not list volumes: {e}")
        volumes = []
        ok = False
    if volumes and not await engine.remove_volumes(volumes):
        logger.warning(f"  Failed to remove volumes: {', '.join(volumes)}")
        ok = False

    logger.info(f"Removing {settings.working_dir}...")
    if dry_run:
        logger.info(f"[dry-run] rm -rf {settings.working_dir}")
    elif os.path.isdir(settings.working_dir):
        try:
            shutil.rmtree(settings.working_dir)
        except OSError as e:
            logger.warning(f"  Failed to remove {settings.working_dir}: {e}")
            ok = False

    if ok:
        logger.info("Full AIO reset complete.")
    else:
        logger.warning("AIO reset finished with errors (see above).")
    return ok
