"""Restore a backup archive from Python (same steps as the embedded restore.sh)."""

import logging
import os
import shutil
from pathlib import Path

from aiodock.backup.archive import archive_tarballs
from aiodock.engine.base import EngineError
from aiodock.errors import FatalError

logger = logging.getLogger(__name__)


def running_as_root() -> bool:
    return os.geteuid() == 0


async def run_restore(engine, archive_dir, settings, confirmed=False, is_root=running_as_root) -> bool:
    """Restore volumes and working directory from archive_dir, then bring AIO up.

    Destructive: the current deployment and its volumes are removed first.
    Running it twice against the same archive converges to the same state.

    Returns:
        False if the operator did not confirm (nothing was touched), True on success.

    Raises:
        FatalError: not root, archive missing, or bring-up failed.
    """
    archive_dir = Path(archive_dir).resolve()

    if not is_root():
        raise FatalError("Restore must be run as root (sudo)")
    if not archive_dir.is_dir():
        raise FatalError(f"Backup archive not found: {archive_dir}")

    if not confirmed:
        logger.info("Restore cancelled. Nothing was changed.")
        return False

    logger.info(f"Restoring Nextcloud AIO from {archive_dir}...")

    # 1. Bring down whatever is running
    if os.path.isfile(settings.compose_path):
        logger.info("Stopping current deployment...")
        await engine.compose_down(settings.working_dir)
    try:
        containers = await engine.list_containers(settings.container_filter)
        await engine.remove_containers(containers)
    except EngineError as e:
        logger.warning(f"  Could not list containers: {e}")

    # 2. Drop current volumes
    try:
        current = await engine.list_volumes(settings.volume_prefix)
    except EngineError as e:
        logger.warning(f"  Could not list volumes: {e}")
        current = []
    if current:
        logger.info(f"Removing {len(current)} current volume(s)...")
        await engine.remove_volumes(current)

    # 3. Working directory, recreated from scratch
    if os.path.isdir(settings.working_dir):
        shutil.rmtree(settings.working_dir)
    os.makedirs(settings.working_dir)
    config_dir = archive_dir / "config"
    if config_dir.is_dir():
        shutil.copytree(config_dir, settings.working_dir, symlinks=True, dirs_exist_ok=True)
        logger.info(f"Restored {settings.working_dir}")
    else:
        logger.warning(f"  Archive has no config/ directory; {settings.working_dir} left empty")

    # 4. Volumes
    tarballs = archive_tarballs(archive_dir)
    if not tarballs:
        logger.warning("  Archive contains no volume tarballs")
    for tarball in tarballs:
        volume = tarball.name[: -len(".tar.gz")]
        logger.info(f"Restoring volume {volume}...")
        if not await engine.create_volume(volume):
            logger.warning(f"  WARNING: could not create volume {volume}, skipping")
            continue
        if not await engine.restore_volume(volume, tarball):
            logger.warning(f"  WARNING: could not extract {tarball.name} into {volume}")

    # 5. Bring it back
    logger.info("Starting Nextcloud AIO...")
    if not await engine.compose_up(settings.working_dir):
        raise FatalError(
            f"docker compose up failed after restore. Check 'docker compose logs' in {settings.working_dir}."
        )

    logger.info("Restore complete.")
    return True
