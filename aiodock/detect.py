"""Existing-install detection: working directory, containers and volumes."""

import logging
import os
from dataclasses import dataclass, field

from aiodock.engine.base import EngineError

logger = logging.getLogger(__name__)


@dataclass
class ExistingInstall:
    """What a previous deployment left on this host."""

    dir_present: bool = False
    containers: list[str] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)
    engine_reachable: bool = True

    @property
    def container_count(self) -> int:
        return len(self.containers)

    @property
    def volume_count(self) -> int:
        return len(self.volumes)

    @property
    def exists(self) -> bool:
        return self.dir_present or bool(self.containers) or bool(self.volumes)


async def detect_existing_install(engine, settings) -> ExistingInstall:
    """Inspect the filesystem and engine for a prior deployment. No side effects.

    If the engine cannot be queried the result only reflects the working
    directory; the environment validator reports the real problem later.
    """
    install = ExistingInstall(dir_present=os.path.isdir(settings.working_dir))

    try:
        install.containers = await engine.list_containers(settings.container_filter)
        install.volumes = await engine.list_volumes(settings.volume_prefix)
    except EngineError as e:
        logger.warning(f"Container engine not reachable, cannot check for existing containers/volumes: {e}")
        install.containers = []
        install.volumes = []
        install.engine_reachable = False

    return install


def log_existing_install(install: ExistingInstall, settings):
    """Print the detector result for the operator."""
    if not install.exists:
        logger.info("No existing Nextcloud AIO installation found.")
        return
    logger.info("Existing Nextcloud AIO installation detected:")
    if install.dir_present:
        logger.info(f"  Directory:  {settings.working_dir}")
    logger.info(f"  Containers: {install.container_count}")
    for name in install.containers:
        logger.info(f"    - {name}")
    logger.info(f"  Volumes:    {install.volume_count}")
    for name in install.volumes:
        logger.info(f"    - {name}")
