"""Backup archives: volume tarballs, config snapshot, restore script, manifest."""

import json
import logging
import os
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from aiodock.backup.script import RESTORE_SCRIPT_NAME, render_restore_script
from aiodock.engine.base import EngineError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"
CONTAINERS_SNAPSHOT_NAME = "containers.json"


@dataclass
class BackupArchive:
    """A timestamped backup directory and what ended up inside it."""

    path: Path
    timestamp: str
    volumes: list[str] = field(default_factory=list)
    failed_volumes: list[str] = field(default_factory=list)
    size_bytes: int = 0
    valid: bool = False

    @property
    def config_dir(self) -> Path:
        return self.path / "config"

    @property
    def volumes_dir(self) -> Path:
        return self.path / "volumes"

    @property
    def restore_script(self) -> Path:
        return self.path / RESTORE_SCRIPT_NAME

    @property
    def volume_count(self) -> int:
        return len(self.volumes)

    def tarball(self, volume) -> Path:
        return self.volumes_dir / f"{volume}.tar.gz"

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "volumes": self.volumes,
            "failed_volumes": self.failed_volumes,
            "volume_count": self.volume_count,
            "size_bytes": self.size_bytes,
            "valid": self.valid,
        }


def format_size(num_bytes) -> str:
    """Human-readable byte count (e.g. '1.5 MiB')."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    size = num_bytes / 1024
    for unit in ("KiB", "MiB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GiB"


def directory_size(path) -> int:
    """Total size in bytes of all regular files under path."""
    total = 0
    for root, _, files in os.walk(path):
        for name in files:
            fp = os.path.join(root, name)
            if not os.path.islink(fp):
                total += os.path.getsize(fp)
    return total


def archive_tarballs(archive_dir) -> list[Path]:
    """Volume tarballs present in an archive, sorted by name."""
    volumes_dir = Path(archive_dir) / "volumes"
    if not volumes_dir.is_dir():
        return []
    return sorted(volumes_dir.glob("*.tar.gz"))


def validate_backup(archive_dir):
    """Check an archive: valid iff restore.sh exists and at least one tarball exists.

    Returns:
        (valid, size_bytes, volume_count)
    """
    archive_dir = Path(archive_dir)
    tarballs = archive_tarballs(archive_dir)
    has_script = (archive_dir / RESTORE_SCRIPT_NAME).is_file()
    valid = has_script and len(tarballs) > 0
    return valid, directory_size(archive_dir), len(tarballs)


def write_manifest(archive: BackupArchive):
    manifest_path = archive.path / MANIFEST_NAME
    manifest_path.write_text(json.dumps(archive.to_dict(), indent=2) + "\n")


def read_manifest(archive_dir) -> dict:
    """Read and return parsed manifest.json from an archive."""
    return json.loads((Path(archive_dir) / MANIFEST_NAME).read_text())


def list_backups(settings) -> list[Path]:
    """Archive directories under backup_root, oldest first."""
    root = Path(settings.backup_root)
    if not root.is_dir():
        return []
    return sorted(p for p in root.glob(f"{settings.backup_prefix}-*") if p.is_dir())


async def _snapshot_containers(engine, settings, archive: BackupArchive):
    """Write inspect output for matching containers. Best-effort."""
    try:
        names = await engine.list_containers(settings.container_filter)
        snapshot = []
        for name in names:
            info = await engine.inspect_container(name)
            if info:
                snapshot.append(info)
    except EngineError as e:
        logger.warning(f"  Could not snapshot container metadata: {e}")
        return
    (archive.path / CONTAINERS_SNAPSHOT_NAME).write_text(json.dumps(snapshot, indent=2) + "\n")
    logger.info(f"  Saved metadata for {len(snapshot)} container(s)")


def _copy_working_dir(settings, archive: BackupArchive):
    """Copy the working directory verbatim into config/. Absence is fine."""
    if not os.path.isdir(settings.working_dir):
        logger.info(f"  No {settings.working_dir} to copy")
        return
    try:
        shutil.copytree(settings.working_dir, archive.config_dir, symlinks=True, dirs_exist_ok=True)
        logger.info(f"  Copied {settings.working_dir} -> {archive.config_dir}")
    except (OSError, shutil.Error) as e:
        logger.warning(f"  Could not fully copy {settings.working_dir}: {e}")


async def create_backup(engine, settings, volumes=None, timestamp=None) -> BackupArchive:
    """Back up the working directory and named volumes into a new archive.

    Args:
        engine: ContainerEngine
        settings: Settings
        volumes: volume names to back up (default: all matching volume_prefix)
        timestamp: archive suffix (default: now, YYYYmmdd_HHMMSS)

    A volume that fails to back up is logged and skipped; the rest continue.
    Validation is advisory: an invalid archive is returned, not raised.
    """
    ts = timestamp or datetime.now().strftime("%Y%m%d_%H%M%S")
    archive = BackupArchive(path=Path(settings.backup_root).resolve() / f"{settings.backup_prefix}-{ts}", timestamp=ts)
    archive.volumes_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Creating backup in {archive.path}...")

    _copy_working_dir(settings, archive)

    if volumes is None:
        try:
            volumes = await engine.list_volumes(settings.volume_prefix)
        except EngineError as e:
            logger.warning(f"  Could not list volumes: {e}")
            volumes = []

    for volume in volumes:
        logger.info(f"  Backing up volume {volume}...")
        ok = await engine.backup_volume(volume, archive.volumes_dir)
        tarball = archive.tarball(volume)
        if ok and tarball.is_file():
            archive.volumes.append(volume)
            logger.info(f"    -> {tarball.name} ({format_size(tarball.stat().st_size)})")
        else:
            logger.warning(f"  WARNING: backup of volume {volume} failed, skipping")
            archive.failed_volumes.append(volume)
            try:
                tarball.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"  Could not remove partial tarball {tarball}: {e}")

    await _snapshot_containers(engine, settings, archive)

    archive.restore_script.write_text(render_restore_script(settings))
    archive.restore_script.chmod(0o755)

    archive.valid, archive.size_bytes, _ = validate_backup(archive.path)
    write_manifest(archive)

    log_backup_summary(archive)
    return archive


def log_backup_summary(archive: BackupArchive):
    logger.info("")
    if archive.valid:
        logger.info("Backup completed successfully.")
    else:
        logger.warning("WARNING: backup may be incomplete (no volume tarballs or no restore script).")
    logger.info(f"  Location: {archive.path}")
    logger.info(f"  Size:     {format_size(archive.size_bytes)}")
    logger.info(f"  Volumes:  {archive.volume_count}")
    if archive.failed_volumes:
        logger.info(f"  Failed:   {', '.join(archive.failed_volumes)}")
    logger.info(f"  Restore:  sudo {archive.restore_script}")
