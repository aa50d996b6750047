"""Backup library: archive creation, validation, restore script and restore."""

from aiodock.backup.archive import (
    BackupArchive,
    archive_tarballs,
    create_backup,
    format_size,
    list_backups,
    read_manifest,
    validate_backup,
)
from aiodock.backup.restore import run_restore, running_as_root
from aiodock.backup.script import RESTORE_SCRIPT_NAME, render_restore_script

__all__ = [
    "BackupArchive",
    "RESTORE_SCRIPT_NAME",
    "archive_tarballs",
    "create_backup",
    "format_size",
    "list_backups",
    "read_manifest",
    "render_restore_script",
    "run_restore",
    "running_as_root",
    "validate_backup",
]
