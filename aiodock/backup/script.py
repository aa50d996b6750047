"""Standalone restore script embedded in every backup archive."""

import shlex

RESTORE_SCRIPT_NAME = "restore.sh"

_RESTORE_TEMPLATE = r"""#!/usr/bin/env bash
# Restore a Nextcloud AIO backup.
# Self-contained: only needs bash and docker. Run from anywhere:
#   sudo ./restore.sh
set -euo pipefail

BACKUP_DIR="$(cd "$(dirname "${BASH_SOURCE[0]}")" && pwd)"
WORKING_DIR=%(working_dir)s
CONTAINER_FILTER=%(container_filter)s
VOLUME_PREFIX=%(volume_prefix)s
HELPER_IMAGE=%(helper_image)s

if [[ $EUID -ne 0 ]]; then
    echo "This restore must be run as root (sudo)" >&2
    exit 1
fi

echo "WARNING: this replaces the Nextcloud AIO deployment in ${WORKING_DIR}"
echo "         and every docker volume whose name starts with ${VOLUME_PREFIX}."
read -r -p "Type 'yes' to restore from ${BACKUP_DIR}: " CONFIRM
if [[ "${CONFIRM}" != "yes" ]]; then
    echo "Restore cancelled."
    exit 0
fi

echo "Stopping current deployment..."
if [[ -f "${WORKING_DIR}/docker-compose.yml" ]]; then
    (cd "${WORKING_DIR}" && docker compose down) || true
fi
CONTAINERS="$(docker ps -aq --filter "name=${CONTAINER_FILTER}" || true)"
if [[ -n "${CONTAINERS}" ]]; then
    docker rm -f ${CONTAINERS} >/dev/null || true
fi

echo "Removing current volumes..."
VOLUMES="$(docker volume ls -q | grep -E "^${VOLUME_PREFIX}" || true)"
if [[ -n "${VOLUMES}" ]]; then
    docker volume rm ${VOLUMES} >/dev/null || true
fi

echo "Restoring ${WORKING_DIR}..."
rm -rf "${WORKING_DIR}"
mkdir -p "${WORKING_DIR}"
if [[ -d "${BACKUP_DIR}/config" ]]; then
    cp -a "${BACKUP_DIR}/config/." "${WORKING_DIR}/"
fi

shopt -s nullglob
for TARBALL in "${BACKUP_DIR}"/volumes/*.tar.gz; do
    VOLUME="$(basename "${TARBALL}" .tar.gz)"
    echo "Restoring volume ${VOLUME}..."
    docker volume create "${VOLUME}" >/dev/null
    docker run --rm \
        -v "${VOLUME}:/target" \
        -v "${BACKUP_DIR}/volumes:/backup:ro" \
        "${HELPER_IMAGE}" \
        tar xzf "/backup/${VOLUME}.tar.gz" -C /target
done

echo "Starting Nextcloud AIO..."
cd "${WORKING_DIR}"
if ! docker compose up -d; then
    echo "ERROR: docker compose up failed. Check 'docker compose logs' in ${WORKING_DIR}." >&2
    exit 1
fi

echo "Restore complete."
"""


def render_restore_script(settings) -> str:
    """Render restore.sh for the given settings.

    The script locates the archive relative to itself, so the archive
    can be moved or copied to another host before running it.
    """
    return _RESTORE_TEMPLATE % {
        "working_dir": shlex.quote(settings.working_dir),
        "container_filter": shlex.quote(settings.container_filter),
        "volume_prefix": shlex.quote(settings.volume_prefix),
        "helper_image": shlex.quote(settings.helper_image),
    }
