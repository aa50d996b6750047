"""Docker CLI implementation of ContainerEngine."""

import json
import logging
import shlex
from pathlib import Path

from aiodock.engine.base import ContainerEngine, EngineError

logger = logging.getLogger(__name__)

DEFAULT_HELPER_IMAGE = "alpine:latest"


class DockerEngine(ContainerEngine):
    """Talks to the Docker daemon by shelling out through a run_cmd callable.

    run_cmd has the signature produced by aiodock.engine.shell.make_run_cmd,
    so dry-run mode comes for free: every command is logged instead of run.
    """

    def __init__(self, run_cmd, helper_image=DEFAULT_HELPER_IMAGE):
        self.run_cmd = run_cmd
        self.helper_image = helper_image

    async def _query(self, command, timeout=60):
        rc, stdout, stderr = await self.run_cmd(command, stream=False, timeout=timeout)
        if rc != 0:
            raise EngineError(f"'{command}' failed (rc={rc}): {stderr.strip()}")
        return stdout

    async def _ok(self, command, timeout=600, log_output=False, cwd=None):
        rc, _, stderr = await self.run_cmd(
            command, stream=False, timeout=timeout, log_output=log_output, cwd=cwd
        )
        if rc != 0 and stderr.strip():
            logger.debug(f"'{command}' failed: {stderr.strip()}")
        return rc == 0

    # ── Tooling ─────────────────────────────────────────────────

    async def available(self) -> bool:
        return await self._ok("docker --version", timeout=30)

    async def compose_available(self) -> bool:
        return await self._ok("docker compose version", timeout=30)

    # ── Containers ──────────────────────────────────────────────

    async def list_containers(self, name_filter):
        stdout = await self._query(
            f"docker ps -a --filter name={shlex.quote(name_filter)} --format '{{{{.Names}}}}'"
        )
        return [line.strip() for line in stdout.splitlines() if line.strip()]

    async def inspect_container(self, name):
        rc, stdout, stderr = await self.run_cmd(f"docker inspect {shlex.quote(name)}", stream=False, timeout=60)
        if rc != 0:
            if "no such" in stderr.lower():
                return None
            raise EngineError(f"docker inspect {name} failed (rc={rc}): {stderr.strip()}")
        if not stdout.strip():
            return None
        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as e:
            raise EngineError(f"docker inspect {name} returned invalid JSON: {e}") from e
        return data[0] if data else None

    async def remove_containers(self, names):
        if not names:
            return True
        return await self._ok("docker rm -f " + " ".join(shlex.quote(n) for n in names), timeout=300)

    async def restart_container(self, name):
        return await self._ok(f"docker restart {shlex.quote(name)}", timeout=300)

    # ── Volumes ─────────────────────────────────────────────────

    async def list_volumes(self, prefix):
        stdout = await self._query("docker volume ls -q")
        return [v.strip() for v in stdout.splitlines() if v.strip().startswith(prefix)]

    async def create_volume(self, name):
        return await self._ok(f"docker volume create {shlex.quote(name)}", timeout=60)

    async def remove_volumes(self, names):
        if not names:
            return True
        return await self._ok("docker volume rm " + " ".join(shlex.quote(n) for n in names), timeout=300)

    async def backup_volume(self, name, dest_dir):
        dest_dir = Path(dest_dir).resolve()
        cmd = (
            f"docker run --rm"
            f" -v {shlex.quote(name)}:/source:ro"
            f" -v {shlex.quote(str(dest_dir))}:/backup"
            f" {shlex.quote(self.helper_image)}"
            f" tar czf {shlex.quote(f'/backup/{name}.tar.gz')} -C /source ."
        )
        return await self._ok(cmd, timeout=3600)

    async def restore_volume(self, name, tarball):
        tarball = Path(tarball).resolve()
        cmd = (
            f"docker run --rm"
            f" -v {shlex.quote(name)}:/target"
            f" -v {shlex.quote(str(tarball.parent))}:/backup:ro"
            f" {shlex.quote(self.helper_image)}"
            f" tar xzf {shlex.quote(f'/backup/{tarball.name}')} -C /target"
        )
        return await self._ok(cmd, timeout=3600)

    # ── Networks ────────────────────────────────────────────────

    async def network_exists(self, name):
        return await self._ok(f"docker network inspect {shlex.quote(name)}", timeout=60)

    async def network_containers(self, name):
        stdout = await self._query(
            f"docker network inspect {shlex.quote(name)} --format '{{{{range .Containers}}}}{{{{.Name}}}} {{{{end}}}}'"
        )
        return stdout.split()

    # ── Compose ─────────────────────────────────────────────────

    async def compose_pull(self, project_dir):
        return await self._ok("docker compose pull", timeout=1800, log_output=True, cwd=project_dir)

    async def compose_up(self, project_dir):
        return await self._ok("docker compose up -d", timeout=1800, log_output=True, cwd=project_dir)

    async def compose_down(self, project_dir):
        return await self._ok("docker compose down", timeout=300, log_output=True, cwd=project_dir)

    async def compose_logs(self, project_dir, tail=100):
        _, stdout, _ = await self.run_cmd(
            f"docker compose logs --tail={int(tail)}", stream=False, timeout=60, log_output=True, cwd=project_dir
        )
        return stdout
