"""Shared pytest fixtures for all test modules."""

import os
import shutil
import subprocess
import sys
import tarfile
from pathlib import Path

import pytest
import yaml

from aiodock.engine.base import ContainerEngine, EngineError
from aiodock.settings import Settings


PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the aiodock CLI as a subprocess."""

    def _run(*args, stdin=None):
        result = subprocess.run(
            [sys.executable, "-m", "aiodock.aiodock", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            input=stdin,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture
def make_settings_file(tmp_path):
    """Return a factory that writes a temporary settings YAML pointing at tmp_path."""

    def _make(**overrides):
        config = {
            "working_dir": str(tmp_path / "aio"),
            "backup_root": str(tmp_path / "backups"),
            "traefik_dynamic_dir": str(tmp_path / "traefik"),
        }
        config.update(overrides)
        config_path = tmp_path / "settings.yaml"
        with open(config_path, "w") as f:
            yaml.dump(config, f)
        return str(config_path)

    return _make


# ── Unit-test fixtures ──────────────────────────────────────────────


@pytest.fixture
def settings(tmp_path):
    """Settings with every host path redirected into tmp_path."""
    return Settings(
        working_dir=str(tmp_path / "aio"),
        backup_root=str(tmp_path / "backups"),
        traefik_dynamic_dir=str(tmp_path / "traefik"),
        base_domain="example.com",
        health_timeout=10,
        health_interval=5,
    )


class RecordingRunCmd:
    """run_cmd stand-in: records commands and answers from a prefix table."""

    def __init__(self, responses=None):
        self.commands = []
        self.cwds = []
        self.responses = responses or {}

    async def __call__(self, command, stream=True, timeout=600, log_output=False, cwd=None):
        self.commands.append(command)
        self.cwds.append(cwd)
        for prefix, response in self.responses.items():
            if command.startswith(prefix):
                return response
        return 0, "", ""


@pytest.fixture
def recording_run_cmd():
    """Return a factory for RecordingRunCmd instances."""
    return RecordingRunCmd


class FakeEngine(ContainerEngine):
    """In-memory container engine.

    Volumes are directories under root/volumes; backup and restore produce
    and consume real tar.gz files so archives can be inspected like the
    ones the Docker helper container writes.
    """

    def __init__(self, root):
        self.root = Path(root)
        self.volume_root = self.root / "volumes"
        self.volume_root.mkdir(parents=True, exist_ok=True)
        self.containers = {}
        self.networks = {"saltbox": ["traefik"]}
        self.calls = []
        self.reachable = True
        self.has_docker = True
        self.has_compose = True
        self.pull_ok = True
        self.up_ok = True
        self.fail_backup = set()
        self.service_health = "healthy"
        self.service_name = "nextcloud-aio-mastercontainer"

    # ── helpers for tests ──

    def add_container(self, name, running=True, args=None, health=None):
        info = {"Name": f"/{name}", "Args": list(args or []), "State": {"Running": running}}
        if health is not None:
            info["State"]["Health"] = {"Status": health}
        self.containers[name] = info

    def write_volume(self, name, files):
        vol = self.volume_root / name
        vol.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            path = vol / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

    def read_volume(self, name):
        vol = self.volume_root / name
        return {
            str(p.relative_to(vol)): p.read_text()
            for p in sorted(vol.rglob("*"))
            if p.is_file()
        }

    def volume_names(self):
        return sorted(p.name for p in self.volume_root.iterdir() if p.is_dir())

    def _check(self):
        if not self.reachable:
            raise EngineError("Cannot connect to the Docker daemon")

    # ── ContainerEngine ──

    async def available(self):
        return self.has_docker

    async def compose_available(self):
        return self.has_compose

    async def list_containers(self, name_filter):
        self._check()
        return sorted(n for n in self.containers if name_filter in n)

    async def inspect_container(self, name):
        self._check()
        return self.containers.get(name)

    async def remove_containers(self, names):
        self.calls.append(("rm", list(names)))
        for name in names:
            self.containers.pop(name, None)
        return True

    async def restart_container(self, name):
        self.calls.append(("restart", name))
        return name in self.containers

    async def list_volumes(self, prefix):
        self._check()
        return [v for v in self.volume_names() if v.startswith(prefix)]

    async def create_volume(self, name):
        self.calls.append(("volume create", name))
        (self.volume_root / name).mkdir(parents=True, exist_ok=True)
        return True

    async def remove_volumes(self, names):
        self.calls.append(("volume rm", list(names)))
        for name in names:
            shutil.rmtree(self.volume_root / name, ignore_errors=True)
        return True

    async def backup_volume(self, name, dest_dir):
        self.calls.append(("backup", name))
        tarball = Path(dest_dir) / f"{name}.tar.gz"
        if name in self.fail_backup:
            tarball.write_bytes(b"partial")
            return False
        with tarfile.open(tarball, "w:gz") as tar:
            tar.add(self.volume_root / name, arcname=".")
        return True

    async def restore_volume(self, name, tarball):
        self.calls.append(("restore", name))
        with tarfile.open(tarball, "r:gz") as tar:
            tar.extractall(self.volume_root / name, filter="data")
        return True

    async def network_exists(self, name):
        return name in self.networks

    async def network_containers(self, name):
        if name not in self.networks:
            raise EngineError(f"network {name} not found")
        return list(self.networks[name])

    async def compose_pull(self, project_dir):
        self.calls.append(("compose pull", project_dir))
        return self.pull_ok

    async def compose_up(self, project_dir):
        self.calls.append(("compose up", project_dir))
        if self.up_ok:
            self.add_container(self.service_name, health=self.service_health)
        return self.up_ok

    async def compose_down(self, project_dir):
        self.calls.append(("compose down", project_dir))
        return True

    async def compose_logs(self, project_dir, tail=100):
        self.calls.append(("compose logs", tail))
        return ""


@pytest.fixture
def fake_engine(tmp_path):
    """FakeEngine with a running traefik container on the saltbox network."""
    engine = FakeEngine(tmp_path / "engine")
    engine.add_container("traefik", args=["--certificatesresolvers.cfdns.acme.dnschallenge=true"])
    return engine
