"""Container engine capability interface."""

from abc import ABC, abstractmethod
from pathlib import Path


class EngineError(RuntimeError):
    """A container engine query failed (daemon unreachable, bad output, ...)."""


class ContainerEngine(ABC):
    """Narrow view of the container engine used by every workflow stage.

    Query methods raise EngineError when the engine cannot answer.
    Mutating methods return True on success and log on failure; callers
    decide whether a failure is fatal.
    """

    # ── Tooling ─────────────────────────────────────────────────

    @abstractmethod
    async def available(self) -> bool:
        """Engine CLI is installed and answers."""

    @abstractmethod
    async def compose_available(self) -> bool:
        """Compose subsystem is installed."""

    # ── Containers ──────────────────────────────────────────────

    @abstractmethod
    async def list_containers(self, name_filter: str) -> list[str]:
        """Names of all containers (running or not) whose name matches name_filter."""

    @abstractmethod
    async def inspect_container(self, name: str) -> dict | None:
        """Inspect document for a container, or None if it does not exist."""

    @abstractmethod
    async def remove_containers(self, names: list[str]) -> bool:
        """Force-remove the given containers."""

    @abstractmethod
    async def restart_container(self, name: str) -> bool:
        """Restart a container."""

    # ── Volumes ─────────────────────────────────────────────────

    @abstractmethod
    async def list_volumes(self, prefix: str) -> list[str]:
        """Names of all volumes starting with prefix."""

    @abstractmethod
    async def create_volume(self, name: str) -> bool:
        """Create an empty named volume."""

    @abstractmethod
    async def remove_volumes(self, names: list[str]) -> bool:
        """Remove the given volumes."""

    @abstractmethod
    async def backup_volume(self, name: str, dest_dir: Path) -> bool:
        """Stream the volume contents into dest_dir/{name}.tar.gz via a disposable helper."""

    @abstractmethod
    async def restore_volume(self, name: str, tarball: Path) -> bool:
        """Extract tarball into the (existing) volume via a disposable helper."""

    # ── Networks ────────────────────────────────────────────────

    @abstractmethod
    async def network_exists(self, name: str) -> bool:
        """Network is defined."""

    @abstractmethod
    async def network_containers(self, name: str) -> list[str]:
        """Names of containers attached to the network."""

    # ── Compose ─────────────────────────────────────────────────

    @abstractmethod
    async def compose_pull(self, project_dir: str) -> bool:
        """Pull images for the compose project in project_dir."""

    @abstractmethod
    async def compose_up(self, project_dir: str) -> bool:
        """Bring the compose project in project_dir up, detached."""

    @abstractmethod
    async def compose_down(self, project_dir: str) -> bool:
        """Stop and remove the compose project in project_dir."""

    @abstractmethod
    async def compose_logs(self, project_dir: str, tail: int = 100) -> str:
        """Recent log lines of the compose project."""

    # ── Derived helpers ─────────────────────────────────────────

    async def container_health(self, name: str) -> str | None:
        """Health status string ('healthy', 'starting', ...) or None."""
        try:
            info = await self.inspect_container(name)
        except EngineError:
            return None
        if not info:
            return None
        health = (info.get("State") or {}).get("Health") or {}
        return health.get("Status")

    async def container_running(self, name: str) -> bool:
        try:
            info = await self.inspect_container(name)
        except EngineError:
            return False
        if not info:
            return False
        return bool((info.get("State") or {}).get("Running"))
