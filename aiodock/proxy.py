"""Reverse proxy inspection: is Traefik running, attached, and which certresolver it uses."""

import logging
import re

from aiodock.engine.base import EngineError

logger = logging.getLogger(__name__)

# --certificatesresolvers.<name>.acme.email=...
_RESOLVER_DEFINITION_RE = re.compile(r"--certificatesresolvers\.([A-Za-z0-9_-]+)\.", re.IGNORECASE)
# --entrypoints.websecure.http.tls.certresolver=<name>
_RESOLVER_REFERENCE_RE = re.compile(r"\.certresolver=([A-Za-z0-9_-]+)", re.IGNORECASE)


def parse_certresolver(args):
    """Extract a certificate resolver name from Traefik process arguments.

    Resolver definitions win over entrypoint references. Returns None when
    no argument mentions a resolver.
    """
    for arg in args:
        m = _RESOLVER_DEFINITION_RE.search(arg)
        if m:
            return m.group(1)
    for arg in args:
        m = _RESOLVER_REFERENCE_RE.search(arg)
        if m:
            return m.group(1)
    return None


class TraefikInspector:
    """Read-only view of the Traefik container through a ContainerEngine."""

    def __init__(self, engine, container_name="traefik"):
        self.engine = engine
        self.container_name = container_name

    async def is_running(self) -> bool:
        return await self.engine.container_running(self.container_name)

    async def attached_to(self, network) -> bool:
        try:
            members = await self.engine.network_containers(network)
        except EngineError as e:
            logger.debug(f"Could not list containers on network {network}: {e}")
            return False
        return self.container_name in members

    async def args(self) -> list[str]:
        """Process arguments of the proxy container ([] when unknown)."""
        try:
            info = await self.engine.inspect_container(self.container_name)
        except EngineError as e:
            logger.debug(f"Could not inspect {self.container_name}: {e}")
            return []
        if not info:
            return []
        args = list(info.get("Args") or [])
        # Some setups pass flags through Config.Cmd instead of Args
        cmd = (info.get("Config") or {}).get("Cmd") or []
        return args + [c for c in cmd if c not in args]

    async def restart(self) -> bool:
        return await self.engine.restart_container(self.container_name)
