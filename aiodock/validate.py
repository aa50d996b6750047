"""Environment validation: docker, compose, Saltbox network, Traefik, ports."""

import logging
import re
from dataclasses import dataclass, field

from aiodock.engine.base import EngineError
from aiodock.errors import FatalError
from aiodock.proxy import TraefikInspector

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Soft problems found during validation. Hard problems raise instead."""

    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings


async def port_in_use(run_cmd, port) -> bool:
    """Check `ss -tulpn` for a listener on port. Unknown (ss failed) counts as free."""
    rc, stdout, _ = await run_cmd("ss -tulpn", stream=False, timeout=30)
    if rc != 0:
        logger.debug("ss -tulpn failed; skipping port check")
        return False
    pattern = re.compile(rf":{int(port)}\s")
    return any(pattern.search(line) for line in stdout.splitlines())


async def validate_environment(engine, settings, run_cmd=None) -> ValidationReport:
    """Verify prerequisites in order.

    Raises:
        FatalError: docker missing, compose missing, or the shared network missing.

    Returns:
        ValidationReport with soft warnings (proxy not running / not attached,
        management port already bound). The caller decides whether to continue.
    """
    logger.info("Validating environment (Docker, Compose, Saltbox, Traefik)...")
    report = ValidationReport()

    if not await engine.available():
        raise FatalError("Docker not found!")
    if not await engine.compose_available():
        raise FatalError("Docker Compose not found!")

    network = settings.shared_network
    if not await engine.network_exists(network):
        raise FatalError(f"Saltbox network '{network}' not found!")
    logger.info(f"  Network '{network}' present")

    proxy = TraefikInspector(engine, settings.proxy_container)
    if not await proxy.is_running():
        report.warnings.append(f"Traefik container '{settings.proxy_container}' not found or not running")
        try:
            running = await engine.list_containers("")
            if running:
                logger.info(f"  Available containers: {', '.join(running)}")
        except EngineError as e:
            logger.debug(f"Could not list containers: {e}")
    elif not await proxy.attached_to(network):
        report.warnings.append(f"Traefik not detected in '{network}' network")
    else:
        logger.info(f"  Traefik running and attached to '{network}'")

    if run_cmd is not None and await port_in_use(run_cmd, settings.aio_port):
        report.warnings.append(f"Port {settings.aio_port} already in use")

    for warning in report.warnings:
        logger.warning(f"  WARNING: {warning}")
    return report
