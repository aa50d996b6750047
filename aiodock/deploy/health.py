"""Post-deploy health monitoring: poll until ready or time out (never fatal)."""

import asyncio
import enum
import logging
from dataclasses import dataclass, field

import httpx

logger = logging.getLogger(__name__)


class HealthState(enum.Enum):
    WAITING = "waiting"
    READY = "ready"
    TIMED_OUT = "timed_out"


class ProbeResult(enum.Enum):
    READY = "ready"
    NOT_READY = "not_ready"
    ERROR = "error"


def classify_status(code) -> ProbeResult:
    """Map an HTTP status code to a probe result. 0 means no response."""
    if 200 <= code < 400:
        return ProbeResult.READY
    if 400 <= code < 600:
        return ProbeResult.ERROR
    return ProbeResult.NOT_READY


@dataclass
class EndpointStatus:
    label: str
    url: str
    code: int = 0

    @property
    def result(self) -> ProbeResult:
        return classify_status(self.code)

    @property
    def display_code(self) -> str:
        return f"{self.code:03d}"


@dataclass
class HealthReport:
    state: HealthState
    login: EndpointStatus
    endpoints: list[EndpointStatus] = field(default_factory=list)


async def fetch_status(client, url, timeout=10) -> int:
    """GET url without following redirects; 0 when nothing answered."""
    try:
        resp = await client.get(url, timeout=timeout, follow_redirects=False)
    except httpx.HTTPError as e:
        logger.debug(f"  {url}: {e}")
        return 0
    return resp.status_code


async def wait_until_ready(probe, timeout, interval, sleep=asyncio.sleep) -> HealthState:
    """Call probe(elapsed) every interval seconds until it returns True or timeout elapses.

    WAITING -> READY on success, WAITING -> TIMED_OUT otherwise.
    """
    state = HealthState.WAITING
    elapsed = 0
    while elapsed < timeout:
        if await probe(elapsed):
            state = HealthState.READY
            break
        await sleep(interval)
        elapsed += interval
    else:
        state = HealthState.TIMED_OUT
    return state


def public_url(domain, port=443) -> str:
    if int(port) == 443:
        return f"https://{domain}"
    return f"https://{domain}:{port}"


async def run_health_checks(engine, settings, params, client=None, sleep=asyncio.sleep) -> HealthReport:
    """Wait for the AIO login page, then report public and backend endpoints.

    A timeout downgrades to a warning; the caller never fails on it.
    """
    owns_client = client is None
    if owns_client:
        # Public endpoint may still carry a staging/self-signed cert
        client = httpx.AsyncClient(verify=False)

    login = EndpointStatus("AIO login", f"http://localhost:{settings.aio_port}")

    async def probe(elapsed):
        health = await engine.container_health(settings.service_name)
        if health != "healthy":
            logger.info(f"   Container initializing... ({elapsed}/{settings.health_timeout} seconds)")
            return False
        logger.info("   Container is healthy")
        login.code = await fetch_status(client, login.url)
        if login.result is ProbeResult.READY:
            logger.info(f"   Login page is responding (HTTP {login.code})")
            return True
        logger.info(f"   Login page not ready yet (HTTP {login.display_code}) - waiting...")
        return False

    try:
        logger.info("Waiting for AIO login page to become ready...")
        state = await wait_until_ready(probe, settings.health_timeout, settings.health_interval, sleep=sleep)
        if state is HealthState.READY:
            logger.info("AIO LOGIN PAGE IS READY")
        else:
            logger.warning("AIO DEPLOYED (login page may need a few more seconds)")
            logger.warning(f"Check logs: cd {settings.working_dir} && docker compose logs -f")

        endpoints = []
        if params.domain:
            endpoints.append(EndpointStatus("Public domain", public_url(params.domain, settings.public_port)))
        endpoints.append(EndpointStatus("Backend (Apache)", f"http://{params.public_ip}:{settings.apache_port}"))
        for endpoint in endpoints:
            endpoint.code = await fetch_status(client, endpoint.url)
            logger.info(f"   {endpoint.label}: {endpoint.url} -> HTTP {endpoint.display_code}")
    finally:
        if owns_client:
            await client.aclose()

    if any(e.result is not ProbeResult.READY for e in endpoints):
        logger.warning(
            "If any of the above show HTTP 000 or 4xx/5xx, check Traefik/Cloudflare and container logs "
            f"(cd {settings.working_dir} && docker compose logs -f)."
        )
    return HealthReport(state=state, login=login, endpoints=endpoints)
