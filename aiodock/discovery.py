"""Discovery: public IPv4 address and Traefik certificate resolver."""

import logging
import re

import httpx

from aiodock.errors import FatalError
from aiodock.proxy import parse_certresolver

logger = logging.getLogger(__name__)

DEFAULT_CERTRESOLVER = "cfdns"

_IPV4_RE = re.compile(r"^[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}$")


def is_valid_ipv4(value) -> bool:
    """Strict dotted-quad check (same rule for lookups and manual entry)."""
    return bool(value) and bool(_IPV4_RE.match(value))


async def _lookup(client, url, timeout):
    try:
        resp = await client.get(url, timeout=timeout)
    except httpx.HTTPError as e:
        logger.debug(f"  {url}: {e}")
        return None
    if resp.status_code != 200:
        logger.debug(f"  {url}: HTTP {resp.status_code}")
        return None
    return resp.text.strip()


async def discover_public_ip(services, client=None, manual_ip=None, prompt=None, timeout=5, dry_run=False) -> str:
    """Return this host's public IPv4.

    Tries each lookup service in order and accepts the first body that is a
    dotted quad. If all fail, falls back to manual_ip, or to prompt(question)
    when no manual value was supplied.

    Raises:
        FatalError: no service answered and manual_ip is missing or invalid.
    """
    logger.info("Detecting public IP...")
    if dry_run:
        for url in services:
            logger.info(f"[dry-run] GET {url}")
    else:
        owns_client = client is None
        if owns_client:
            client = httpx.AsyncClient(follow_redirects=True)
        try:
            for url in services:
                candidate = await _lookup(client, url, timeout)
                if is_valid_ipv4(candidate):
                    logger.info(f"  Public IP: {candidate} (via {url})")
                    return candidate
        finally:
            if owns_client:
                await client.aclose()

    if dry_run:
        logger.info("  Skipping lookup in dry-run mode")
    else:
        logger.warning("  Could not auto-detect a valid public IP")
    if manual_ip is None and prompt is not None:
        manual_ip = prompt("Enter your public IP manually: ")
    if manual_ip is None:
        raise FatalError("Public IP unknown. Pass --public-ip or enter it when prompted.")
    manual_ip = manual_ip.strip()
    if not is_valid_ipv4(manual_ip):
        raise FatalError(f"Invalid IP format: {manual_ip!r}")
    logger.info(f"  Public IP: {manual_ip} (manual)")
    return manual_ip


async def detect_certresolver(inspector, default=DEFAULT_CERTRESOLVER) -> str:
    """Certificate resolver name from the Traefik process arguments, or default.

    A wrong guess only surfaces later as a certificate issuance failure,
    so detection never fails the run.
    """
    logger.info("Detecting Traefik SSL certresolver...")
    resolver = parse_certresolver(await inspector.args())
    if resolver:
        logger.info(f"  Detected certresolver: {resolver}")
        return resolver
    logger.warning(f"  Could not auto-detect certresolver, using default: {default}")
    return default
