"""Deployment settings: defaults, YAML loading and deep merge."""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml

ROUTING_MODES = ("file", "labels")
DOMAIN_STRUCTURES = ("subdomain", "apex")

DEFAULT_IP_SERVICES = [
    "https://ifconfig.me/ip",
    "https://icanhazip.com",
    "https://ipinfo.io/ip",
]


@dataclass
class Settings:
    """Everything a run needs to know about the host. Threaded through every stage."""

    # Filesystem layout
    working_dir: str = "/srv/nextcloud-aio"
    backup_root: str = "/root"
    backup_prefix: str = "nextcloud-aio-backup"

    # Container naming conventions
    container_filter: str = "nextcloud-aio"
    volume_prefix: str = "nextcloud_aio"
    service_name: str = "nextcloud-aio-mastercontainer"
    hostname: str = "nextcloud-aio"
    image: str = "ghcr.io/nextcloud-releases/all-in-one:latest"
    config_volume: str = "nextcloud_aio_mastercontainer"
    docker_socket: str = "/var/run/docker.sock"
    helper_image: str = "alpine:latest"

    # AIO environment
    aio_port: int = 8080
    apache_port: int = 11000
    apache_ip_binding: str = "0.0.0.0"
    skip_domain_validation: bool = True
    data_dir: str = "/mnt/docker-aio-data"

    # Traefik / Saltbox
    shared_network: str = "saltbox"
    proxy_container: str = "traefik"
    routing_mode: str = "file"
    traefik_dynamic_dir: str = "/opt/traefik/dynamic"
    restart_proxy: bool = True
    backend_host: str = "127.0.0.1"
    entrypoint_http: str = "web"
    entrypoint_https: str = "websecure"
    default_certresolver: str = "cfdns"

    # Public access
    base_domain: str = ""
    domain_structure: str = "subdomain"
    subdomain: str = "nextcloud"
    public_port: int = 443

    # Discovery and health polling
    ip_services: list[str] = field(default_factory=lambda: list(DEFAULT_IP_SERVICES))
    ip_lookup_timeout: float = 5
    health_timeout: int = 90
    health_interval: int = 5

    @property
    def compose_path(self) -> str:
        return os.path.join(self.working_dir, "docker-compose.yml")

    @property
    def dynamic_config_path(self) -> str:
        return os.path.join(self.traefik_dynamic_dir, "nextcloud-aio.yml")

    @property
    def public_domain(self) -> str:
        """Public hostname derived from base_domain and domain_structure ('' if unset)."""
        return resolve_domain(self.base_domain, self.domain_structure, self.subdomain)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Settings":
        """Build Settings from a (post-merge) dict. Unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ValueError(f"Unknown settings key(s): {', '.join(unknown)}")

        settings = cls(**d)
        if settings.routing_mode not in ROUTING_MODES:
            raise ValueError(
                f"Invalid routing_mode '{settings.routing_mode}'. Expected one of: {', '.join(ROUTING_MODES)}"
            )
        if settings.domain_structure not in DOMAIN_STRUCTURES:
            raise ValueError(
                f"Invalid domain_structure '{settings.domain_structure}'. "
                f"Expected one of: {', '.join(DOMAIN_STRUCTURES)}"
            )
        if not settings.ip_services:
            raise ValueError("ip_services must list at least one lookup URL")
        return settings


def resolve_domain(base_domain, structure="subdomain", subdomain="nextcloud"):
    """Compute the public hostname.

    'subdomain' -> '{subdomain}.{base_domain}', 'apex' -> base_domain.
    An empty base_domain yields ''.
    """
    base = (base_domain or "").strip().strip(".").lower()
    if not base:
        return ""
    if structure == "apex":
        return base
    if structure == "subdomain":
        return f"{subdomain}.{base}" if subdomain else base
    raise ValueError(f"Unknown domain structure '{structure}'")


def deep_merge(base, override):
    """Recursive dict merge. Override wins for scalars."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(config_path=None, overrides=None) -> Settings:
    """Load settings from an optional YAML file, then apply CLI overrides.

    Missing config_path means defaults only. Keys in overrides whose value
    is None are ignored so unset CLI flags don't clobber file values.
    """
    config = Settings().to_dict()

    if config_path is not None:
        if not os.path.isfile(config_path):
            raise FileNotFoundError(f"Settings file not found: {config_path}")
        with open(config_path) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Settings file {config_path} must contain a mapping")
        config = deep_merge(config, loaded)

    if overrides:
        config = deep_merge(config, {k: v for k, v in overrides.items() if v is not None})

    return Settings.from_dict(config)
