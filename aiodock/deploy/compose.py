"""Docker Compose generation for the AIO mastercontainer."""

from dataclasses import dataclass, field

import yaml

from aiodock.deploy.traefik import build_routing

METADATA_LABEL_PREFIX = "aiodock"


@dataclass
class ComposeService:
    """One compose service. Only the keys the mastercontainer needs."""

    image: str
    container_name: str
    hostname: str = ""
    init: bool = True
    restart: str = "always"
    volumes: list[str] = field(default_factory=list)
    ports: list[str] = field(default_factory=list)
    networks: list[str] = field(default_factory=list)
    environment: dict[str, str] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        d = {
            "image": self.image,
            "init": self.init,
            "restart": self.restart,
            "container_name": self.container_name,
        }
        if self.hostname:
            d["hostname"] = self.hostname
        if self.volumes:
            d["volumes"] = list(self.volumes)
        if self.ports:
            d["ports"] = list(self.ports)
        if self.networks:
            d["networks"] = list(self.networks)
        if self.environment:
            d["environment"] = [f"{k}={v}" for k, v in self.environment.items()]
        if self.labels:
            d["labels"] = dict(self.labels)
        return d


@dataclass
class ComposeDocument:
    """Top-level compose file: services, named volumes, external networks."""

    services: dict[str, ComposeService] = field(default_factory=dict)
    volumes: list[str] = field(default_factory=list)
    external_networks: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = {"services": {name: svc.to_dict() for name, svc in self.services.items()}}
        if self.volumes:
            d["volumes"] = {name: {"name": name} for name in self.volumes}
        if self.external_networks:
            d["networks"] = {name: {"external": True} for name in self.external_networks}
        return d

    def dump(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, default_flow_style=False)


def aio_environment(settings) -> dict[str, str]:
    """Environment of the mastercontainer, in a fixed order."""
    env = {
        "APACHE_PORT": str(settings.apache_port),
        "APACHE_IP_BINDING": settings.apache_ip_binding,
        "SKIP_DOMAIN_VALIDATION": "true" if settings.skip_domain_validation else "false",
    }
    if settings.data_dir:
        env["NEXTCLOUD_DATADIR"] = settings.data_dir
    return env


def metadata_labels(params) -> dict[str, str]:
    """Deployment metadata recorded on the service for later inspection."""
    labels = {
        f"{METADATA_LABEL_PREFIX}.public-ip": params.public_ip,
        f"{METADATA_LABEL_PREFIX}.certresolver": params.certresolver,
    }
    if params.domain:
        labels[f"{METADATA_LABEL_PREFIX}.domain"] = params.domain
    return labels


def build_compose(settings, params) -> ComposeDocument:
    """Compose model for one mastercontainer.

    In 'labels' routing mode with a domain, Traefik routing is attached as
    service labels; in 'file' mode it lives in a separate dynamic config.
    """
    labels = metadata_labels(params)
    if settings.routing_mode == "labels" and params.domain:
        labels.update(build_routing(settings, params).to_labels(settings.shared_network))

    service = ComposeService(
        image=settings.image,
        container_name=settings.service_name,
        hostname=settings.hostname,
        volumes=[
            f"{settings.config_volume}:/mnt/docker-aio-config",
            f"{settings.docker_socket}:/var/run/docker.sock:ro",
        ],
        ports=[f"{settings.aio_port}:8080"],
        networks=[settings.shared_network],
        environment=aio_environment(settings),
        labels=labels,
    )
    return ComposeDocument(
        services={settings.service_name: service},
        volumes=[settings.config_volume],
        external_networks=[settings.shared_network],
    )


def render_compose(settings, params) -> str:
    """Build docker-compose.yml string. Identical inputs give identical bytes."""
    return build_compose(settings, params).dump()
