"""Traefik routing model for Nextcloud AIO: file-provider document or container labels."""

from dataclasses import dataclass, field

import yaml

ROUTER_HTTP = "nextcloud-aio-http"
ROUTER_HTTPS = "nextcloud-aio"
SERVICE = "nextcloud-aio"
MIDDLEWARE_REDIRECT = "nextcloud-aio-https-redirect"
MIDDLEWARE_HEADERS = "nextcloud-aio-secure-headers"


@dataclass
class Router:
    """One HTTP router."""

    name: str
    rule: str
    entrypoint: str
    service: str
    middlewares: list[str] = field(default_factory=list)
    certresolver: str | None = None  # None: plain HTTP router

    def to_dict(self) -> dict:
        d = {
            "rule": self.rule,
            "entryPoints": [self.entrypoint],
            "service": self.service,
        }
        if self.middlewares:
            d["middlewares"] = list(self.middlewares)
        if self.certresolver is not None:
            d["tls"] = {"certResolver": self.certresolver}
        return d

    def labels(self) -> dict:
        prefix = f"traefik.http.routers.{self.name}"
        labels = {
            f"{prefix}.rule": self.rule,
            f"{prefix}.entrypoints": self.entrypoint,
            f"{prefix}.service": self.service,
        }
        if self.middlewares:
            labels[f"{prefix}.middlewares"] = ",".join(self.middlewares)
        if self.certresolver is not None:
            labels[f"{prefix}.tls"] = "true"
            labels[f"{prefix}.tls.certresolver"] = self.certresolver
        return labels


@dataclass
class Routing:
    """Two routers, one backend service, two middlewares."""

    routers: list[Router]
    service_name: str
    backend_url: str
    backend_port: int
    referrer_policy: str = "same-origin"

    def to_dynamic_config(self) -> dict:
        """Document for Traefik's file provider."""
        return {
            "http": {
                "routers": {r.name: r.to_dict() for r in self.routers},
                "services": {
                    self.service_name: {
                        "loadBalancer": {"servers": [{"url": self.backend_url}]},
                    },
                },
                "middlewares": {
                    MIDDLEWARE_REDIRECT: {"redirectScheme": {"scheme": "https", "permanent": True}},
                    MIDDLEWARE_HEADERS: {
                        "headers": {
                            "hostsProxyHeaders": ["X-Forwarded-Host"],
                            "referrerPolicy": self.referrer_policy,
                            "stsSeconds": 15552000,
                            "stsIncludeSubdomains": True,
                        },
                    },
                },
            },
        }

    def to_labels(self, network) -> dict:
        """Equivalent docker labels for Traefik's docker provider."""
        labels = {
            "traefik.enable": "true",
            "traefik.docker.network": network,
        }
        for router in self.routers:
            labels.update(router.labels())
        labels[f"traefik.http.services.{self.service_name}.loadbalancer.server.port"] = str(self.backend_port)
        labels[f"traefik.http.middlewares.{MIDDLEWARE_REDIRECT}.redirectscheme.scheme"] = "https"
        labels[f"traefik.http.middlewares.{MIDDLEWARE_REDIRECT}.redirectscheme.permanent"] = "true"
        headers = f"traefik.http.middlewares.{MIDDLEWARE_HEADERS}.headers"
        labels[f"{headers}.hostsProxyHeaders"] = "X-Forwarded-Host"
        labels[f"{headers}.referrerPolicy"] = self.referrer_policy
        labels[f"{headers}.stsSeconds"] = "15552000"
        labels[f"{headers}.stsIncludeSubdomains"] = "true"
        return labels


def build_routing(settings, params) -> Routing:
    """Routing model for params.domain. Requires a non-empty domain."""
    if not params.domain:
        raise ValueError("A public domain is required to build Traefik routing")
    rule = f"Host(`{params.domain}`)"
    return Routing(
        routers=[
            Router(
                name=ROUTER_HTTP,
                rule=rule,
                entrypoint=settings.entrypoint_http,
                service=SERVICE,
                middlewares=[MIDDLEWARE_REDIRECT],
            ),
            Router(
                name=ROUTER_HTTPS,
                rule=rule,
                entrypoint=settings.entrypoint_https,
                service=SERVICE,
                middlewares=[MIDDLEWARE_HEADERS],
                certresolver=params.certresolver,
            ),
        ],
        service_name=SERVICE,
        backend_url=f"http://{settings.backend_host}:{settings.apache_port}",
        backend_port=settings.apache_port,
    )


def render_traefik_dynamic(settings, params) -> str:
    """Render the file-provider YAML for params.domain. Deterministic."""
    return yaml.safe_dump(build_routing(settings, params).to_dynamic_config(), sort_keys=False, default_flow_style=False)
