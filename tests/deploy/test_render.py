"""Compose and Traefik dynamic-config rendering."""

import pytest
import yaml

from aiodock.deploy import DeployParams, build_routing, render_compose, render_deployment_info, render_traefik_dynamic
from aiodock.settings import Settings


@pytest.fixture
def params():
    return DeployParams(public_ip="203.0.113.5", certresolver="cfdns", domain="nextcloud.example.com")


# ── render_compose ──────────────────────────────────────────────


class TestRenderCompose:
    def test_service_shape(self, params):
        doc = yaml.safe_load(render_compose(Settings(), params))
        svc = doc["services"]["nextcloud-aio-mastercontainer"]

        assert svc["image"] == "ghcr.io/nextcloud-releases/all-in-one:latest"
        assert svc["container_name"] == "nextcloud-aio-mastercontainer"
        assert svc["restart"] == "always"
        assert svc["init"] is True
        assert svc["volumes"] == [
            "nextcloud_aio_mastercontainer:/mnt/docker-aio-config",
            "/var/run/docker.sock:/var/run/docker.sock:ro",
        ]
        assert svc["ports"] == ["8080:8080"]
        assert svc["networks"] == ["saltbox"]

    def test_hostname_is_its_own_setting(self, params):
        svc = yaml.safe_load(render_compose(Settings(), params))["services"]["nextcloud-aio-mastercontainer"]
        assert svc["hostname"] == "nextcloud-aio"

        settings = Settings(hostname="cloud", container_filter="aio-")
        svc = yaml.safe_load(render_compose(settings, params))["services"]["nextcloud-aio-mastercontainer"]
        assert svc["hostname"] == "cloud"

    def test_environment(self, params):
        svc = yaml.safe_load(render_compose(Settings(), params))["services"]["nextcloud-aio-mastercontainer"]
        assert svc["environment"] == [
            "APACHE_PORT=11000",
            "APACHE_IP_BINDING=0.0.0.0",
            "SKIP_DOMAIN_VALIDATION=true",
            "NEXTCLOUD_DATADIR=/mnt/docker-aio-data",
        ]

    def test_empty_data_dir_omits_datadir(self, params):
        svc = yaml.safe_load(render_compose(Settings(data_dir=""), params))["services"]["nextcloud-aio-mastercontainer"]
        assert not any(e.startswith("NEXTCLOUD_DATADIR=") for e in svc["environment"])

    def test_top_level_volume_and_network(self, params):
        doc = yaml.safe_load(render_compose(Settings(), params))
        assert doc["volumes"] == {"nextcloud_aio_mastercontainer": {"name": "nextcloud_aio_mastercontainer"}}
        assert doc["networks"] == {"saltbox": {"external": True}}

    def test_metadata_labels(self, params):
        result = render_compose(Settings(), params)
        labels = yaml.safe_load(result)["services"]["nextcloud-aio-mastercontainer"]["labels"]
        assert labels["aiodock.public-ip"] == "203.0.113.5"
        assert labels["aiodock.certresolver"] == "cfdns"
        assert labels["aiodock.domain"] == "nextcloud.example.com"
        assert "203.0.113.5" in result

    def test_file_mode_has_no_traefik_labels(self, params):
        labels = yaml.safe_load(render_compose(Settings(), params))["services"]["nextcloud-aio-mastercontainer"]["labels"]
        assert not any(k.startswith("traefik.") for k in labels)

    def test_labels_mode(self, params):
        settings = Settings(routing_mode="labels")
        labels = yaml.safe_load(render_compose(settings, params))["services"]["nextcloud-aio-mastercontainer"]["labels"]
        assert labels["traefik.enable"] == "true"
        assert labels["traefik.docker.network"] == "saltbox"
        assert labels["traefik.http.routers.nextcloud-aio.rule"] == "Host(`nextcloud.example.com`)"
        assert labels["traefik.http.routers.nextcloud-aio.tls.certresolver"] == "cfdns"
        assert labels["traefik.http.routers.nextcloud-aio-http.middlewares"] == "nextcloud-aio-https-redirect"
        assert labels["traefik.http.services.nextcloud-aio.loadbalancer.server.port"] == "11000"

    def test_labels_mode_without_domain(self):
        settings = Settings(routing_mode="labels")
        params = DeployParams(public_ip="203.0.113.5")
        labels = yaml.safe_load(render_compose(settings, params))["services"]["nextcloud-aio-mastercontainer"]["labels"]
        assert "traefik.enable" not in labels
        assert "aiodock.domain" not in labels

    def test_deterministic(self, params):
        assert render_compose(Settings(), params) == render_compose(Settings(), params)

    def test_values_needing_quotes_survive(self):
        settings = Settings(apache_ip_binding="::", data_dir="/mnt/data: with colon")
        params = DeployParams(public_ip="203.0.113.5", certresolver="yes")
        svc = yaml.safe_load(render_compose(settings, params))["services"]["nextcloud-aio-mastercontainer"]
        assert "APACHE_IP_BINDING=::" in svc["environment"]
        assert "NEXTCLOUD_DATADIR=/mnt/data: with colon" in svc["environment"]
        assert svc["labels"]["aiodock.certresolver"] == "yes"


# ── render_traefik_dynamic ──────────────────────────────────────


class TestRenderTraefikDynamic:
    def test_routers(self, params):
        http = yaml.safe_load(render_traefik_dynamic(Settings(), params))["http"]
        plain = http["routers"]["nextcloud-aio-http"]
        secure = http["routers"]["nextcloud-aio"]

        assert plain["rule"] == "Host(`nextcloud.example.com`)"
        assert plain["entryPoints"] == ["web"]
        assert plain["middlewares"] == ["nextcloud-aio-https-redirect"]
        assert "tls" not in plain

        assert secure["entryPoints"] == ["websecure"]
        assert secure["tls"] == {"certResolver": "cfdns"}
        assert secure["middlewares"] == ["nextcloud-aio-secure-headers"]
        assert secure["service"] == "nextcloud-aio"

    def test_service_points_at_apache_port(self, params):
        http = yaml.safe_load(render_traefik_dynamic(Settings(), params))["http"]
        servers = http["services"]["nextcloud-aio"]["loadBalancer"]["servers"]
        assert servers == [{"url": "http://127.0.0.1:11000"}]

    def test_middlewares(self, params):
        middlewares = yaml.safe_load(render_traefik_dynamic(Settings(), params))["http"]["middlewares"]
        assert middlewares["nextcloud-aio-https-redirect"]["redirectScheme"] == {"scheme": "https", "permanent": True}
        assert middlewares["nextcloud-aio-secure-headers"]["headers"]["stsSeconds"] == 15552000

    def test_custom_entrypoints_and_resolver(self):
        settings = Settings(entrypoint_http="http", entrypoint_https="https", backend_host="nextcloud-aio-apache")
        params = DeployParams(public_ip="203.0.113.5", certresolver="letsencrypt", domain="example.com")
        http = yaml.safe_load(render_traefik_dynamic(settings, params))["http"]
        assert http["routers"]["nextcloud-aio"]["entryPoints"] == ["https"]
        assert http["routers"]["nextcloud-aio"]["tls"]["certResolver"] == "letsencrypt"
        assert http["services"]["nextcloud-aio"]["loadBalancer"]["servers"][0]["url"] == "http://nextcloud-aio-apache:11000"

    def test_deterministic(self, params):
        assert render_traefik_dynamic(Settings(), params) == render_traefik_dynamic(Settings(), params)

    def test_requires_domain(self):
        with pytest.raises(ValueError, match="domain"):
            build_routing(Settings(), DeployParams(public_ip="203.0.113.5"))


# ── render_deployment_info ──────────────────────────────────────


def test_deployment_info(params):
    info = render_deployment_info(Settings(), params, "Mon Oct 19 12:00:00 2026")
    assert "Deployed: Mon Oct 19 12:00:00 2026" in info
    assert "Server IP: 203.0.113.5" in info
    assert "AIO Login:        http://203.0.113.5:8080" in info
    assert "Public Nextcloud: https://nextcloud.example.com (port 443)" in info
    assert "Backend Apache:   203.0.113.5:11000" in info
    assert "/root/nextcloud-aio-backup-*" in info


def test_deployment_info_without_domain():
    info = render_deployment_info(Settings(), DeployParams(public_ip="203.0.113.5"), "now")
    assert "(no public domain configured)" in info
