"""Deploy library: compose + Traefik rendering, deploy orchestration, health checks."""

from aiodock.deploy.compose import build_compose, render_compose
from aiodock.deploy.health import (
    HealthState,
    ProbeResult,
    classify_status,
    run_health_checks,
    wait_until_ready,
)
from aiodock.deploy.orchestrate import run_deploy
from aiodock.deploy.params import DeployParams
from aiodock.deploy.summary import DEPLOYMENT_INFO_NAME, render_deployment_info
from aiodock.deploy.traefik import build_routing, render_traefik_dynamic

__all__ = [
    "DEPLOYMENT_INFO_NAME",
    "DeployParams",
    "HealthState",
    "ProbeResult",
    "build_compose",
    "build_routing",
    "classify_status",
    "render_compose",
    "render_deployment_info",
    "render_traefik_dynamic",
    "run_deploy",
    "run_health_checks",
    "wait_until_ready",
]
