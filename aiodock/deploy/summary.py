"""DEPLOYMENT_INFO.txt: what was deployed and how to reach it."""

from aiodock.deploy.health import public_url

DEPLOYMENT_INFO_NAME = "DEPLOYMENT_INFO.txt"


def render_deployment_info(settings, params, deployed_at) -> str:
    """Render the post-run summary. deployed_at is passed in so output is reproducible."""
    if params.domain:
        public = f"{public_url(params.domain, settings.public_port)} (port {settings.public_port})"
    else:
        public = "(no public domain configured)"
    backup_glob = f"{settings.backup_root.rstrip('/')}/{settings.backup_prefix}-*"

    return f"""Nextcloud AIO Deployment Information
=====================================
Deployed: {deployed_at}
Server IP: {params.public_ip}
Certresolver: {params.certresolver}
Routing: {settings.routing_mode}

Access:
- AIO Login:        http://{params.public_ip}:{settings.aio_port}
- AIO Containers:   http://{params.public_ip}:{settings.aio_port}/containers
- Public Nextcloud: {public}
- Backend Apache:   {params.public_ip}:{settings.apache_port}

Management:
- Location: {settings.working_dir}
- Logs:     docker compose logs -f
- Status:   docker compose ps

Backup Location (if created): {backup_glob}
"""
