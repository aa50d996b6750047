"""CLI tests: argument handling, render output and dry-run workflows (no Docker needed)."""

import yaml


def test_help_lists_subcommands(run_cli):
    rc, stdout, _ = run_cli("--help")
    assert rc == 0
    for command in ("deploy", "backup", "restore", "status", "render", "teardown"):
        assert command in stdout


def test_deploy_help(run_cli):
    rc, stdout, _ = run_cli("deploy", "--help")
    assert rc == 0
    assert "--public-ip" in stdout
    assert "--no-backup" in stdout
    assert "--skip-health-checks" in stdout


# ── render ──────────────────────────────────────────────────────


class TestRender:
    def test_render_file_mode(self, run_cli):
        rc, stdout, _ = run_cli("render", "--public-ip", "203.0.113.5", "--domain", "example.com")
        assert rc == 0
        assert "# /srv/nextcloud-aio/docker-compose.yml" in stdout
        assert "aiodock.public-ip: 203.0.113.5" in stdout
        assert "# /opt/traefik/dynamic/nextcloud-aio.yml" in stdout
        assert "Host(`nextcloud.example.com`)" in stdout
        assert "certResolver: cfdns" in stdout

    def test_render_compose_parses(self, run_cli):
        rc, stdout, _ = run_cli("render", "--public-ip", "203.0.113.5")
        assert rc == 0
        body = stdout.split("\n", 1)[1]
        doc = yaml.safe_load(body)
        assert "nextcloud-aio-mastercontainer" in doc["services"]

    def test_render_labels_mode(self, run_cli):
        rc, stdout, _ = run_cli(
            "render",
            "--public-ip", "203.0.113.5",
            "--domain", "example.com",
            "--domain-structure", "apex",
            "--routing", "labels",
            "--certresolver", "letsencrypt",
        )
        assert rc == 0
        assert "traefik.http.routers.nextcloud-aio.rule: Host(`example.com`)" in stdout
        assert "traefik.http.routers.nextcloud-aio.tls.certresolver: letsencrypt" in stdout
        assert "nextcloud-aio.yml" not in stdout

    def test_render_is_deterministic(self, run_cli):
        args = ("render", "--public-ip", "203.0.113.5", "--domain", "example.com")
        assert run_cli(*args)[1] == run_cli(*args)[1]

    def test_render_invalid_ip(self, run_cli):
        rc, stdout, _ = run_cli("render", "--public-ip", "203.0.113")
        assert rc == 1
        assert "Invalid IP format" in stdout

    def test_render_bad_config(self, run_cli, tmp_path):
        rc, stdout, _ = run_cli("render", "--public-ip", "203.0.113.5", "--config", str(tmp_path / "missing.yaml"))
        assert rc == 1
        assert "Settings file not found" in stdout

    def test_render_unknown_setting(self, run_cli, make_settings_file):
        config = make_settings_file(bogus=1)
        rc, stdout, _ = run_cli("render", "--public-ip", "203.0.113.5", "--config", config)
        assert rc == 1
        assert "bogus" in stdout


# ── deploy --dry-run ────────────────────────────────────────────


class TestDeployDryRun:
    def test_deploy(self, run_cli, make_settings_file, tmp_path):
        config = make_settings_file()
        rc, stdout, _ = run_cli(
            "deploy",
            "--config", config,
            "--domain", "example.com",
            "--public-ip", "203.0.113.5",
            "--yes",
            "--dry-run",
            stdin="",
        )
        assert rc == 0, stdout
        assert "[dry-run] skipping root check" in stdout
        assert f"[dry-run] write {tmp_path}/aio/docker-compose.yml" in stdout
        assert f"[dry-run] write {tmp_path}/traefik/nextcloud-aio.yml" in stdout
        assert "[dry-run] docker compose pull" in stdout
        assert "[dry-run] docker compose up -d" in stdout
        assert "dry-run (not deployed)" in stdout
        assert "Public IP: 203.0.113.5 (manual)" in stdout
        assert "using default: cfdns" in stdout
        assert not (tmp_path / "aio").exists()

    def test_deploy_command_sequence(self, run_cli, make_settings_file):
        config = make_settings_file()
        rc, stdout, _ = run_cli(
            "deploy", "--config", config, "--domain", "example.com",
            "--public-ip", "203.0.113.5", "--yes", "--dry-run",
            stdin="",
        )
        assert rc == 0
        dry_run_lines = [l for l in stdout.splitlines() if l.startswith("[dry-run]")]

        def first(fragment):
            return next(i for i, l in enumerate(dry_run_lines) if fragment in l)

        assert first("docker --version") < first("docker compose version") < first("docker network inspect")
        assert first("docker-compose.yml") < first("docker compose pull") < first("docker compose up -d")

    def test_labels_mode_writes_no_dynamic_config(self, run_cli, make_settings_file):
        config = make_settings_file()
        rc, stdout, _ = run_cli(
            "deploy", "--config", config, "--domain", "example.com", "--routing", "labels",
            "--public-ip", "203.0.113.5", "--yes", "--dry-run",
            stdin="",
        )
        assert rc == 0
        assert "nextcloud-aio.yml" not in stdout
        assert "attached as container labels" in stdout

    def test_deploy_without_ip_fails(self, run_cli, make_settings_file):
        config = make_settings_file()
        rc, stdout, _ = run_cli("deploy", "--config", config, "--yes", "--dry-run", stdin="")
        assert rc == 1
        assert "Public IP unknown" in stdout

    def test_non_interactive_declines_warnings(self, run_cli, make_settings_file):
        # In dry-run no Traefik container can be inspected, so there is always a warning
        config = make_settings_file()
        rc, stdout, _ = run_cli(
            "deploy", "--config", config, "--public-ip", "203.0.113.5", "--dry-run",
            stdin="",
        )
        assert rc == 1
        assert "warnings not accepted" in stdout


# ── teardown --dry-run ──────────────────────────────────────────


def test_teardown_dry_run(run_cli, make_settings_file, tmp_path):
    (tmp_path / "aio").mkdir()
    config = make_settings_file()
    rc, stdout, _ = run_cli("teardown", "--config", config, "--yes", "--dry-run", stdin="")
    assert rc == 0
    assert f"[dry-run] rm -rf {tmp_path}/aio" in stdout
    assert (tmp_path / "aio").is_dir()


def test_teardown_declined(run_cli, make_settings_file, tmp_path):
    (tmp_path / "aio").mkdir()
    config = make_settings_file()
    rc, stdout, _ = run_cli("teardown", "--config", config, "--dry-run", stdin="")
    assert rc == 0
    assert "Teardown cancelled." in stdout
    assert (tmp_path / "aio").is_dir()
