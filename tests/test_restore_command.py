"""restore subcommand: root gate comes before the confirmation prompt."""

import argparse
import asyncio
import os

import pytest

from aiodock.commands import restore as restore_command
from aiodock.errors import FatalError


class RecordingPrompter:
    def __init__(self, answer):
        self.answer = answer
        self.questions = []

    def confirm_word(self, question, word="yes"):
        self.questions.append(question)
        return self.answer


def _args(make_settings_file, tmp_path, yes=False):
    return argparse.Namespace(
        archive=str(tmp_path / "backups" / "nextcloud-aio-backup-t"),
        config=make_settings_file(),
        yes=yes,
    )


def test_non_root_is_refused_before_prompting(monkeypatch, make_settings_file, tmp_path):
    prompter = RecordingPrompter(answer=True)
    monkeypatch.setattr(restore_command, "running_as_root", lambda: False)
    monkeypatch.setattr(restore_command, "make_prompter", lambda: prompter)

    with pytest.raises(FatalError, match="root"):
        asyncio.run(restore_command._handle_restore(_args(make_settings_file, tmp_path)))
    assert prompter.questions == []


def test_root_is_asked_then_restores(monkeypatch, make_settings_file, tmp_path):
    prompter = RecordingPrompter(answer=False)
    restores = []

    async def fake_run_restore(engine, archive_dir, settings, confirmed=False):
        restores.append((archive_dir, confirmed))
        return confirmed

    monkeypatch.setattr(restore_command, "running_as_root", lambda: True)
    monkeypatch.setattr(restore_command, "make_prompter", lambda: prompter)
    monkeypatch.setattr(restore_command, "run_restore", fake_run_restore)
    args = _args(make_settings_file, tmp_path)

    asyncio.run(restore_command._handle_restore(args))

    assert prompter.questions == ["Continue?"]
    assert restores == [(args.archive, False)]


@pytest.mark.skipif(os.geteuid() == 0, reason="needs a non-root user")
def test_cli_restore_as_non_root(run_cli, make_settings_file, tmp_path):
    rc, stdout, _ = run_cli(
        "restore", str(tmp_path / "backups" / "nextcloud-aio-backup-t"), "--config", make_settings_file(), stdin="yes\n"
    )
    assert rc == 1
    assert "Restore must be run as root" in stdout
    assert "Continue?" not in stdout
