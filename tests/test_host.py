"""Tests for command execution and filesystem helpers on the real Host."""

import os
import sys
from pathlib import Path

import pytest
import requests

from terminal_env.config import LINUX, Config
from terminal_env.errors import CommandError
from terminal_env.host import Host


@pytest.fixture
def real_host(config: Config) -> Host:
    return Host(config, os_name=LINUX)


def test_run_captures_output(real_host: Host) -> None:
    result = real_host.run([sys.executable, "-c", "print('hello')"])
    assert result.stdout.strip() == "hello"


def test_run_raises_on_failure(real_host: Host) -> None:
    with pytest.raises(CommandError) as exc:
        real_host.run([sys.executable, "-c", "import sys; sys.exit(3)"])
    assert exc.value.returncode == 3


def test_run_without_check_returns_status(real_host: Host) -> None:
    result = real_host.run([sys.executable, "-c", "import sys; sys.exit(2)"], check=False)
    assert result.returncode == 2


def test_missing_executable_is_command_error(real_host: Host) -> None:
    with pytest.raises(CommandError) as exc:
        real_host.run(["definitely-not-a-real-command-xyz"])
    assert exc.value.returncode == 127
    assert real_host.succeeds(["definitely-not-a-real-command-xyz"]) is False


def test_timeout_is_command_error(real_host: Host) -> None:
    with pytest.raises(CommandError) as exc:
        real_host.run([sys.executable, "-c", "import time; time.sleep(5)"], timeout=1)
    assert exc.value.timed_out


def test_backup_file_uses_timestamp_suffix(real_host: Host, tmp_path: Path) -> None:
    target = tmp_path / "config.txt"
    target.write_text("data")
    backup = real_host.backup_file(target)
    assert backup is not None
    assert backup.name.startswith("config.txt.bak.")
    assert len(backup.name.rsplit(".", 1)[-1]) == 14
    assert backup.read_text() == "data"
    assert real_host.backup_file(tmp_path / "missing") is None


def test_ensure_directory(real_host: Host, tmp_path: Path) -> None:
    target = tmp_path / "a" / "b"
    assert real_host.ensure_directory(target)
    assert target.is_dir()
    assert real_host.ensure_directory(target)


def test_git_clone_skips_existing(real_host: Host, tmp_path: Path) -> None:
    dest = tmp_path / "repo"
    dest.mkdir()
    assert real_host.git_clone("https://example.invalid/repo.git", dest) is False


def test_write_executable(real_host: Host, tmp_path: Path) -> None:
    script = real_host.write_executable(tmp_path / "bin" / "tool", "#!/bin/sh\n")
    assert os.access(script, os.X_OK)


def test_download_failure_is_command_error(
    real_host: Host, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fail(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", fail)
    with pytest.raises(CommandError, match="download"):
        real_host.download("https://example.invalid/install.sh", tmp_path / "x")


def test_sudo_prefix(real_host: Host) -> None:
    real_host.is_root = True
    assert real_host.sudo(["apt-get", "update"]) == ["apt-get", "update"]
