"""Tests for the terminal-env command line."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from terminal_env import __version__
from terminal_env import cli as cli_module
from terminal_env import installer as installer_module
from terminal_env.cli import cli
from terminal_env.config import Config
from terminal_env.errors import UnsupportedOSError
from terminal_env.installer import STEP_NAMES, Step

from conftest import FakeHost


@pytest.fixture
def fake_hosts(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    (tmp_path / "home").mkdir()
    (tmp_path / "src").mkdir()
    hosts = []

    def make(config: Config) -> FakeHost:
        h = FakeHost(config, available={"git", "python3"})
        hosts.append(h)
        return h

    monkeypatch.setattr(cli_module, "make_host", make)
    return hosts


@pytest.fixture
def quiet_steps(monkeypatch: pytest.MonkeyPatch):
    ran = []
    steps = [
        Step(name, name, lambda h, n=name: ran.append(n), required=(name == "core"))
        for name in STEP_NAMES
    ]
    monkeypatch.setattr(installer_module, "STEPS", steps)
    return ran


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for command in ("install", "step", "status", "doctor", "new"):
        assert command in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_install_with_flags(
    cli_runner: CliRunner, fake_hosts, quiet_steps, tmp_path: Path
) -> None:
    result = cli_runner.invoke(cli, ["install", "--no-python", "--no-node", "--ruby"])
    assert result.exit_code == 0, result.output
    assert quiet_steps == ["core", "ruby", "configs", "functions"]
    log = (tmp_path / "src" / "install_log.txt").read_text()
    assert "Run started" in log
    assert "Running step ruby" in log
    state = json.loads((tmp_path / "src" / "install_state.json").read_text())
    assert state["languages"] == {"python": False, "node": False, "ruby": True}


def test_install_custom_log_file(
    cli_runner: CliRunner, fake_hosts, quiet_steps, tmp_path: Path
) -> None:
    log = tmp_path / "logs" / "run.log"
    result = cli_runner.invoke(cli, ["--log-file", str(log), "install", "--yes"])
    assert result.exit_code == 0, result.output
    assert "Running step core" in log.read_text()


def test_install_recover(cli_runner: CliRunner, fake_hosts, quiet_steps) -> None:
    cli_runner.invoke(cli, ["install", "--yes"])
    quiet_steps.clear()
    result = cli_runner.invoke(cli, ["install", "--recover"])
    assert result.exit_code == 0, result.output
    assert quiet_steps == []


def test_unsupported_os_exits_1(
    cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch, quiet_steps
) -> None:
    def unsupported(config: Config):
        raise UnsupportedOSError("win32")

    monkeypatch.setattr(cli_module, "make_host", unsupported)
    result = cli_runner.invoke(cli, ["install", "--yes"])
    assert result.exit_code == 1
    assert "Unsupported operating system" in result.output
    assert quiet_steps == []


def test_step_command(cli_runner: CliRunner, fake_hosts, quiet_steps) -> None:
    result = cli_runner.invoke(cli, ["step", "configs"])
    assert result.exit_code == 0, result.output
    assert quiet_steps == ["configs"]


def test_unknown_step_command(cli_runner: CliRunner, fake_hosts, quiet_steps) -> None:
    result = cli_runner.invoke(cli, ["step", "perl"])
    assert result.exit_code == 1
    assert "Unknown setup step: perl" in result.output


def test_status_without_state(cli_runner: CliRunner, fake_hosts) -> None:
    result = cli_runner.invoke(cli, ["status"])
    assert result.exit_code == 1
    assert "No install state" in result.output


def test_status_after_install(cli_runner: CliRunner, fake_hosts, quiet_steps) -> None:
    cli_runner.invoke(cli, ["install", "--yes"])
    result = cli_runner.invoke(cli, ["status"])
    assert result.exit_code == 0
    assert "SUCCESS" in result.output


def test_doctor_reports_problems(cli_runner: CliRunner, fake_hosts) -> None:
    result = cli_runner.invoke(cli, ["doctor"])
    assert result.exit_code == 1
    assert "doctor --fix" in result.output


def test_new_project(cli_runner: CliRunner, fake_hosts, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["new", "python", "demo", "--dir", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "demo" / "demo" / "main.py").is_file()
    assert not (tmp_path / "src" / "install_log.txt").exists()


def test_new_project_bad_name(cli_runner: CliRunner, fake_hosts, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["new", "node", "-x", "--dir", str(tmp_path)])
    assert result.exit_code != 0


def test_new_project_bracketed_name(cli_runner: CliRunner, fake_hosts, tmp_path: Path) -> None:
    result = cli_runner.invoke(cli, ["new", "python", "[/x]", "--dir", str(tmp_path)])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "[/x]" in result.output


def test_new_project_existing_dir(cli_runner: CliRunner, fake_hosts, tmp_path: Path) -> None:
    (tmp_path / "taken").mkdir()
    result = cli_runner.invoke(cli, ["new", "ruby", "taken", "--dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "already exists" in result.output
