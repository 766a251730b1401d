"""Tests for package manager wrappers and soft-failure accounting."""

import pytest

from terminal_env.config import MACOS, Config
from terminal_env.errors import CommandError
from terminal_env.packages import (
    Apt,
    Homebrew,
    InstallSummary,
    ensure_homebrew,
    gem_install,
    install_each,
    package_manager,
    pip_install,
)
from terminal_env.shellrc import ShellRC

from conftest import FakeHost


@pytest.mark.parametrize(
    "installed, failed, ok",
    [(3, 0, True), (3, 1, True), (2, 2, False), (0, 1, False), (0, 0, True)],
)
def test_summary_half_failure_rule(installed: int, failed: int, ok: bool) -> None:
    summary = InstallSummary(
        installed=[f"i{n}" for n in range(installed)],
        failed=[f"f{n}" for n in range(failed)],
    )
    assert summary.ok is ok


def test_install_each_counts_soft_failures() -> None:
    def install(name: str) -> None:
        if name == "bad":
            raise CommandError(["x", name], 1)

    summary = install_each("test", ["good", "bad", "present"], install, lambda n: n == "present")
    assert summary.installed == ["good"]
    assert summary.failed == ["bad"]
    assert summary.skipped == ["present"]
    assert "1 failed (bad)" in summary.describe()


def test_package_manager_by_os(config: Config) -> None:
    assert isinstance(package_manager(FakeHost(config, os_name=MACOS)), Homebrew)
    assert isinstance(package_manager(FakeHost(config)), Apt)


def test_apt_batch_install(host: FakeHost) -> None:
    summary = Apt(host).install(["tmux", "zsh"])
    assert summary.installed == ["tmux", "zsh"]
    assert ["apt-get", "install", "-y", "tmux", "zsh"] in host.calls


def test_apt_skips_installed(host: FakeHost) -> None:
    host.outputs[("dpkg-query", "-W", "-f=${Status}", "zsh")] = "install ok installed"
    summary = Apt(host).install(["zsh", "tmux"])
    assert summary.skipped == ["zsh"]
    assert summary.installed == ["tmux"]


def test_batch_failure_falls_back_to_single_installs(config: Config) -> None:
    host = FakeHost(
        config,
        failing=[("apt-get", "install", "-y", "good", "bad"), ("apt-get", "install", "-y", "bad")],
    )
    summary = Apt(host).install(["good", "bad"])
    assert summary.installed == ["good"]
    assert summary.failed == ["bad"]


def test_homebrew_probe_uses_brew_list(config: Config) -> None:
    host = FakeHost(config, os_name=MACOS, failing=[("brew", "list", "jq")])
    summary = Homebrew(host).install(["jq", "fzf"])
    assert summary.skipped == ["fzf"]
    assert summary.installed == ["jq"]
    assert ["brew", "install", "jq"] in host.calls


def test_gem_install_skips_present_gems(config: Config) -> None:
    host = FakeHost(config, failing=[("gem", "list", "-i", "^pry$")])
    summary = gem_install(host, ["bundler", "pry"])
    assert summary.skipped == ["bundler"]
    assert summary.installed == ["pry"]
    assert ["gem", "install", "bundler"] not in host.calls


def test_pip_install_uses_given_interpreter(host: FakeHost) -> None:
    pip_install(host, "/venv/bin/python", ["black"])
    assert ["/venv/bin/python", "-m", "pip", "install", "--upgrade", "black"] in host.calls


def test_ensure_homebrew_present(config: Config) -> None:
    host = FakeHost(config, os_name=MACOS, available={"brew"})
    assert ensure_homebrew(host, ShellRC(config.ZSHRC))
    assert host.installers == []


def test_ensure_homebrew_installs_and_adds_shellenv(config: Config) -> None:
    host = FakeHost(config, os_name=MACOS)
    assert ensure_homebrew(host, ShellRC(config.ZSHRC))
    assert host.installers == [config.HOMEBREW_INSTALLER]
    assert "brew shellenv" in config.ZSHRC.read_text()


def test_ensure_homebrew_failure(config: Config) -> None:
    host = FakeHost(config, os_name=MACOS, failing_installers={config.HOMEBREW_INSTALLER})
    assert ensure_homebrew(host, ShellRC(config.ZSHRC)) is False
