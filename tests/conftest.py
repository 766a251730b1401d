"""Shared pytest fixtures and test helpers for terminal_env tests."""

import subprocess
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pytest
from click.testing import CliRunner

from terminal_env.config import LINUX, Config
from terminal_env.errors import CommandError
from terminal_env.host import Host


class FakeHost(Host):
    """Host that records commands instead of running them.

    `available` answers command_exists; any command starting with one of
    the `failing` prefixes exits 1; installer URLs listed in
    `failing_installers` raise CommandError.
    """

    def __init__(
        self,
        config: Config,
        os_name: str = LINUX,
        available: Iterable[str] = (),
        failing: Iterable[Sequence[str]] = (),
        failing_installers: Iterable[str] = (),
    ):
        super().__init__(config, os_name=os_name)
        self.is_root = True
        self.available = set(available)
        self.failing: List[Tuple[str, ...]] = [tuple(p) for p in failing]
        self.failing_installers = set(failing_installers)
        self.outputs: Dict[Tuple[str, ...], str] = {}
        self.calls: List[List[str]] = []
        self.installers: List[str] = []

    def which(self, cmd: str) -> Optional[str]:
        return f"/usr/bin/{cmd}" if cmd in self.available else None

    def run(self, cmd, check=True, timeout=None, env=None, cwd=None, input_text=None):
        cmd = [str(c) for c in cmd]
        self.calls.append(cmd)
        for prefix in self.failing:
            if tuple(cmd[: len(prefix)]) == prefix:
                if check:
                    raise CommandError(cmd, 1, "", "failed")
                return subprocess.CompletedProcess(cmd, 1, "", "failed")
        return subprocess.CompletedProcess(cmd, 0, self.outputs.get(tuple(cmd), ""), "")

    def run_installer(self, url, args=(), interpreter="bash", env=None):
        self.installers.append(url)
        if url in self.failing_installers:
            raise CommandError(["installer", url], 1, "", "failed")
        return subprocess.CompletedProcess([interpreter, url], 0, "", "")

    def ran(self, *prefix: str) -> bool:
        """True if any recorded command starts with prefix."""
        return any(tuple(c[: len(prefix)]) == prefix for c in self.calls)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep PATH changes local to a test and skip the chsh step."""
    monkeypatch.setenv("PATH", "/usr/bin:/bin")
    monkeypatch.setenv("SHELL", "/bin/zsh")
    monkeypatch.setenv("TERMINAL_ENV_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("TERMINAL_ENV_SOURCE", str(tmp_path / "src"))


@pytest.fixture
def config(tmp_path: Path) -> Config:
    home = tmp_path / "home"
    source = tmp_path / "src"
    home.mkdir()
    source.mkdir()
    return Config(HOME=home, SOURCE_DIR=source)


@pytest.fixture
def host(config: Config) -> FakeHost:
    return FakeHost(config, available={"git", "python3", "bash"})


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()
