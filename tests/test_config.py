"""Tests for configuration defaults and OS detection."""

from pathlib import Path

import pytest

from terminal_env.config import LINUX, MACOS, Config, detect_os
from terminal_env.errors import UnsupportedOSError


@pytest.mark.parametrize(
    "platform_name, expected",
    [("darwin", MACOS), ("linux", LINUX), ("linux2", LINUX)],
)
def test_detect_os(platform_name: str, expected: str) -> None:
    assert detect_os(platform_name) == expected


def test_detect_os_rejects_windows() -> None:
    with pytest.raises(UnsupportedOSError, match="win32"):
        detect_os("win32")


def test_paths_derive_from_home_and_source(tmp_path: Path) -> None:
    config = Config(HOME=tmp_path / "h", SOURCE_DIR=tmp_path / "s")
    assert config.ZSHRC == tmp_path / "h" / ".zshrc"
    assert config.LOCAL_BIN == tmp_path / "h" / ".local" / "bin"
    assert config.LOG_FILE == tmp_path / "s" / "install_log.txt"
    assert config.STATE_FILE == tmp_path / "s" / "install_state.json"
    assert config.template_script("node") == (
        tmp_path / "h" / ".local" / "share" / "node-templates" / "basic_node_project.sh"
    )


def test_environment_overrides(tmp_path: Path) -> None:
    config = Config()
    assert config.HOME == tmp_path / "home"
    assert config.SOURCE_DIR == tmp_path / "src"


def test_explicit_log_file_is_kept(tmp_path: Path) -> None:
    config = Config(LOG_FILE=tmp_path / "custom.log")
    assert config.LOG_FILE == tmp_path / "custom.log"


def test_essential_dirs_include_templates(config: Config) -> None:
    dirs = config.essential_dirs
    for lang in ("python", "node", "ruby"):
        assert config.templates_dir(lang) in dirs
    assert config.HOME / ".tmux" / "plugins" in dirs
