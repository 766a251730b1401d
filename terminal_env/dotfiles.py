"""
Config and Function Installation
--------------------------------------------------

Copies the tmux, Neovim and git configuration into the home directory and
installs the shell function library. Files come from the checkout's
configs/ and scripts/ directories when present, otherwise from the
defaults bundled with the package.
"""

import filecmp
import logging
import shutil
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from terminal_env.errors import StepError
from terminal_env.host import Host
from terminal_env.shellrc import ShellRC, bundled_file
from terminal_env.ui import print_success

logger = logging.getLogger(__name__)

NEW = "new"
UPDATED = "updated"
UNCHANGED = "unchanged"


def install_file(src: Path, dest: Path, backup: Callable[[Path], Optional[Path]]) -> str:
    """Copy src to dest, backing up a differing destination first."""
    if dest.is_file() and filecmp.cmp(src, dest, shallow=False):
        logger.info(f"File {dest} is already up-to-date.")
        return UNCHANGED
    status = NEW
    if dest.is_file():
        backup(dest)
        status = UPDATED
    dest.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dest)
    logger.info(f"Copied {src} to {dest}.")
    return status


class ConfigsInstaller:
    name = "configs"

    def __init__(self, host: Host):
        self.host = host
        self.config = host.config
        self.configs_dir = self.config.SOURCE_DIR / "configs"

    def _source(self, repo_relative: str, bundled: str) -> Path:
        candidate = self.configs_dir / repo_relative
        if candidate.is_file():
            return candidate
        return bundled_file(*bundled.split("/"))

    def _lua_root(self) -> Path:
        candidate = self.configs_dir / "neovim" / "lua"
        if candidate.is_dir():
            return candidate
        return bundled_file("nvim", "lua")

    def plan(self) -> List[Tuple[Path, Path]]:
        """(source, destination) pairs for every managed config file."""
        nvim_dir = self.config.CONFIG_DIR / "nvim"
        pairs = [
            (self._source("tmux/.tmux.conf", "tmux.conf"), self.config.HOME / ".tmux.conf"),
            (self._source("neovim/init.lua", "nvim/init.lua"), nvim_dir / "init.lua"),
            (self._source("git/.gitconfig", "gitconfig"), self.config.HOME / ".gitconfig"),
        ]
        lua_root = self._lua_root()
        for src in sorted(lua_root.rglob("*.lua")):
            pairs.append((src, nvim_dir / "lua" / src.relative_to(lua_root)))
        return pairs

    def run(self) -> None:
        failed = []
        counts = {NEW: 0, UPDATED: 0, UNCHANGED: 0}
        for src, dest in self.plan():
            try:
                counts[install_file(src, dest, self.host.backup_file)] += 1
            except OSError as e:
                logger.error(f"Failed to copy {src} to {dest}: {e}")
                failed.append(dest.name)
        logger.info(
            f"Configs: {counts[NEW]} new, {counts[UPDATED]} updated, "
            f"{counts[UNCHANGED]} unchanged"
        )
        if failed:
            raise StepError(self.name, f"could not install {', '.join(failed)}")
        print_success("Configuration files installed.")


class FunctionsInstaller:
    name = "functions"

    def __init__(self, host: Host):
        self.host = host
        self.config = host.config

    @property
    def destination(self) -> Path:
        return self.config.LOCAL_BIN / "functions.sh"

    def source(self) -> Path:
        candidate = self.config.SOURCE_DIR / "scripts" / "shortcuts" / "functions.sh"
        if candidate.is_file():
            return candidate
        return bundled_file("functions.sh")

    def run(self) -> None:
        self.host.ensure_directory(self.config.LOCAL_BIN)
        try:
            install_file(self.source(), self.destination, self.host.backup_file)
            self.destination.chmod(0o755)
        except OSError as e:
            raise StepError(self.name, f"could not install functions.sh: {e}") from e
        ShellRC(self.config.ZSHRC).add_source(
            self.destination, comment="Custom shell functions"
        )
        print_success(f"Shell functions installed at {self.destination}")
