"""
Core System Setup
--------------------------------------------------

Directories, the essential CLI tools, the base zsh configuration, tmux and
zsh plugins, and the default shell. This step is required: the installer
aborts if it fails.
"""

import logging
import os
from typing import Dict, List

from terminal_env.config import MACOS
from terminal_env.errors import CommandError, StepError
from terminal_env.host import Host
from terminal_env.packages import (
    Homebrew,
    InstallSummary,
    ensure_homebrew,
    package_manager,
)
from terminal_env.shellrc import ShellRC, write_default_zshrc
from terminal_env.ui import print_step, print_success, print_warning

logger = logging.getLogger(__name__)

TPM_REPO = "https://github.com/tmux-plugins/tpm"
ZSH_PLUGINS: Dict[str, str] = {
    "zsh-autosuggestions": "https://github.com/zsh-users/zsh-autosuggestions",
    "zsh-syntax-highlighting": "https://github.com/zsh-users/zsh-syntax-highlighting.git",
}
FZF_REPO = "https://github.com/junegunn/fzf.git"

# (real binary, expected name) pairs Debian ships under different names
LINUX_ALIASES = [("fdfind", "fd"), ("batcat", "bat")]


class CoreSetup:
    name = "core"

    def __init__(self, host: Host):
        self.host = host
        self.config = host.config
        self.rc = ShellRC(self.config.ZSHRC)
        self.pm = package_manager(host)

    # ----------------------------------------------------------------
    # Directories
    # ----------------------------------------------------------------
    def create_directories(self) -> bool:
        failed = [
            str(d) for d in self.config.essential_dirs if not self.host.ensure_directory(d)
        ]
        if failed:
            logger.error(f"Could not create directories: {', '.join(failed)}")
            return False
        logger.info("Essential directories created.")
        return True

    # ----------------------------------------------------------------
    # Packages
    # ----------------------------------------------------------------
    def install_essentials(self) -> InstallSummary:
        if self.host.os_name == MACOS:
            if not ensure_homebrew(self.host, self.rc):
                raise StepError(self.name, "Homebrew is required on macOS")
            self.pm.update()
            packages = self.config.BREW_ESSENTIALS
        else:
            self.pm.update()
            packages = self.config.APT_ESSENTIALS
        summary = self.pm.install(packages)
        logger.info(f"Essential packages: {summary.describe()}")
        if self.host.os_name != MACOS:
            for real, alias in LINUX_ALIASES:
                self.host.link_alias(real, alias)
        return summary

    def install_extras(self) -> InstallSummary:
        """Optional package groups; failures here never fail the step."""
        groups: Dict[str, List[str]] = (
            self.config.BREW_EXTRAS if self.host.os_name == MACOS else self.config.APT_EXTRAS
        )
        summary = InstallSummary()
        for group, packages in groups.items():
            result = self.pm.install(packages)
            if result.failed:
                print_warning(f"Some {group} packages failed: {', '.join(result.failed)}")
            summary.merge(result)
        return summary

    def install_iac_tool(self) -> bool:
        """Install OpenTofu, falling back to Terraform with a tofu alias."""
        if self.host.command_exists("tofu"):
            logger.info("OpenTofu already installed.")
            return True
        try:
            if isinstance(self.pm, Homebrew):
                self.host.run(["brew", "install", "opentofu"])
            else:
                self.host.run_installer(
                    self.config.OPENTOFU_INSTALLER, args=["--install-method", "deb"]
                )
            print_success("OpenTofu installed.")
            return True
        except CommandError as e:
            logger.warning(f"OpenTofu installation failed, trying Terraform instead: {e}")

        if not self.host.command_exists("terraform"):
            result = self.pm.install(["terraform"])
            if result.failed:
                print_warning("Continuing without Terraform/OpenTofu.")
                return False
        aliases = ShellRC(self.config.HOME / ".zsh" / "aliases.zsh")
        aliases.add_alias("tofu", "terraform", comment="OpenTofu compatibility")
        logger.info("Created 'tofu' alias for terraform")
        return True

    # ----------------------------------------------------------------
    # Shell and Plugins
    # ----------------------------------------------------------------
    def install_oh_my_zsh(self) -> bool:
        omz_dir = self.config.HOME / ".oh-my-zsh"
        if omz_dir.exists():
            logger.info("Oh My Zsh already installed.")
            return True
        env = os.environ.copy()
        env.update(
            {
                "HOME": str(self.config.HOME),
                "ZSH": str(omz_dir),
                "KEEP_ZSHRC": "yes",
                "RUNZSH": "no",
                "CHSH": "no",
            }
        )
        try:
            self.host.run_installer(
                self.config.OH_MY_ZSH_INSTALLER, args=["--unattended"], interpreter="sh", env=env
            )
            logger.info("Oh My Zsh installed.")
            return True
        except CommandError as e:
            logger.warning(f"Oh My Zsh installation failed: {e}")
            return False

    def install_plugins(self) -> bool:
        plugin_dir = self.config.HOME / ".oh-my-zsh" / "custom" / "plugins"
        clones = [(TPM_REPO, self.config.HOME / ".tmux" / "plugins" / "tpm", None)]
        clones += [(url, plugin_dir / name, None) for name, url in ZSH_PLUGINS.items()]
        clones.append((FZF_REPO, self.config.HOME / ".fzf", 1))
        ok = True
        for url, dest, depth in clones:
            try:
                self.host.git_clone(url, dest, depth=depth)
            except CommandError as e:
                logger.warning(f"Failed to clone {url}: {e}")
                ok = False
        fzf_install = self.config.HOME / ".fzf" / "install"
        if fzf_install.is_file() and not (self.config.HOME / ".fzf.zsh").exists():
            try:
                self.host.run(
                    [str(fzf_install), "--key-bindings", "--completion", "--no-update-rc"]
                )
            except CommandError as e:
                logger.warning(f"fzf install script failed: {e}")
                ok = False
        return ok

    def set_default_shell(self) -> bool:
        if os.environ.get("SHELL", "").endswith("zsh"):
            logger.info("zsh is already the default shell.")
            return True
        zsh = self.host.which("zsh")
        if not zsh:
            logger.warning("zsh not found on PATH; default shell unchanged.")
            return False
        try:
            self.host.run(["chsh", "-s", zsh], timeout=120)
            logger.info(f"Default shell set to {zsh}")
            return True
        except CommandError as e:
            print_warning(f"Could not change default shell, run 'chsh -s {zsh}' manually.")
            logger.debug(f"chsh failed: {e}")
            return False

    def run(self) -> None:
        if not self.create_directories():
            raise StepError(self.name, "could not create essential directories")
        print_step("Installing essential packages...")
        summary = self.install_essentials()
        if not summary.ok:
            raise StepError(self.name, f"essential packages failed: {summary.describe()}")
        self.install_extras()
        self.install_iac_tool()
        write_default_zshrc(self.rc, self.host.backup_file)
        print_step("Setting up zsh and tmux plugins...")
        self.install_oh_my_zsh()
        self.install_plugins()
        self.set_default_shell()
        print_success("Core system setup complete.")
