"""
Package Manager Helpers
--------------------------------------------------

Thin wrappers around Homebrew, apt, pip, npm and gem. Every multi-package
install reports what it installed, skipped and failed rather than raising,
so one bad package never aborts a step.
"""

import logging
import os
import platform
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from terminal_env.config import MACOS
from terminal_env.errors import CommandError
from terminal_env.host import Host
from terminal_env.shellrc import ShellRC
from terminal_env.ui import NordColors, console

logger = logging.getLogger(__name__)


@dataclass
class InstallSummary:
    """Outcome of installing a list of packages."""

    installed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.installed) + len(self.skipped) + len(self.failed)

    @property
    def ok(self) -> bool:
        """A list install fails only when at least half its items failed."""
        if not self.failed:
            return True
        return len(self.failed) < self.total / 2

    def merge(self, other: "InstallSummary") -> "InstallSummary":
        self.installed += other.installed
        self.skipped += other.skipped
        self.failed += other.failed
        return self

    def describe(self) -> str:
        parts = [f"{len(self.installed)} installed", f"{len(self.skipped)} present"]
        if self.failed:
            parts.append(f"{len(self.failed)} failed ({', '.join(self.failed)})")
        return ", ".join(parts)


def install_each(
    label: str,
    names: Iterable[str],
    install: Callable[[str], None],
    is_installed: Optional[Callable[[str], bool]] = None,
) -> InstallSummary:
    """Install items one at a time, logging and counting soft failures."""
    names = list(names)
    summary = InstallSummary()
    with Progress(
        SpinnerColumn("dots", style=f"bold {NordColors.FROST_1}"),
        TextColumn(f"[bold {NordColors.FROST_2}]{label}"),
        BarColumn(bar_width=40, style=NordColors.FROST_4, complete_style=NordColors.FROST_2),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(label, total=len(names))
        for name in names:
            if is_installed and is_installed(name):
                logger.info(f"{name} already installed, skipping...")
                summary.skipped.append(name)
                progress.advance(task)
                continue
            try:
                install(name)
                summary.installed.append(name)
                logger.info(f"Installed {name}")
            except CommandError as e:
                logger.warning(f"Failed to install {name}, continuing anyway: {e}")
                summary.failed.append(name)
            progress.advance(task)
    return summary


# ----------------------------------------------------------------
# System Package Managers
# ----------------------------------------------------------------
class PackageManager:
    name = "generic"

    def __init__(self, host: Host):
        self.host = host

    def update(self) -> None:
        raise NotImplementedError

    def is_installed(self, package: str) -> bool:
        raise NotImplementedError

    def install_command(self, packages: List[str]) -> List[str]:
        raise NotImplementedError

    def install(self, packages: Iterable[str]) -> InstallSummary:
        """Install in one batch; fall back to one by one if the batch fails."""
        packages = list(packages)
        summary = InstallSummary()
        missing = []
        for pkg in packages:
            if self.is_installed(pkg):
                summary.skipped.append(pkg)
            else:
                missing.append(pkg)
        if not missing:
            return summary
        try:
            with console.status(
                f"[bold blue]Installing {len(missing)} packages with {self.name}...",
                spinner="dots",
            ):
                self.host.run(self.install_command(missing), env=self.env())
            summary.installed += missing
            return summary
        except CommandError as e:
            logger.warning(f"Batch install failed ({e}); retrying packages individually.")
        return summary.merge(
            install_each(
                f"Installing with {self.name}",
                missing,
                lambda pkg: self.host.run(self.install_command([pkg]), env=self.env()),
            )
        )

    def env(self) -> Optional[dict]:
        return None


class Homebrew(PackageManager):
    name = "brew"

    def update(self) -> None:
        self.host.run(["brew", "update"], check=False)

    def is_installed(self, package: str) -> bool:
        return self.host.succeeds(["brew", "list", package])

    def install_command(self, packages: List[str]) -> List[str]:
        return ["brew", "install"] + packages


class Apt(PackageManager):
    name = "apt"

    def env(self) -> Optional[dict]:
        env = os.environ.copy()
        env["DEBIAN_FRONTEND"] = "noninteractive"
        return env

    def update(self) -> None:
        with console.status("[bold blue]Updating package lists...", spinner="dots"):
            self.host.run(self.host.sudo(["apt-get", "update"]), env=self.env())
        logger.info("Package lists updated.")

    def is_installed(self, package: str) -> bool:
        status = self.host.output(["dpkg-query", "-W", "-f=${Status}", package])
        return "install ok installed" in status

    def install_command(self, packages: List[str]) -> List[str]:
        return self.host.sudo(["apt-get", "install", "-y"] + packages)


def package_manager(host: Host) -> PackageManager:
    if host.os_name == MACOS:
        return Homebrew(host)
    return Apt(host)


def brew_prefix() -> str:
    return "/opt/homebrew" if platform.machine() == "arm64" else "/usr/local"


def ensure_homebrew(host: Host, rc: ShellRC) -> bool:
    """Install Homebrew if missing and hook its shellenv into zshrc."""
    if host.command_exists("brew"):
        logger.info("Homebrew already installed.")
        return True
    logger.info("Installing Homebrew...")
    env = os.environ.copy()
    env["NONINTERACTIVE"] = "1"
    try:
        host.run_installer(host.config.HOMEBREW_INSTALLER, env=env)
    except CommandError as e:
        logger.error(f"Homebrew installation failed: {e}")
        return False
    brew_bin = f"{brew_prefix()}/bin/brew"
    rc.append_block(
        "brew shellenv", f'eval "$({brew_bin} shellenv)"', comment="Homebrew"
    )
    os.environ["PATH"] = f"{brew_prefix()}/bin:{os.environ.get('PATH', '')}"
    return True


# ----------------------------------------------------------------
# Language Package Managers
# ----------------------------------------------------------------
def pip_install(host: Host, python: str, packages: Iterable[str]) -> InstallSummary:
    return install_each(
        "Installing Python packages",
        packages,
        lambda pkg: host.run([python, "-m", "pip", "install", "--upgrade", pkg]),
    )


def npm_install_global(host: Host, packages: Iterable[str]) -> InstallSummary:
    return install_each(
        "Installing global npm packages",
        packages,
        lambda pkg: host.run(["npm", "install", "-g", pkg]),
        is_installed=lambda pkg: host.succeeds(["npm", "ls", "-g", "--depth=0", pkg]),
    )


def gem_install(host: Host, gems: Iterable[str]) -> InstallSummary:
    return install_each(
        "Installing Ruby gems",
        gems,
        lambda gem: host.run(["gem", "install", gem]),
        is_installed=lambda gem: host.succeeds(["gem", "list", "-i", f"^{gem}$"]),
    )
