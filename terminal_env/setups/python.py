"""
Python Development Setup
--------------------------------------------------

Python runtime, pipx, Poetry, a dedicated virtual environment for the
development tools, the `pydev` activation helper and the `pyproject`
project generator.
"""

import logging
import os

from terminal_env.config import MACOS
from terminal_env.errors import CommandError, StepError
from terminal_env.host import Host
from terminal_env.packages import package_manager, pip_install
from terminal_env.shellrc import ShellRC
from terminal_env.templates import install_generator
from terminal_env.ui import print_success, print_warning

logger = logging.getLogger(__name__)

BREW_PYTHON = "python@3.11"
APT_PYTHON = ["python3", "python3-pip", "python3-venv", "python3-dev", "build-essential"]

PYDEV_SCRIPT = """#!/bin/bash
# Activate the Python development tools environment
source "{venv}/bin/activate"
echo "Python development environment activated."
echo "Type 'deactivate' to exit."
"""


class PythonSetup:
    name = "python"
    language = "python"

    def __init__(self, host: Host):
        self.host = host
        self.config = host.config
        self.rc = ShellRC(self.config.ZSHRC)
        self.pm = package_manager(host)
        self.dev_env = self.config.HOME / ".python-dev-env"
        self.pipx_env = self.config.HOME / ".local" / "pipx-env"

    def install_python(self) -> bool:
        if self.host.os_name == MACOS:
            if self.pm.is_installed(BREW_PYTHON):
                logger.info(f"{BREW_PYTHON} already installed.")
                return True
            packages = [BREW_PYTHON]
        else:
            packages = APT_PYTHON
        result = self.pm.install(packages)
        if result.failed:
            logger.error(f"Python installation failed: {', '.join(result.failed)}")
            return False
        return self.host.command_exists("python3")

    def upgrade_pip(self) -> None:
        try:
            self.host.run(["python3", "-m", "pip", "install", "--user", "--upgrade", "pip"])
        except CommandError as e:
            logger.warning(f"Could not upgrade pip in user space: {e}")

    def ensure_pipx(self) -> bool:
        """Install pipx, falling back to a private venv when packages fail."""
        if self.host.command_exists("pipx"):
            logger.info("pipx already installed.")
            return True
        if not self.pm.install(["pipx"]).failed:
            print_success("pipx installed.")
            return True

        logger.warning(f"Installing pipx into {self.pipx_env} instead.")
        try:
            self.host.run(["python3", "-m", "venv", str(self.pipx_env)])
            self.host.run([str(self.pipx_env / "bin" / "pip"), "install", "pipx"])
        except CommandError as e:
            print_warning(f"pipx could not be installed: {e}")
            return False
        self.host.ensure_directory(self.config.LOCAL_BIN)
        link = self.config.LOCAL_BIN / "pipx"
        if link.is_symlink() or link.exists():
            link.unlink()
        link.symlink_to(self.pipx_env / "bin" / "pipx")
        self.rc.add_path(str(self.config.LOCAL_BIN), comment="pipx")
        print_success(f"pipx available at {link}")
        return True

    def ensure_poetry(self) -> bool:
        if self.host.command_exists("poetry"):
            logger.info("Poetry already installed.")
            self.host.run(["poetry", "self", "update"], check=False)
            return True
        try:
            self.host.run_installer(self.config.POETRY_INSTALLER, interpreter="python3")
        except CommandError as e:
            print_warning(f"Poetry installation failed: {e}")
            return False
        self.rc.add_path("$HOME/.local/bin", comment="Poetry")
        print_success("Poetry installed.")
        return True

    def create_dev_env(self) -> None:
        python = self.dev_env / "bin" / "python"
        if not python.exists():
            logger.info(f"Creating development tools environment at {self.dev_env}")
            try:
                self.host.run(["python3", "-m", "venv", str(self.dev_env)])
            except CommandError as e:
                raise StepError(self.name, f"could not create {self.dev_env}: {e}") from e
        summary = pip_install(self.host, str(python), self.config.PYTHON_TOOLS)
        logger.info(f"Python tools: {summary.describe()}")
        if not summary.ok:
            raise StepError(self.name, f"too many Python tools failed: {summary.describe()}")

    def install_pydev(self) -> None:
        script = self.config.LOCAL_BIN / "pydev"
        self.host.write_executable(script, PYDEV_SCRIPT.format(venv=self.dev_env))
        self.rc.add_alias(
            "pydev",
            f"source {self.dev_env}/bin/activate",
            comment="Activate Python development tools",
        )

    def run(self) -> None:
        if not self.install_python():
            raise StepError(self.name, "Python 3 is not available")
        self.upgrade_pip()
        self.ensure_pipx()
        self.ensure_poetry()
        os.environ["PATH"] = f"{self.config.LOCAL_BIN}:{os.environ.get('PATH', '')}"
        self.create_dev_env()
        self.install_pydev()
        install_generator(self.host, self.language)
        print_success("Python development environment setup complete.")
