"""
Node.js Development Setup
--------------------------------------------------

Node.js through NVM (or the system package manager when NVM fails), the
global npm tools and the `nodeproject` project generator.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from terminal_env.config import MACOS
from terminal_env.errors import CommandError, StepError
from terminal_env.host import Host
from terminal_env.packages import npm_install_global, package_manager
from terminal_env.shellrc import ShellRC
from terminal_env.templates import install_generator
from terminal_env.ui import print_success, print_warning

logger = logging.getLogger(__name__)

NVM_BLOCK = """export NVM_DIR="$HOME/.nvm"
[ -s "$NVM_DIR/nvm.sh" ] && \\. "$NVM_DIR/nvm.sh"
[ -s "$NVM_DIR/bash_completion" ] && \\. "$NVM_DIR/bash_completion"
"""


class NodeSetup:
    name = "node"
    language = "node"

    def __init__(self, host: Host):
        self.host = host
        self.config = host.config
        self.rc = ShellRC(self.config.ZSHRC)
        self.pm = package_manager(host)
        self.nvm_dir = self.config.HOME / ".nvm"

    def node_present(self) -> bool:
        if self.host.command_exists("node") and self.host.command_exists("npm"):
            node = self.host.output(["node", "--version"])
            npm = self.host.output(["npm", "--version"])
            logger.info(f"Node.js {node} with npm {npm} already installed.")
            return True
        return False

    def _nvm_node_bin(self) -> Optional[Path]:
        versions = sorted((self.nvm_dir / "versions" / "node").glob("*/bin"))
        return versions[-1] if versions else None

    def install_with_nvm(self) -> bool:
        env = os.environ.copy()
        env.update({"NVM_DIR": str(self.nvm_dir), "PROFILE": "/dev/null"})
        try:
            if not (self.nvm_dir / "nvm.sh").is_file():
                self.host.ensure_directory(self.nvm_dir)
                self.host.run_installer(self.config.NVM_INSTALLER, env=env)
            self.rc.append_block("NVM_DIR", NVM_BLOCK, comment="NVM (Node.js)")
            self.host.run(
                ["bash", "-c", 'source "$NVM_DIR/nvm.sh" && nvm install --lts'], env=env
            )
        except CommandError as e:
            print_warning(f"NVM installation failed: {e}")
            return False
        node_bin = self._nvm_node_bin()
        if node_bin:
            os.environ["PATH"] = f"{node_bin}:{os.environ.get('PATH', '')}"
        print_success("Node.js LTS installed with NVM.")
        return True

    def install_with_package_manager(self) -> bool:
        packages = ["node"] if self.host.os_name == MACOS else ["nodejs", "npm"]
        result = self.pm.install(packages)
        if result.failed:
            logger.error(f"Node.js installation failed: {', '.join(result.failed)}")
            return False
        return True

    def install_tools(self) -> None:
        summary = npm_install_global(self.host, self.config.NODE_TOOLS)
        logger.info(f"npm tools: {summary.describe()}")
        if not summary.ok:
            raise StepError(self.name, f"too many npm tools failed: {summary.describe()}")

    def run(self) -> None:
        if not self.node_present():
            if not (self.install_with_nvm() or self.install_with_package_manager()):
                raise StepError(self.name, "Node.js could not be installed")
        self.install_tools()
        install_generator(self.host, self.language)
        print_success("Node.js development environment setup complete.")
