"""
Ruby Development Setup
--------------------------------------------------

Ruby from Homebrew or apt, the development gems and the `rubyproject`
project generator.
"""

import logging
import os

from terminal_env.config import MACOS
from terminal_env.errors import StepError
from terminal_env.host import Host
from terminal_env.packages import brew_prefix, gem_install, package_manager
from terminal_env.shellrc import ShellRC
from terminal_env.templates import install_generator
from terminal_env.ui import print_success

logger = logging.getLogger(__name__)


class RubySetup:
    name = "ruby"
    language = "ruby"

    def __init__(self, host: Host):
        self.host = host
        self.config = host.config
        self.rc = ShellRC(self.config.ZSHRC)
        self.pm = package_manager(host)

    def install_ruby(self) -> bool:
        if self.host.command_exists("ruby"):
            logger.info(f"Ruby already installed: {self.host.output(['ruby', '--version'])}")
            return True
        if self.host.os_name == MACOS:
            result = self.pm.install(["ruby"])
            if result.failed:
                logger.error("Failed to install Ruby via Homebrew")
                return False
            ruby_bin = f"{brew_prefix()}/opt/ruby/bin"
            self.rc.add_path(ruby_bin, comment="Homebrew Ruby")
            os.environ["PATH"] = f"{ruby_bin}:{os.environ.get('PATH', '')}"
        else:
            result = self.pm.install(["ruby-full"])
            if result.failed:
                logger.error("Failed to install ruby-full")
                return False
        print_success("Ruby installed.")
        return True

    def install_gems(self) -> None:
        summary = gem_install(self.host, self.config.RUBY_GEMS)
        logger.info(f"Ruby gems: {summary.describe()}")
        if not summary.ok:
            raise StepError(self.name, f"too many gems failed: {summary.describe()}")

    def run(self) -> None:
        if not self.install_ruby():
            raise StepError(self.name, "Ruby could not be installed")
        self.install_gems()
        install_generator(self.host, self.language)
        print_success("Ruby development environment setup complete.")
