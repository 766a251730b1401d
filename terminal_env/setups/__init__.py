"""Setup steps: core system tools and the optional language toolchains."""

from terminal_env.setups.core import CoreSetup
from terminal_env.setups.node import NodeSetup
from terminal_env.setups.python import PythonSetup
from terminal_env.setups.ruby import RubySetup

__all__ = ["CoreSetup", "NodeSetup", "PythonSetup", "RubySetup"]
