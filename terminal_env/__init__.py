"""
Enhanced Terminal Environment
--------------------------------------------------

Bootstraps a terminal-centric development environment on macOS or Linux:
core CLI tools, zsh, Neovim and tmux configuration, and optional Python,
Node.js and Ruby toolchains with project scaffolding commands.
"""

__version__ = "3.0.0"

APP_NAME = "Terminal Env"
APP_SUBTITLE = "Development Environment Installer"
