"""
Configuration & Constants
--------------------------------------------------

Paths, timeouts and package lists used by every setup step. Paths are
derived from the target home directory and the source checkout, both of
which can be redirected through environment variables.
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from terminal_env.errors import UnsupportedOSError

MACOS = "macOS"
LINUX = "Linux"

LANGUAGES = ("python", "node", "ruby")

# Wrapper function and generator script per language
TEMPLATE_SCRIPTS: Dict[str, str] = {
    "python": "basic_project.sh",
    "node": "basic_node_project.sh",
    "ruby": "basic_ruby_project.sh",
}
WRAPPER_FUNCTIONS: Dict[str, str] = {
    "python": "pyproject",
    "node": "nodeproject",
    "ruby": "rubyproject",
}


def detect_os(platform_name: Optional[str] = None) -> str:
    """Return "macOS" or "Linux", raising UnsupportedOSError otherwise."""
    platform_name = platform_name or sys.platform
    if platform_name == "darwin":
        return MACOS
    if platform_name.startswith("linux"):
        return LINUX
    raise UnsupportedOSError(platform_name)


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name)
    return Path(value).expanduser() if value else default


@dataclass
class Config:
    """Installer settings. Unset paths are derived in __post_init__."""

    HOME: Path = field(
        default_factory=lambda: _env_path("TERMINAL_ENV_HOME", Path.home())
    )
    SOURCE_DIR: Path = field(
        default_factory=lambda: _env_path("TERMINAL_ENV_SOURCE", Path.cwd())
    )
    LOG_FILE: Optional[Path] = None
    STATE_FILE: Optional[Path] = None

    ZSHRC: Optional[Path] = None
    LOCAL_BIN: Optional[Path] = None
    CONFIG_DIR: Optional[Path] = None
    TEMPLATES_ROOT: Optional[Path] = None
    PROJECTS_DIR: Optional[Path] = None

    # Extra long timeouts for slow machines (in seconds)
    DEFAULT_TIMEOUT: int = 3600
    DOWNLOAD_TIMEOUT: int = 60

    BREW_ESSENTIALS: List[str] = field(
        default_factory=lambda: [
            "neovim",
            "tmux",
            "zsh",
            "git",
            "ripgrep",
            "fzf",
            "fd",
            "jq",
            "bat",
            "eza",
            "htop",
            "gh",
            "wget",
            "curl",
        ]
    )
    APT_ESSENTIALS: List[str] = field(
        default_factory=lambda: [
            "build-essential",
            "neovim",
            "tmux",
            "zsh",
            "git",
            "curl",
            "wget",
            "unzip",
            "ripgrep",
            "fd-find",
            "fzf",
            "jq",
            "bat",
            "htop",
            "gnupg",
            "ca-certificates",
            "software-properties-common",
        ]
    )
    # Optional groups, installed as soft failures
    BREW_EXTRAS: Dict[str, List[str]] = field(
        default_factory=lambda: {
            "database": ["postgresql@14"],
            "docker": ["docker", "docker-compose"],
            "http": ["httpie"],
            "cloud": ["awscli", "ansible"],
        }
    )
    APT_EXTRAS: Dict[str, List[str]] = field(
        default_factory=lambda: {
            "database": ["postgresql", "postgresql-contrib"],
            "docker": ["docker.io", "docker-compose"],
            "http": ["httpie"],
            "cloud": ["ansible"],
        }
    )

    PYTHON_TOOLS: List[str] = field(
        default_factory=lambda: [
            "ipython",
            "black",
            "pylint",
            "flake8",
            "mypy",
            "pytest",
            "pytest-cov",
            "httpie",
            "requests",
            "virtualenv",
            "pipenv",
        ]
    )
    NODE_TOOLS: List[str] = field(
        default_factory=lambda: ["eslint", "prettier", "typescript", "ts-node", "nodemon"]
    )
    RUBY_GEMS: List[str] = field(
        default_factory=lambda: ["bundler", "pry", "rubocop", "solargraph", "rake", "rspec"]
    )

    HOMEBREW_INSTALLER: str = (
        "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"
    )
    POETRY_INSTALLER: str = "https://install.python-poetry.org"
    NVM_INSTALLER: str = "https://raw.githubusercontent.com/nvm-sh/nvm/v0.39.7/install.sh"
    OH_MY_ZSH_INSTALLER: str = (
        "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
    )
    OPENTOFU_INSTALLER: str = "https://get.opentofu.org/install-opentofu.sh"

    def __post_init__(self) -> None:
        self.HOME = Path(self.HOME)
        self.SOURCE_DIR = Path(self.SOURCE_DIR)
        if self.LOG_FILE is None:
            self.LOG_FILE = self.SOURCE_DIR / "install_log.txt"
        if self.STATE_FILE is None:
            self.STATE_FILE = self.SOURCE_DIR / "install_state.json"
        if self.ZSHRC is None:
            self.ZSHRC = self.HOME / ".zshrc"
        if self.LOCAL_BIN is None:
            self.LOCAL_BIN = self.HOME / ".local" / "bin"
        if self.CONFIG_DIR is None:
            self.CONFIG_DIR = self.HOME / ".config"
        if self.TEMPLATES_ROOT is None:
            self.TEMPLATES_ROOT = self.HOME / ".local" / "share"
        if self.PROJECTS_DIR is None:
            self.PROJECTS_DIR = self.HOME / "projects"

    def templates_dir(self, language: str) -> Path:
        return self.TEMPLATES_ROOT / f"{language}-templates"

    def template_script(self, language: str) -> Path:
        return self.templates_dir(language) / TEMPLATE_SCRIPTS[language]

    @property
    def essential_dirs(self) -> List[Path]:
        """Directories every run creates before any step touches them."""
        return [
            self.CONFIG_DIR / "nvim",
            self.CONFIG_DIR / "tmux",
            self.HOME / ".tmux" / "plugins",
            self.HOME / ".zsh",
            self.LOCAL_BIN,
            self.PROJECTS_DIR,
        ] + [self.templates_dir(lang) for lang in LANGUAGES]
