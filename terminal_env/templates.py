"""
Project Template Generators
--------------------------------------------------

Installs the per-language generator scripts under
~/.local/share/<lang>-templates/ and the zsh wrapper functions that call
them. The scripts are bash shims that hand off to `terminal_env new`, so
the project layouts live in one place (terminal_env.scaffold).
"""

import logging
import shlex
import sys
from pathlib import Path
from typing import Union

from terminal_env.config import WRAPPER_FUNCTIONS, Config
from terminal_env.errors import CommandError
from terminal_env.host import Host
from terminal_env.shellrc import ShellRC

logger = logging.getLogger(__name__)

SHIM_TEMPLATE = """#!/bin/bash
# Create a new {label} project: {wrapper} <name>
set -e

if [ -z "$1" ]; then
    echo "Usage: {wrapper} <project-name>"
    exit 1
fi

exec {python} -m terminal_env new {language} "$@"
"""

LABELS = {"python": "Python", "node": "Node.js", "ruby": "Ruby"}


def render_script(language: str, python: str = sys.executable) -> str:
    return SHIM_TEMPLATE.format(
        label=LABELS[language],
        wrapper=WRAPPER_FUNCTIONS[language],
        python=shlex.quote(python),
        language=language,
    )


def install_template(host: Host, language: str) -> Path:
    """Write the generator script for a language and make it executable."""
    script = host.config.template_script(language)
    host.write_executable(script, render_script(language))
    logger.info(f"Installed {LABELS[language]} project template at {script}")
    return script


def register_wrapper(config: Config, language: str) -> bool:
    """Add the <lang>project function to zshrc. Returns True if added."""
    rc = ShellRC(config.ZSHRC)
    wrapper = WRAPPER_FUNCTIONS[language]
    return rc.add_function(
        wrapper,
        shlex.quote(str(config.template_script(language))),
        comment=f"{LABELS[language]} project creation function",
    )


def bash_syntax_ok(host: Host, script: Union[str, Path]) -> bool:
    """Return True if bash -n accepts the script."""
    if not host.command_exists("bash"):
        logger.debug("bash not found; skipping syntax check")
        return True
    try:
        host.run(["bash", "-n", str(script)], timeout=30)
        return True
    except CommandError as e:
        logger.warning(f"Syntax check failed for {script}: {e.stderr.strip() or e}")
        return False


def install_generator(host: Host, language: str) -> None:
    """Install the template script and its wrapper function for a language."""
    install_template(host, language)
    register_wrapper(host.config, language)
