"""Tests for the project generator scripts and wrapper functions."""

import os
import shutil
import sys

import pytest

from terminal_env.config import LINUX, Config
from terminal_env.host import Host
from terminal_env.templates import (
    bash_syntax_ok,
    install_generator,
    install_template,
    register_wrapper,
    render_script,
)

from conftest import FakeHost


def test_render_script_execs_new_command() -> None:
    script = render_script("ruby", python="/usr/bin/python3")
    assert script.startswith("#!/bin/bash\n")
    assert 'exec /usr/bin/python3 -m terminal_env new ruby "$@"' in script
    assert "rubyproject <project-name>" in script


def test_render_script_defaults_to_current_interpreter() -> None:
    assert sys.executable in render_script("python")


def test_install_template_is_executable(host: FakeHost, config: Config) -> None:
    script = install_template(host, "node")
    assert script == config.template_script("node")
    assert os.access(script, os.X_OK)


def test_register_wrapper_once(config: Config) -> None:
    assert register_wrapper(config, "python") is True
    assert register_wrapper(config, "python") is False
    text = config.ZSHRC.read_text()
    assert text.count("pyproject()") == 1
    assert str(config.template_script("python")) in text


def test_install_generator(host: FakeHost, config: Config) -> None:
    install_generator(host, "ruby")
    assert config.template_script("ruby").is_file()
    assert "rubyproject()" in config.ZSHRC.read_text()


@pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")
@pytest.mark.parametrize("language", ["python", "node", "ruby"])
def test_generated_scripts_pass_bash_syntax_check(config: Config, language: str) -> None:
    real = Host(config, os_name=LINUX)
    script = install_template(real, language)
    assert bash_syntax_ok(real, script)


@pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")
def test_bash_syntax_check_detects_errors(config: Config, tmp_path) -> None:
    real = Host(config, os_name=LINUX)
    broken = tmp_path / "broken.sh"
    broken.write_text("if then fi {\n")
    assert bash_syntax_ok(real, broken) is False


def test_wrapper_quotes_script_path_with_spaces(tmp_path) -> None:
    home = tmp_path / "my home"
    home.mkdir()
    config = Config(HOME=home, SOURCE_DIR=tmp_path)
    register_wrapper(config, "node")
    script = str(config.template_script("node"))
    assert f"    '{script}' \"$@\"\n" in config.ZSHRC.read_text()
