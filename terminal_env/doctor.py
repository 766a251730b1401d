"""
Installation Doctor
--------------------------------------------------

Verifies an existing installation and optionally repairs it: directory
permissions, the template generator scripts, the wrapper functions in
zshrc and the shell function library.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from terminal_env.config import LANGUAGES, WRAPPER_FUNCTIONS
from terminal_env.host import Host
from terminal_env.shellrc import ShellRC
from terminal_env.state import RunState
from terminal_env.templates import bash_syntax_ok, install_template, register_wrapper
from terminal_env.ui import print_status_report, print_warning

logger = logging.getLogger(__name__)


@dataclass
class Finding:
    name: str
    ok: bool
    message: str = ""
    fixed: bool = False

    @property
    def status(self) -> str:
        return "success" if self.ok or self.fixed else "failed"

    def as_row(self) -> Dict[str, str]:
        message = self.message
        if self.fixed:
            message = f"fixed: {message}" if message else "fixed"
        return {"name": self.name, "status": self.status, "message": message}


@dataclass
class DoctorReport:
    findings: List[Finding] = field(default_factory=list)
    failed_steps: List[str] = field(default_factory=list)

    @property
    def problems(self) -> List[Finding]:
        return [f for f in self.findings if not f.ok and not f.fixed]

    @property
    def healthy(self) -> bool:
        return not self.problems


class Doctor:
    def __init__(self, host: Host, fix: bool = False):
        self.host = host
        self.config = host.config
        self.fix = fix
        self.report = DoctorReport()
        self.state: Optional[RunState] = RunState.load(self.config.STATE_FILE)

    def _add(self, name: str, ok: bool, message: str = "", fixed: bool = False) -> None:
        self.report.findings.append(Finding(name, ok, message, fixed))

    def check_directories(self) -> None:
        for directory in self.config.essential_dirs:
            label = f"dir {directory.relative_to(self.config.HOME)}"
            if directory.is_dir() and os.access(directory, os.W_OK):
                self._add(label, True)
                continue
            problem = "missing" if not directory.is_dir() else "not writable"
            if self.fix and self.host.ensure_directory(directory):
                self._add(label, False, problem, fixed=True)
            else:
                self._add(label, False, problem)

    def selected_languages(self) -> List[str]:
        """Languages chosen in the last run, else those with a generator script.

        Core creates every template directory, so only scripts count.
        """
        if self.state is not None and self.state.languages:
            return [lang for lang in LANGUAGES if self.state.languages.get(lang)]
        return [lang for lang in LANGUAGES if self.config.template_script(lang).is_file()]

    def _template_problem(self, script: Path) -> str:
        if not script.is_file():
            return "missing"
        if not os.access(script, os.X_OK):
            return "not executable"
        if not bash_syntax_ok(self.host, script):
            return "syntax error"
        return ""

    def check_templates(self) -> None:
        for lang in self.selected_languages():
            script = self.config.template_script(lang)
            label = f"template {lang}"
            problem = self._template_problem(script)
            if not problem:
                self._add(label, True)
                continue
            if not self.fix:
                self._add(label, False, problem)
                continue
            try:
                install_template(self.host, lang)
            except OSError as e:
                logger.error(f"Could not regenerate {script}: {e}")
                self._add(label, False, f"{problem}; repair failed: {e}")
                continue
            remaining = self._template_problem(script)
            if remaining:
                self._add(label, False, f"{problem}; still {remaining} after repair")
            else:
                self._add(label, False, problem, fixed=True)

    def check_wrappers(self) -> None:
        rc = ShellRC(self.config.ZSHRC)
        for lang in self.selected_languages():
            wrapper = WRAPPER_FUNCTIONS[lang]
            label = f"function {wrapper}"
            if rc.contains(f"{wrapper}()"):
                self._add(label, True)
                continue
            if not self.fix:
                self._add(label, False, "missing from zshrc")
                continue
            try:
                register_wrapper(self.config, lang)
            except OSError as e:
                logger.error(f"Could not add {wrapper} to {self.config.ZSHRC}: {e}")
                self._add(label, False, f"missing from zshrc; repair failed: {e}")
                continue
            self._add(label, False, "missing from zshrc", fixed=True)

    def check_functions(self) -> None:
        script = self.config.LOCAL_BIN / "functions.sh"
        if not script.is_file():
            self._add("functions.sh", False, "not installed")
        elif not bash_syntax_ok(self.host, script):
            self._add("functions.sh", False, "syntax error")
        else:
            self._add("functions.sh", True)

    def check_state(self) -> None:
        if self.state is not None:
            self.report.failed_steps = self.state.failed_steps()

    def run(self) -> DoctorReport:
        self.check_directories()
        self.check_templates()
        self.check_wrappers()
        self.check_functions()
        self.check_state()
        print_status_report([f.as_row() for f in self.report.findings], title="Doctor")
        if self.report.failed_steps:
            print_warning(
                f"Steps failed in the last run: {', '.join(self.report.failed_steps)}. "
                "Run 'terminal-env install --recover' to retry them."
            )
        logger.info(f"Doctor found {len(self.report.problems)} remaining problem(s)")
        return self.report
