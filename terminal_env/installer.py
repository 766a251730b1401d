"""
Installer Sequencer
--------------------------------------------------

Runs the setup steps in their fixed order (core, the chosen languages,
configs, functions), records every transition in the run state file and
applies the failure policy: a required step aborts the run, an optional
step failure asks whether to continue.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Set

from terminal_env.config import LANGUAGES
from terminal_env.dotfiles import ConfigsInstaller, FunctionsInstaller
from terminal_env.errors import SetupError, UnknownStepError
from terminal_env.host import Host
from terminal_env.setups import CoreSetup, NodeSetup, PythonSetup, RubySetup
from terminal_env.state import RunState, StepStatus
from terminal_env.ui import (
    NordColors,
    ask_yes_no,
    display_panel,
    print_error,
    print_section,
    print_status_report,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_REQUIRED_FAILED = 1
EXIT_OPTIONAL_FAILED = 2

LANGUAGE_LABELS = {"python": "Python", "node": "Node.js", "ruby": "Ruby"}


@dataclass
class Step:
    """A named unit of setup work."""

    name: str
    description: str
    runner: Callable[[Host], None]
    required: bool = False
    prerequisite: Optional[Callable[[Host], bool]] = None


def _templates_dir_ready(language: str) -> Callable[[Host], bool]:
    def check(host: Host) -> bool:
        return host.ensure_directory(host.config.templates_dir(language))

    return check


STEPS: List[Step] = [
    Step("core", "Core system tools and shell", lambda h: CoreSetup(h).run(), required=True),
    Step(
        "python",
        "Python development environment",
        lambda h: PythonSetup(h).run(),
        prerequisite=_templates_dir_ready("python"),
    ),
    Step(
        "node",
        "Node.js development environment",
        lambda h: NodeSetup(h).run(),
        prerequisite=_templates_dir_ready("node"),
    ),
    Step(
        "ruby",
        "Ruby development environment",
        lambda h: RubySetup(h).run(),
        prerequisite=_templates_dir_ready("ruby"),
    ),
    Step("configs", "Neovim, tmux and git configuration", lambda h: ConfigsInstaller(h).run()),
    Step("functions", "Custom shell functions", lambda h: FunctionsInstaller(h).run()),
]

STEP_NAMES = [step.name for step in STEPS]


def get_step(name: str) -> Step:
    for step in STEPS:
        if step.name == name:
            return step
    raise UnknownStepError(name)


NEXT_STEPS = """1. Restart your terminal or run: source ~/.zshrc
2. Start tmux with: tmux
3. Inside tmux, press prefix + I to install tmux plugins
4. Create development sessions with: mkpy, mkjs, mkrb
5. Create new projects with: pyproject, nodeproject, rubyproject"""


class Installer:
    def __init__(
        self,
        host: Host,
        interactive: bool = True,
        assume_yes: bool = False,
        confirm: Callable[[str, bool], bool] = ask_yes_no,
    ):
        self.host = host
        self.config = host.config
        self.interactive = interactive
        self.assume_yes = assume_yes
        self.confirm = confirm
        self.state = RunState(os_name=host.os_name)
        self.recovered: Set[str] = set()

    # ----------------------------------------------------------------
    # Choices
    # ----------------------------------------------------------------
    def _answer(self, question: str, default: bool = True) -> bool:
        if self.assume_yes:
            return True
        if not self.interactive:
            return default
        answer = self.confirm(question, default)
        logger.info(f"{question} -> {'yes' if answer else 'no'}")
        return answer

    def choose_languages(
        self,
        flags: Dict[str, Optional[bool]],
        previous: Optional[RunState] = None,
    ) -> Dict[str, bool]:
        """Resolve language choices from flags, a previous run, or prompts."""
        choices = {}
        for lang in LANGUAGES:
            flag = flags.get(lang)
            if flag is not None:
                choices[lang] = flag
            elif previous is not None and lang in previous.languages:
                choices[lang] = previous.languages[lang]
            else:
                choices[lang] = self._answer(
                    f"Set up {LANGUAGE_LABELS[lang]} development environment?"
                )
        return choices

    # ----------------------------------------------------------------
    # Step Execution
    # ----------------------------------------------------------------
    def _save(self) -> None:
        try:
            self.state.save(self.config.STATE_FILE)
        except OSError as e:
            logger.warning(f"Could not save run state: {e}")

    def run_step(self, step: Step) -> bool:
        """Run one step, recording its outcome. Returns True on success."""
        record = self.state.record(step.name)
        record.start()
        self._save()
        print_section(step.description)
        logger.info(f"Running step {step.name}")
        try:
            if step.prerequisite and not step.prerequisite(self.host):
                raise SetupError(f"prerequisite for {step.name} not met")
            step.runner(self.host)
        except (KeyboardInterrupt, SystemExit):
            record.finish(StepStatus.FAILED, "interrupted")
            self._save()
            raise
        except (SetupError, OSError) as e:
            record.finish(StepStatus.FAILED, str(e))
            self._save()
            logger.error(f"Step {step.name} failed: {e}")
            return False
        record.finish(StepStatus.SUCCESS)
        self._save()
        logger.info(f"Step {step.name} completed successfully")
        return True

    def run(
        self,
        flags: Optional[Dict[str, Optional[bool]]] = None,
        recover: bool = False,
        skip_core: bool = False,
    ) -> int:
        """Run every selected step in order and return the exit code."""
        previous = None
        if recover:
            previous = RunState.load(self.config.STATE_FILE)
            if previous is None:
                print_warning("No previous run state found; running every step.")
            else:
                logger.info(f"Recovering from {self.config.STATE_FILE}")
                self.state.steps = previous.steps

        self.state.languages = self.choose_languages(flags or {}, previous)
        self.state.os_name = self.host.os_name
        self._save()

        optional_failed = False
        for step in STEPS:
            record = self.state.record(step.name)
            if step.name == "core" and skip_core:
                record.finish(StepStatus.SKIPPED, "skipped by request")
                continue
            if step.name in LANGUAGES and not self.state.languages.get(step.name):
                record.finish(StepStatus.SKIPPED, "not selected")
                continue
            if previous is not None and record.status == StepStatus.SUCCESS:
                logger.info(f"Skipping {step.name}: completed in a previous run")
                self.recovered.add(step.name)
                continue

            if self.run_step(step):
                continue
            print_error(f"{step.description} failed: {record.message}")
            if step.required:
                self._save()
                self.report()
                print_error("A required step failed; aborting installation.")
                return EXIT_REQUIRED_FAILED
            optional_failed = True
            if not self._answer("Continue with installation despite error?"):
                logger.info("Installation stopped after optional step failure.")
                break

        self._save()
        self.report()
        if optional_failed:
            print_warning(
                "Some steps failed. Fix the problem and run 'terminal-env install --recover'."
            )
            return EXIT_OPTIONAL_FAILED
        print_success("Installation complete!")
        display_panel(NEXT_STEPS, NordColors.FROST_2, "Next Steps")
        return EXIT_OK

    def run_single(self, name: str) -> int:
        """Run one named step outside the full sequence."""
        step = get_step(name)
        previous = RunState.load(self.config.STATE_FILE)
        if previous is not None:
            self.state = previous
            self.state.os_name = self.host.os_name
        if step.name in LANGUAGES:
            self.state.languages[step.name] = True
        ok = self.run_step(step)
        self.report()
        if ok:
            return EXIT_OK
        print_error(f"{step.description} failed: {self.state.record(step.name).message}")
        return EXIT_REQUIRED_FAILED if step.required else EXIT_OPTIONAL_FAILED

    def report(self) -> None:
        rows = []
        for row in self.state.rows():
            if row["name"] in self.recovered:
                row = dict(
                    row,
                    status=StepStatus.SKIPPED.value,
                    message="completed in a previous run",
                )
            rows.append(row)
        print_status_report(rows)
