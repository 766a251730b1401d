"""Command-line interface for the terminal environment installer."""

import platform
import signal
import sys
from pathlib import Path
from typing import Optional

import click

from terminal_env import __version__
from terminal_env.config import LANGUAGES, Config
from terminal_env.doctor import Doctor
from terminal_env.errors import ScaffoldError, UnknownStepError, UnsupportedOSError
from terminal_env.host import Host
from terminal_env.installer import Installer
from terminal_env.logs import close_logger, setup_logger
from terminal_env.scaffold import create_project
from terminal_env.state import RunState
from terminal_env.ui import (
    NordColors,
    console,
    create_header,
    print_error,
    print_status_report,
    print_success,
    print_warning,
)


def make_host(config: Config) -> Host:
    return Host(config)


def signal_handler(signum: int, frame) -> None:
    sig_name = signal.Signals(signum).name
    print_warning(f"Process interrupted by {sig_name}")
    sys.exit(128 + signum)


def _host(ctx: click.Context) -> Host:
    try:
        return make_host(ctx.obj)
    except UnsupportedOSError as e:
        print_error(str(e))
        ctx.exit(1)


def _start(ctx: click.Context, log: bool = True) -> None:
    config: Config = ctx.obj
    setup_logger(config.LOG_FILE if log else None, debug=ctx.meta["debug"])
    ctx.call_on_close(close_logger)


@click.group()
@click.version_option(version=__version__, prog_name="terminal-env")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Install log path (default: install_log.txt in the source directory).",
)
@click.option("--debug", is_flag=True, help="Show debug output on the console.")
@click.pass_context
def cli(ctx: click.Context, log_file: Optional[Path], debug: bool) -> None:
    """Set up and maintain a terminal development environment."""
    ctx.obj = Config(LOG_FILE=log_file) if log_file else Config()
    ctx.meta["debug"] = debug


@cli.command()
@click.option("--recover", is_flag=True, help="Skip steps that succeeded in the last run.")
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="Answer yes to every prompt.")
@click.option("--python/--no-python", default=None, help="Set up Python.")
@click.option("--node/--no-node", default=None, help="Set up Node.js.")
@click.option("--ruby/--no-ruby", default=None, help="Set up Ruby.")
@click.option("--skip-core", is_flag=True, help="Skip the core system step.")
@click.pass_context
def install(
    ctx: click.Context,
    recover: bool,
    assume_yes: bool,
    python: Optional[bool],
    node: Optional[bool],
    ruby: Optional[bool],
    skip_core: bool,
) -> None:
    """Install the full environment."""
    _start(ctx)
    signal.signal(signal.SIGTERM, signal_handler)
    host = _host(ctx)
    console.print(create_header())
    console.print(f"Platform: [bold {NordColors.SNOW_STORM_1}]{platform.platform()}[/]")
    console.print(f"Detected OS: [bold {NordColors.SNOW_STORM_1}]{host.os_name}[/]")
    console.print(f"Log file: [bold {NordColors.SNOW_STORM_1}]{ctx.obj.LOG_FILE}[/]")

    installer = Installer(host, interactive=sys.stdin.isatty(), assume_yes=assume_yes)
    flags = dict(zip(LANGUAGES, (python, node, ruby)))
    try:
        code = installer.run(flags, recover=recover, skip_core=skip_core)
    except KeyboardInterrupt:
        print_warning("Installation interrupted by user.")
        ctx.exit(130)
    ctx.exit(code)


@cli.command()
@click.argument("name")
@click.pass_context
def step(ctx: click.Context, name: str) -> None:
    """Run a single setup step (core, python, node, ruby, configs, functions)."""
    _start(ctx)
    signal.signal(signal.SIGTERM, signal_handler)
    host = _host(ctx)
    try:
        code = Installer(host, interactive=sys.stdin.isatty()).run_single(name)
    except UnknownStepError as e:
        print_error(str(e))
        ctx.exit(1)
    except KeyboardInterrupt:
        print_warning("Step interrupted by user.")
        ctx.exit(130)
    ctx.exit(code)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the step status recorded by the last run."""
    _start(ctx, log=False)
    state = RunState.load(ctx.obj.STATE_FILE)
    if state is None:
        print_warning(f"No install state recorded at {ctx.obj.STATE_FILE}")
        ctx.exit(1)
    chosen = [lang for lang, on in state.languages.items() if on]
    console.print(f"OS: {state.os_name or 'unknown'}  Languages: {', '.join(chosen) or 'none'}")
    print_status_report(state.rows())


@cli.command()
@click.option("--fix", is_flag=True, help="Repair what can be repaired.")
@click.pass_context
def doctor(ctx: click.Context, fix: bool) -> None:
    """Check an existing installation."""
    _start(ctx)
    report = Doctor(_host(ctx), fix=fix).run()
    if report.healthy:
        print_success("No problems found.")
        return
    print_error(f"{len(report.problems)} problem(s) found.")
    if not fix:
        console.print("Run 'terminal-env doctor --fix' to repair them.")
    ctx.exit(1)


@cli.command()
@click.argument("language", type=click.Choice(LANGUAGES))
@click.argument("name")
@click.option(
    "--dir",
    "parent",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Directory to create the project in.",
)
@click.pass_context
def new(ctx: click.Context, language: str, name: str, parent: Path) -> None:
    """Create a new project."""
    _start(ctx, log=False)
    host = _host(ctx)
    try:
        root = create_project(language, name, parent, host)
    except ScaffoldError as e:
        print_error(str(e))
        ctx.exit(1)
    print_success(f"Project {name} created successfully!")
    console.print(f"  cd {root}")


def main() -> None:
    cli(prog_name="terminal-env")


if __name__ == "__main__":
    main()
