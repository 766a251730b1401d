"""
Console Output Helpers
--------------------------------------------------

Nord-themed rich console shared by every part of the installer, plus the
banner, message, panel and status-report helpers.
"""

from typing import Dict, List, Optional

import click
import pyfiglet
from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from terminal_env import APP_NAME, APP_SUBTITLE, __version__


# ----------------------------------------------------------------
# Nord-Themed Colors and Theme Setup
# ----------------------------------------------------------------
class NordColors:
    POLAR_NIGHT_1: str = "#2E3440"
    POLAR_NIGHT_3: str = "#434C5E"
    POLAR_NIGHT_4: str = "#4C566A"
    SNOW_STORM_1: str = "#D8DEE9"
    SNOW_STORM_2: str = "#E5E9F0"
    FROST_1: str = "#8FBCBB"
    FROST_2: str = "#88C0D0"
    FROST_3: str = "#81A1C1"
    FROST_4: str = "#5E81AC"
    RED: str = "#BF616A"
    ORANGE: str = "#D08770"
    YELLOW: str = "#EBCB8B"
    GREEN: str = "#A3BE8C"

    @classmethod
    def get_frost_gradient(cls, steps: int = 4) -> List[str]:
        """Return a list of frost colors for gradients."""
        frosts = [cls.FROST_1, cls.FROST_2, cls.FROST_3, cls.FROST_4]
        return frosts[: max(1, steps)]


nord_theme = Theme(
    {
        "banner": f"bold {NordColors.FROST_2}",
        "header": f"bold {NordColors.FROST_2}",
        "info": NordColors.GREEN,
        "warning": NordColors.YELLOW,
        "error": NordColors.RED,
        "debug": NordColors.POLAR_NIGHT_3,
        "success": NordColors.GREEN,
    }
)

console = Console(theme=nord_theme, highlight=False)

STATUS_STYLES: Dict[str, str] = {
    "pending": "debug",
    "in_progress": "warning",
    "success": "success",
    "skipped": "header",
    "failed": "error",
}


# ----------------------------------------------------------------
# Banner
# ----------------------------------------------------------------
def create_header(title: str = APP_NAME) -> Panel:
    """
    Generate an ASCII art header with gradient styling using Pyfiglet.

    The banner is built line-by-line into a Text object so figlet output
    containing square brackets is never parsed as markup.
    """
    fonts = ["slant", "small", "standard", "digital", "mini"]
    ascii_art = ""
    for font in fonts:
        try:
            fig = pyfiglet.Figlet(font=font, width=80)
            ascii_art = fig.renderText(title)
            if ascii_art.strip():
                break
        except pyfiglet.FontNotFound:
            continue
    if not ascii_art.strip():
        ascii_art = title

    ascii_lines = [line for line in ascii_art.splitlines() if line.strip()]
    colors = NordColors.get_frost_gradient(min(len(ascii_lines), 4))
    combined_text = Text()
    for i, line in enumerate(ascii_lines):
        combined_text.append(line, style=f"bold {colors[i % len(colors)]}")
        if i < len(ascii_lines) - 1:
            combined_text.append("\n")

    border = Text("━" * 60, style=NordColors.FROST_3)
    return Panel(
        Align.center(Text.assemble(border, "\n", combined_text, "\n", border)),
        border_style=NordColors.FROST_1,
        padding=(1, 2),
        title=Text(f"v{__version__}", style=f"bold {NordColors.SNOW_STORM_2}"),
        title_align="right",
        subtitle=Text(APP_SUBTITLE, style=f"bold {NordColors.SNOW_STORM_1}"),
        subtitle_align="center",
    )


# ----------------------------------------------------------------
# Simple Message Printing Helpers
# ----------------------------------------------------------------
def print_message(
    text: str, style: str = NordColors.FROST_2, prefix: str = "•"
) -> None:
    console.print(f"[{style}]{prefix} {escape(text)}[/{style}]")


def print_step(message: str) -> None:
    """Print a step description."""
    print_message(message, NordColors.FROST_3, "➜")


def print_success(message: str) -> None:
    print_message(message, NordColors.GREEN, "✓")


def print_warning(message: str) -> None:
    print_message(message, NordColors.YELLOW, "⚠")


def print_error(message: str) -> None:
    print_message(message, NordColors.RED, "✗")


def print_section(title: str) -> None:
    """Print a compact section header panel."""
    console.print(
        Panel(
            Text(title, style=f"bold {NordColors.FROST_1}"),
            border_style=Style(color=NordColors.FROST_3),
            padding=(0, 2),
        )
    )


def display_panel(
    message: str, style: str = NordColors.FROST_2, title: Optional[str] = None
) -> None:
    """
    Display a message in a styled panel.

    Args:
        message: The message to display
        style: The color style to use
        title: Optional panel title
    """
    panel = Panel(
        Text.from_markup(f"[{style}]{message}[/]"),
        border_style=Style(color=style),
        padding=(1, 2),
        title=f"[bold {style}]{title}[/]" if title else None,
    )
    console.print(panel)


def print_status_report(rows: List[Dict[str, str]], title: str = "Setup Status") -> None:
    """Render step records (name, status, message) as a status table."""
    table = Table(
        show_header=True,
        header_style=f"bold {NordColors.FROST_1}",
        border_style=NordColors.FROST_3,
        title_justify="center",
        expand=True,
    )
    table.add_column("Step", style="header")
    table.add_column("Status")
    table.add_column("Message", style=NordColors.SNOW_STORM_1)
    for row in rows:
        status = row.get("status", "pending").lower()
        status_style = STATUS_STYLES.get(status, "info")
        table.add_row(
            row.get("name", "").replace("_", " ").title(),
            f"[{status_style}]{status.upper()}[/{status_style}]",
            row.get("message", ""),
        )
    console.print(
        Panel(
            table,
            title=f"[banner]{title}[/banner]",
            border_style=NordColors.FROST_3,
            padding=(1, 2),
        )
    )


# ----------------------------------------------------------------
# Prompts
# ----------------------------------------------------------------
def ask_yes_no(question: str, default: bool = True) -> bool:
    """Single-keystroke y/n prompt. Enter or any other key takes the default."""
    suffix = "[Y/n]" if default else "[y/N]"
    console.print(f"[bold {NordColors.FROST_2}]{question} {suffix}[/] ", end="")
    key = click.getchar()
    console.print(key if key.isprintable() else "")
    if key.lower() == "y":
        return True
    if key.lower() == "n":
        return False
    return default
