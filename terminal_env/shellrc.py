"""
Shell RC Management
--------------------------------------------------

Idempotent edits to ~/.zshrc: every block is keyed by a marker string and
appended only when the marker is absent, so re-running a step never
duplicates lines.
"""

import logging
from importlib import resources
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

MANAGED_MARKER = "# Managed by terminal-env"


def bundled_file(*parts: str) -> Path:
    """Path to a file shipped in the package's data directory."""
    path = resources.files("terminal_env") / "data"
    for part in parts:
        path = path / part
    return Path(str(path))


class ShellRC:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def read(self) -> str:
        if not self.path.is_file():
            return ""
        return self.path.read_text()

    def contains(self, marker: str) -> bool:
        return marker in self.read()

    def append_block(self, marker: str, text: str, comment: Optional[str] = None) -> bool:
        """Append text unless marker already appears. Returns True if written."""
        if self.contains(marker):
            logger.debug(f"{self.path.name} already contains {marker!r}")
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        block = "\n"
        if comment:
            block += f"# {comment}\n"
        block += text.rstrip("\n") + "\n"
        with open(self.path, "a") as f:
            f.write(block)
        logger.info(f"Added {comment or marker} to {self.path}")
        return True

    def add_function(self, name: str, command: str, comment: Optional[str] = None) -> bool:
        body = f'{name}() {{\n    {command} "$@"\n}}'
        added = self.append_block(f"{name}()", body, comment or f"{name} function")
        if not added:
            logger.info(f"{name} function already exists in {self.path.name}")
        return added

    def add_path(self, directory: str, comment: Optional[str] = None) -> bool:
        line = f'export PATH="{directory}:$PATH"'
        return self.append_block(line, line, comment)

    def add_alias(self, name: str, value: str, comment: Optional[str] = None) -> bool:
        return self.append_block(f"alias {name}=", f'alias {name}="{value}"', comment)

    def add_source(self, script: Union[str, Path], comment: Optional[str] = None) -> bool:
        line = f'[ -f "{script}" ] && source "{script}"'
        return self.append_block(line, line, comment)


def write_default_zshrc(rc: ShellRC, backup) -> bool:
    """
    Write the base zsh configuration.

    A file that already carries the managed marker is left untouched; any
    other existing file is backed up with the given callable first.
    Returns True if the file was written.
    """
    if rc.contains(MANAGED_MARKER):
        logger.info(f"{rc.path} is already managed; leaving it in place.")
        return False
    if rc.path.is_file():
        saved = backup(rc.path)
        if saved:
            logger.info(f"Existing {rc.path.name} saved to {saved}")
    rc.path.parent.mkdir(parents=True, exist_ok=True)
    template = bundled_file("zshrc").read_text()
    rc.path.write_text(f"{MANAGED_MARKER}\n{template}")
    logger.info(f"Wrote zsh configuration to {rc.path}")
    return True
