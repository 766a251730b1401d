"""
Host Operations
--------------------------------------------------

Everything that touches the machine goes through a Host: running external
commands, probing for installed tools, downloading installer scripts and
small filesystem chores (directories, backups, symlinks, executables).
Tests substitute a Host that records commands instead of running them.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import requests

from terminal_env.config import Config, detect_os
from terminal_env.errors import CommandError
from terminal_env.ui import console

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class Host:
    def __init__(self, config: Config, os_name: Optional[str] = None):
        self.config = config
        self.os_name = os_name or detect_os()
        self.is_root = hasattr(os, "geteuid") and os.geteuid() == 0

    # ----------------------------------------------------------------
    # Command Execution
    # ----------------------------------------------------------------
    def which(self, cmd: str) -> Optional[str]:
        return shutil.which(cmd)

    def command_exists(self, cmd: str) -> bool:
        return self.which(cmd) is not None

    def run(
        self,
        cmd: List[str],
        check: bool = True,
        timeout: Optional[int] = None,
        env: Optional[Dict[str, str]] = None,
        cwd: Optional[Union[str, Path]] = None,
        input_text: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        """
        Run a command with captured text output.

        The command line and whatever it printed are written to the log at
        DEBUG level. Raises CommandError on a non-zero exit when check is
        set, on timeout, and when the executable does not exist.
        """
        timeout = timeout or self.config.DEFAULT_TIMEOUT
        cmd_str = " ".join(str(c) for c in cmd)
        logger.debug(f"Running command: {cmd_str}")
        try:
            result = subprocess.run(
                [str(c) for c in cmd],
                check=False,
                text=True,
                capture_output=True,
                timeout=timeout,
                env=env or os.environ.copy(),
                cwd=str(cwd) if cwd else None,
                input=input_text,
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"Command timed out after {timeout} seconds: {cmd_str}")
            raise CommandError(
                list(cmd), None, _decode(e.stdout), _decode(e.stderr), timed_out=True
            ) from e
        except FileNotFoundError as e:
            logger.debug(f"Executable not found: {cmd[0]}")
            raise CommandError(list(cmd), 127, "", str(e)) from e

        if result.stdout and result.stdout.strip():
            logger.debug(f"stdout: {result.stdout.strip()}")
        if result.stderr and result.stderr.strip():
            logger.debug(f"stderr: {result.stderr.strip()}")
        if check and result.returncode != 0:
            raise CommandError(list(cmd), result.returncode, result.stdout, result.stderr)
        return result

    def succeeds(self, cmd: List[str], **kwargs) -> bool:
        """Return True if the command runs and exits zero."""
        try:
            return self.run(cmd, check=False, **kwargs).returncode == 0
        except CommandError as e:
            logger.debug(f"Probe failed: {e}")
            return False

    def output(self, cmd: List[str]) -> str:
        """Return the stripped stdout of a command, or an empty string."""
        try:
            return self.run(cmd, check=False).stdout.strip()
        except CommandError as e:
            logger.debug(f"Could not read output of {cmd[0]}: {e}")
            return ""

    def sudo(self, cmd: List[str]) -> List[str]:
        if self.is_root or not self.command_exists("sudo"):
            return list(cmd)
        return ["sudo"] + list(cmd)

    # ----------------------------------------------------------------
    # Installer Downloads
    # ----------------------------------------------------------------
    def download(self, url: str, dest: Union[str, Path]) -> Path:
        dest = Path(dest)
        logger.info(f"Downloading {url}")
        with console.status(f"Downloading {url.rsplit('/', 1)[-1] or url}...", spinner="dots"):
            try:
                with requests.get(
                    url, stream=True, timeout=self.config.DOWNLOAD_TIMEOUT
                ) as response:
                    response.raise_for_status()
                    with open(dest, "wb") as f:
                        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                            if chunk:
                                f.write(chunk)
            except requests.RequestException as e:
                raise CommandError(["download", url], None, "", str(e)) from e
        logger.debug(f"Download complete: {dest}")
        return dest

    def run_installer(
        self,
        url: str,
        args: Sequence[str] = (),
        interpreter: str = "bash",
        env: Optional[Dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        """Download an installer script and execute it with an interpreter."""
        with tempfile.TemporaryDirectory(prefix="terminal_env_") as tmp:
            script = self.download(url, Path(tmp) / "installer")
            script.chmod(0o755)
            return self.run([interpreter, str(script)] + list(args), env=env)

    # ----------------------------------------------------------------
    # Git
    # ----------------------------------------------------------------
    def git_clone(self, url: str, dest: Union[str, Path], depth: Optional[int] = None) -> bool:
        """Clone url into dest unless dest exists. Returns True if cloned."""
        dest = Path(dest)
        if dest.exists():
            logger.info(f"{dest} already present; skipping clone.")
            return False
        cmd = ["git", "clone"]
        if depth:
            cmd += ["--depth", str(depth)]
        self.run(cmd + [url, str(dest)])
        logger.info(f"Cloned {url} into {dest}")
        return True

    # ----------------------------------------------------------------
    # Filesystem Helpers
    # ----------------------------------------------------------------
    def ensure_directory(self, path: Union[str, Path], mode: int = 0o755) -> bool:
        path = Path(path)
        if not path.is_dir():
            try:
                path.mkdir(parents=True, exist_ok=True)
                path.chmod(mode)
                logger.debug(f"Created directory: {path}")
            except OSError as e:
                logger.error(f"Failed to create directory {path}: {e}")
                return False
            return True
        if not os.access(path, os.W_OK):
            logger.warning(f"Directory exists but is not writable: {path}")
            try:
                path.chmod(mode)
            except OSError as e:
                logger.warning(f"Failed to make directory writable {path}: {e}")
                return False
        return True

    def backup_file(self, file_path: Union[str, Path]) -> Optional[Path]:
        file_path = Path(file_path)
        if not file_path.is_file():
            return None
        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        backup_path = file_path.with_name(f"{file_path.name}.bak.{timestamp}")
        try:
            shutil.copy2(file_path, backup_path)
            logger.debug(f"Backed up {file_path} to {backup_path}")
            return backup_path
        except OSError as e:
            logger.warning(f"Failed to backup {file_path}: {e}")
            return None

    def link_alias(self, real: str, alias: str) -> bool:
        """Symlink a differently named binary (fdfind, batcat) into LOCAL_BIN."""
        real_path = self.which(real)
        if not real_path or self.command_exists(alias):
            return False
        link = self.config.LOCAL_BIN / alias
        self.ensure_directory(self.config.LOCAL_BIN)
        if link.is_symlink() or link.exists():
            link.unlink()
        link.symlink_to(real_path)
        logger.info(f"Linked {real} as {link}")
        return True

    def write_executable(self, path: Union[str, Path], content: str) -> Path:
        path = Path(path)
        self.ensure_directory(path.parent)
        path.write_text(content)
        path.chmod(0o755)
        return path


def _decode(value: Union[str, bytes, None]) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return value
