"""Exception hierarchy for the installer."""

from typing import List, Optional


class SetupError(Exception):
    """Base exception for all setup-related errors."""

    pass


class UnsupportedOSError(SetupError):
    """Raised when the running platform is neither macOS nor Linux."""

    def __init__(self, platform_name: str):
        self.platform_name = platform_name
        super().__init__(f"Unsupported operating system: {platform_name}")


class CommandError(SetupError):
    """An external command exited non-zero or timed out."""

    def __init__(
        self,
        cmd: List[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
        timed_out: bool = False,
    ):
        self.cmd = cmd
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.timed_out = timed_out
        if timed_out:
            reason = "timed out"
        else:
            reason = f"exited with status {returncode}"
        super().__init__(f"Command {' '.join(cmd)!r} {reason}")


class StepError(SetupError):
    """A setup step could not complete."""

    def __init__(self, step: str, message: str):
        self.step = step
        super().__init__(f"{step}: {message}")


class UnknownStepError(SetupError):
    """A step name was requested that is not registered."""

    def __init__(self, step: str):
        self.step = step
        super().__init__(f"Unknown setup step: {step}")


class ScaffoldError(SetupError):
    """Project generation failed."""

    pass
