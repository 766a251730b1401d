"""
Run State
--------------------------------------------------

Step records for one installer run, persisted as JSON after every
transition so an interrupted or partially failed run can be resumed with
--recover.
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class StepStatus(str, Enum):
    """Possible status of a setup step."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class StepRecord:
    name: str
    status: StepStatus = StepStatus.PENDING
    message: str = ""
    started: Optional[str] = None
    finished: Optional[str] = None

    def start(self) -> None:
        self.status = StepStatus.IN_PROGRESS
        self.message = ""
        self.started = datetime.now().strftime(TIME_FORMAT)
        self.finished = None

    def finish(self, status: StepStatus, message: str = "") -> None:
        self.status = status
        self.message = message
        self.finished = datetime.now().strftime(TIME_FORMAT)

    def as_row(self) -> Dict[str, str]:
        return {"name": self.name, "status": self.status.value, "message": self.message}


@dataclass
class RunState:
    """Ordered step records plus the choices the run was made with."""

    os_name: str = ""
    languages: Dict[str, bool] = field(default_factory=dict)
    steps: List[StepRecord] = field(default_factory=list)

    def record(self, name: str) -> StepRecord:
        """Return the record for a step, appending a pending one if new."""
        for rec in self.steps:
            if rec.name == name:
                return rec
        rec = StepRecord(name)
        self.steps.append(rec)
        return rec

    def status_of(self, name: str) -> StepStatus:
        for rec in self.steps:
            if rec.name == name:
                return rec.status
        return StepStatus.PENDING

    def failed_steps(self) -> List[str]:
        return [rec.name for rec in self.steps if rec.status == StepStatus.FAILED]

    def rows(self) -> List[Dict[str, str]]:
        return [rec.as_row() for rec in self.steps]

    def to_dict(self) -> dict:
        data = asdict(self)
        for step in data["steps"]:
            step["status"] = StepStatus(step["status"]).value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RunState":
        steps = [
            StepRecord(
                name=s["name"],
                status=StepStatus(s.get("status", StepStatus.PENDING.value)),
                message=s.get("message", ""),
                started=s.get("started"),
                finished=s.get("finished"),
            )
            for s in data.get("steps", [])
        ]
        return cls(
            os_name=data.get("os_name", ""),
            languages=dict(data.get("languages", {})),
            steps=steps,
        )

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(json.dumps(self.to_dict(), indent=2))
        tmp.replace(path)
        logger.debug(f"Saved run state to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> Optional["RunState"]:
        """Load a saved state, or None if there is none or it is unreadable."""
        path = Path(path)
        if not path.is_file():
            return None
        try:
            return cls.from_dict(json.loads(path.read_text()))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable state file {path}: {e}")
            return None
