"""Per-run data models: the run context, backup records and step outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.console import Console

from pysettle.utils.run_log import RunLog

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
BACKUP_DIR_PREFIX = "python_cleanup_backups_"
LOG_FILE_PREFIX = "python_cleanup_"


@dataclass
class RunContext:
    """Everything a synchronizer operation needs to know about the current run.

    Passed explicitly into every operation instead of living in module
    globals, so two runs (or two tests) never share a timestamp or log.
    """

    timestamp: str
    backup_dir: Path
    log: RunLog

    @classmethod
    def create(
        cls,
        backup_parent: Path,
        log_dir: Optional[Path] = None,
        console: Optional[Console] = None,
        now: Optional[datetime] = None,
    ) -> "RunContext":
        """Build a context stamped with ``now`` (default: current local time).

        The backup directory is only named here; the synchronizer creates it
        on its first write.
        """
        timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        log_path = None
        if log_dir is not None:
            log_path = Path(log_dir) / f"{LOG_FILE_PREFIX}{timestamp}.log"
        return cls(
            timestamp=timestamp,
            backup_dir=Path(backup_parent) / f"{BACKUP_DIR_PREFIX}{timestamp}",
            log=RunLog(log_path, console=console),
        )

    @property
    def log_path(self) -> Optional[Path]:
        return self.log.log_path


@dataclass
class BackupRecord:
    """A preserved copy of a managed file's content at a point in time."""

    source: Path
    backup_path: Path
    created_at: str


@dataclass(frozen=True)
class ManagedRegion:
    """Character span ``[start, end)`` of a marker-delimited block in a file's text."""

    start: int
    end: int

    def remove_from(self, text: str) -> str:
        return text[: self.start] + text[self.end :]


class StepStatus(Enum):
    """How a single orchestration step ended."""

    OK = "ok"
    WARNING = "warning"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class StepResult:
    """Outcome of one orchestration step."""

    name: str
    status: StepStatus
    detail: str = ""


@dataclass
class RunReport:
    """Full result of a cleanup run."""

    backup_dir: Path
    log_path: Optional[Path]
    steps: list[StepResult] = field(default_factory=list)
    backups: list[BackupRecord] = field(default_factory=list)
    cancelled: bool = False
    aborted: bool = False

    @property
    def warnings(self) -> list[StepResult]:
        return [s for s in self.steps if s.status == StepStatus.WARNING]

    @property
    def failed(self) -> bool:
        return self.aborted or any(s.status == StepStatus.FAILED for s in self.steps)

    def summary(self) -> str:
        lines = []
        for step in self.steps:
            line = f"{step.status.value.upper():<8} {step.name}"
            if step.detail:
                line = f"{line} ({step.detail})"
            lines.append(line)
        if self.aborted:
            lines.append("Run aborted before all steps completed.")
        lines.append(f"Backups:  {self.backup_dir}")
        lines.append(f"Log file: {self.log_path if self.log_path else '(none)'}")
        return "\n".join(lines)
