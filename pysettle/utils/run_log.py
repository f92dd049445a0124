"""Run log — severity-tagged messages for the terminal and a per-run log file.

Every message goes to the terminal through a rich ``Console`` (colored tag)
and, when a log file is configured, is appended as a plain
``[TAG] message`` line so the run can be audited after the fact.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO

from rich.console import Console
from rich.markup import escape


@dataclass
class LogEntry:
    """A single tagged log line."""

    tag: str
    message: str


_STYLES = {
    "INFO": "blue",
    "SUCCESS": "green",
    "WARNING": "bold yellow",
    "ERROR": "red",
}


class RunLog:
    """Tagged logger writing to a rich console and mirroring to a plain file."""

    def __init__(self, log_path: Optional[Path] = None, console: Optional[Console] = None) -> None:
        self.console = console or Console()
        self.log_path = log_path
        self.entries: list[LogEntry] = []
        self._fh: Optional[TextIO] = None
        if log_path is not None:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "RunLog":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def info(self, message: str) -> None:
        self._emit("INFO", message)

    def success(self, message: str) -> None:
        self._emit("SUCCESS", message)

    def warning(self, message: str) -> None:
        self._emit("WARNING", message)

    def error(self, message: str) -> None:
        self._emit("ERROR", message)

    def echo(self, text: str = "", style: str = "") -> None:
        """Print untagged output (plans, verification) and mirror it to the file."""
        if style:
            self.console.print(f"[{style}]{escape(text)}[/]")
        else:
            self.console.print(escape(text))
        self._write(text)

    def record(self, text: str) -> None:
        """Append ``text`` to the log file only."""
        for line in text.splitlines():
            self._write(line)

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _emit(self, tag: str, message: str) -> None:
        self.entries.append(LogEntry(tag=tag, message=message))
        style = _STYLES[tag]
        self.console.print(f"[{style}]{escape(f'[{tag}]')}[/] {escape(message)}")
        self._write(f"[{tag}] {message}")

    def _write(self, line: str) -> None:
        if self._fh is None:
            return
        self._fh.write(line + "\n")
        self._fh.flush()
