"""Exception types raised by pysettle.

Convention:
- ``MissingDependency`` and ``IOFailure`` are fatal: the CLI aborts the run
  and exits non-zero.
- ``MalformedRegion`` is fatal for the same reason as ``IOFailure``: the
  target file cannot be rewritten without guessing.
- ``ExternalCommandFailure`` is tolerated: the runner records a warning and
  moves on to the next step.
"""

from __future__ import annotations

from pathlib import Path


class PySettleError(Exception):
    """Base class for all pysettle errors."""


class MissingDependency(PySettleError):
    """A required external tool is not on PATH."""

    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        self.hint = hint
        message = f"{tool} is not installed."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class IOFailure(PySettleError):
    """A backup or write of a managed file could not be completed."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class MalformedRegion(PySettleError):
    """Managed-region markers in a file are missing, duplicated or out of order."""

    def __init__(self, path: str | Path, reason: str):
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


class ExternalCommandFailure(PySettleError):
    """An external command exited non-zero or timed out."""

    def __init__(self, command: list[str], exit_code: int | None = None, stderr: str = ""):
        self.command = list(command)
        self.exit_code = exit_code
        self.stderr = stderr
        joined = " ".join(self.command)
        if exit_code is None:
            message = f"`{joined}` did not complete"
        else:
            message = f"`{joined}` exited with status {exit_code}"
        if stderr:
            message = f"{message}: {stderr.strip()[:200]}"
        super().__init__(message)
