"""Homebrew operations — inspect, install, uninstall and link formulae."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass

from pysettle.errors import ExternalCommandFailure, MissingDependency

BREW_INSTALL_HINT = "Please install Homebrew first (https://brew.sh)."


def command_exists(name: str) -> bool:
    """Return True if ``name`` resolves to an executable on PATH."""
    return shutil.which(name) is not None


@dataclass
class CommandResult:
    """Captured result of one external command."""

    command: list[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def run_command(command: list[str], timeout: int = 600) -> CommandResult:
    """Run ``command`` and capture its output.

    Raises:
        ExternalCommandFailure: If the command cannot be started or times out.
    """
    try:
        proc = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ExternalCommandFailure(command, stderr=f"timed out after {timeout}s") from e
    except OSError as e:
        raise ExternalCommandFailure(command, stderr=str(e)) from e
    return CommandResult(
        command=list(command),
        exit_code=proc.returncode,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


class BrewClient:
    """Thin wrapper around the ``brew`` executable."""

    def __init__(self, executable: str = "brew", timeout: int = 600):
        self.executable = executable
        self.timeout = timeout

    def ensure_available(self) -> None:
        """Raise MissingDependency unless ``brew`` is on PATH."""
        if not command_exists(self.executable):
            raise MissingDependency("Homebrew", BREW_INSTALL_HINT)

    def installed_version(self, formula: str) -> str | None:
        """Return the installed version of ``formula``, or None if it is not installed.

        ``brew list --versions`` prints ``<formula> <version> [<version>...]``;
        the first listed version is returned.
        """
        try:
            result = self._run("list", "--versions", formula)
        except ExternalCommandFailure:
            return None
        if not result.ok:
            return None
        parts = result.stdout.split()
        if len(parts) < 2:
            return None
        return parts[1]

    def is_installed(self, formula: str) -> bool:
        return self.installed_version(formula) is not None

    def install(self, formula: str) -> CommandResult:
        return self._check(self._run("install", formula))

    def uninstall(self, formula: str, ignore_dependencies: bool = False) -> CommandResult:
        args = ["uninstall"]
        if ignore_dependencies:
            args.append("--ignore-dependencies")
        return self._check(self._run(*args, formula))

    def unlink(self, formula: str) -> CommandResult:
        return self._check(self._run("unlink", formula))

    def link(self, formula: str, overwrite: bool = True) -> CommandResult:
        args = ["link"]
        if overwrite:
            args.append("--overwrite")
        return self._check(self._run(*args, formula))

    def _run(self, *args: str) -> CommandResult:
        return run_command([self.executable, *args], timeout=self.timeout)

    @staticmethod
    def _check(result: CommandResult) -> CommandResult:
        if not result.ok:
            raise ExternalCommandFailure(result.command, result.exit_code, result.stderr)
        return result


def which(*names: str) -> str:
    """Return the first of ``names`` found on PATH, or '' if none is."""
    for name in names:
        found = shutil.which(name)
        if found:
            return found
    return ""


def tool_version(command: list[str]) -> str:
    """Return the first line a ``--version`` style command prints, or a placeholder."""
    try:
        result = run_command(command, timeout=30)
    except ExternalCommandFailure as e:
        return f"(unavailable: {e})"
    output = (result.stdout or result.stderr).strip()
    if not result.ok or not output:
        return "(unavailable)"
    return output.splitlines()[0]
