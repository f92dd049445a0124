"""Cleanup runner — the ordered steps of a toolchain cleanup.

The runner:
1. Checks that Homebrew is available (nothing is touched otherwise)
2. Removes unwanted ``python@X.Y`` formulae and extra tools such as pipx
3. Installs and relinks the pinned Python
4. Rewrites pip.conf, the shell profile block and the global gitignore
5. Optionally clears bytecode caches
6. Prints what ``python3``/``pip3`` now resolve to

Package-manager failures are recorded as warnings and the run continues.
File I/O failures abort the remaining steps; the report still says where
the backups and the log are.
"""

from __future__ import annotations

from typing import Callable, Optional

from pysettle.config import Settings
from pysettle.errors import ExternalCommandFailure, IOFailure, MalformedRegion
from pysettle.models.run import RunContext, RunReport, StepResult, StepStatus
from pysettle.sync.synchronizer import ConfigSynchronizer
from pysettle.templates import (
    SHELL_MARKER_END,
    SHELL_MARKER_PREFIX,
    SHELL_MARKER_START,
    render_gitignore,
    render_pip_conf,
    render_shell_block,
)
from pysettle.utils.brew_ops import BrewClient, tool_version, which
from pysettle.utils.cache_cleaner import clear_python_caches
from pysettle.utils.git_ops import (
    get_global_excludesfile,
    global_config_path,
    set_global_excludesfile,
)

CACHE_PROMPT = (
    "Do you want to clear Python cache files? This will remove all "
    "__pycache__ directories and .pyc files."
)

Outcome = tuple[StepStatus, str]


class CleanupRunner:
    """Executes a full cleanup run against one machine."""

    def __init__(
        self,
        settings: Settings,
        ctx: RunContext,
        brew: Optional[BrewClient] = None,
        confirm: Optional[Callable[[str], bool]] = None,
        which_fn: Callable[..., str] = which,
        version_fn: Callable[[list[str]], str] = tool_version,
    ):
        """Initialize the runner.

        Args:
            settings: What to keep, remove and rewrite.
            ctx: The run context (timestamp, backup directory, log).
            brew: Homebrew client; defaults to the ``brew`` on PATH.
            confirm: Asked before clearing caches. Defaults to always "no".
            which_fn: Resolves the first of several command names to a path.
            version_fn: Returns the version banner of a command.
        """
        self.settings = settings
        self.ctx = ctx
        self.log = ctx.log
        self.brew = brew or BrewClient()
        self.confirm = confirm or (lambda prompt: False)
        self.which = which_fn
        self.version = version_fn
        self.sync = ConfigSynchronizer(ctx)

    def run(self) -> RunReport:
        """Execute every step in order.

        Raises:
            MissingDependency: If Homebrew is not installed. Raised before
                anything is modified.
        """
        self.brew.ensure_available()

        report = RunReport(backup_dir=self.ctx.backup_dir, log_path=self.ctx.log_path)
        steps: list[tuple[str, Callable[[], Outcome]]] = [
            ("Remove unwanted Python versions", self._remove_python_versions),
            ("Remove extra formulae", self._remove_formulae),
            (f"Pin Python {self.settings.keep_version}", self._pin_python),
            ("Write pip configuration", self._write_pip_conf),
            ("Update shell profile", self._write_shell_profile),
            ("Write global gitignore", self._write_gitignore),
            ("Clear Python caches", self._clear_caches),
            ("Verify installation", self._verify),
        ]

        for name, step in steps:
            try:
                status, detail = step()
            except (IOFailure, MalformedRegion) as e:
                self.log.error(f"{name} failed: {e}")
                report.steps.append(StepResult(name, StepStatus.FAILED, str(e)))
                report.aborted = True
                break
            report.steps.append(StepResult(name, status, detail))

        report.backups = list(self.sync.backups)
        return report

    # ── Package manager ─────────────────────────────────────────────

    def _remove_python_versions(self) -> Outcome:
        self.log.info("Checking installed Python versions...")
        return self._uninstall_all(self.settings.remove_python_formulae, ignore_dependencies=True)

    def _remove_formulae(self) -> Outcome:
        return self._uninstall_all(self.settings.remove_formulae, ignore_dependencies=False)

    def _uninstall_all(self, formulae: list[str], ignore_dependencies: bool) -> Outcome:
        removed: list[str] = []
        failed: list[str] = []
        for formula in formulae:
            if not self.brew.is_installed(formula):
                continue
            self.log.info(f"Uninstalling {formula}...")
            try:
                self.brew.uninstall(formula, ignore_dependencies=ignore_dependencies)
            except ExternalCommandFailure as e:
                self.log.warning(f"Failed to uninstall {formula}: {e}")
                failed.append(formula)
                continue
            removed.append(formula)

        if failed:
            return StepStatus.WARNING, f"failed: {', '.join(failed)}"
        if removed:
            return StepStatus.OK, f"removed: {', '.join(removed)}"
        return StepStatus.SKIPPED, "nothing installed"

    def _pin_python(self) -> Outcome:
        formula = self.settings.keep_formula
        self.log.info(f"Setting up Python {self.settings.keep_version}...")

        if not self.brew.is_installed(formula):
            self.log.info(f"Installing {formula}...")
            try:
                self.brew.install(formula)
            except ExternalCommandFailure as e:
                self.log.warning(f"Failed to install {formula}: {e}")
                return StepStatus.WARNING, "install failed"

        self.log.info(f"Unlinking and relinking {formula}...")
        try:
            self.brew.unlink(formula)
        except ExternalCommandFailure:
            self.log.info(f"{formula} was not linked")

        try:
            self.brew.link(formula, overwrite=True)
        except ExternalCommandFailure as e:
            self.log.warning(f"Failed to link {formula}: {e}")
            return StepStatus.WARNING, "link failed"

        version = self.brew.installed_version(formula) or "unknown"
        return StepStatus.OK, f"{formula} {version}"

    # ── Config files ────────────────────────────────────────────────

    def _write_pip_conf(self) -> Outcome:
        path = self.settings.pip_conf_path
        self.log.info("Setting up pip configuration...")
        self.sync.overwrite_file(path, render_pip_conf(self.settings))
        self.log.success(f"Wrote pip configuration to {path}")
        return StepStatus.OK, str(path)

    def _write_shell_profile(self) -> Outcome:
        path = self.settings.shell_profile_path
        version = self.settings.keep_version
        self.log.info(f"Updating {path.name}...")

        python_path = self.which(f"python{version}", "python3")
        pip_path = self.which(f"pip{version}", "pip3")
        if not python_path:
            self.log.warning("Could not resolve a python3 executable; aliasing the bare command")

        block = render_shell_block(self.settings, python_path, pip_path)
        self.sync.replace_managed_region(
            path, SHELL_MARKER_START, SHELL_MARKER_END, block, start_prefix=SHELL_MARKER_PREFIX
        )
        self.log.success(f"Updated {path} with the Python configuration block")
        return StepStatus.OK, str(path)

    def _write_gitignore(self) -> Outcome:
        path = self.settings.gitignore_path
        self.log.info("Setting up global gitignore...")
        self.sync.overwrite_file(path, render_gitignore(self.settings))
        self.sync.backup_file(self.settings.git_config_path or global_config_path())

        try:
            set_global_excludesfile(path, self.settings.git_config_path)
        except ExternalCommandFailure as e:
            self.log.warning(f"Could not set core.excludesfile: {e}")
            return StepStatus.WARNING, "core.excludesfile not set"

        self.log.success(f"Wrote global gitignore to {path}")
        return StepStatus.OK, str(path)

    # ── Caches and verification ─────────────────────────────────────

    def _clear_caches(self) -> Outcome:
        self.log.info("Preparing to clear Python cache files...")
        if not self.confirm(CACHE_PROMPT):
            self.log.info("Skipping cache cleanup")
            return StepStatus.SKIPPED, "declined"

        root = self.settings.cache_root
        self.log.info(f"Clearing Python cache files under {root}...")
        result = clear_python_caches(root)
        for error in result.errors:
            self.log.warning(f"Could not remove {error}")

        detail = f"{len(result.removed_dirs)} directories, {len(result.removed_files)} files"
        if result.errors:
            return StepStatus.WARNING, f"{detail}, {len(result.errors)} errors"
        self.log.success(f"Cleared Python cache files ({detail})")
        return StepStatus.OK, detail

    def _verify(self) -> Outcome:
        self.log.info("Verifying installation...")
        python = self.which("python3")
        pip = self.which("pip3")

        self.log.echo("")
        self.log.echo("Python Environment Information:", style="bold blue")
        self.log.echo(f"Python version: {self.version(['python3', '--version'])}")
        self.log.echo(f"Python location: {python or '(not found)'}")
        self.log.echo(f"Pip version: {self.version(['pip3', '--version'])}")
        self.log.echo(f"Pip location: {pip or '(not found)'}")
        try:
            excludes = get_global_excludesfile(self.settings.git_config_path) or "(not set)"
        except ExternalCommandFailure:
            excludes = "(unreadable)"
        self.log.echo(f"Git excludesfile: {excludes}")

        if not python:
            return StepStatus.WARNING, "python3 not on PATH"
        return StepStatus.OK, python
