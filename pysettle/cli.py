"""pysettle CLI — the single entry point for a toolchain cleanup run."""

import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape

from pysettle import __version__
from pysettle.config import Settings, load_settings
from pysettle.errors import MissingDependency
from pysettle.models.run import RunContext, RunReport
from pysettle.utils.run_log import RunLog

console = Console()


@click.command()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="YAML settings file (default: $PYSETTLE_CONFIG, else built-in defaults)",
)
def main(config_path: str | None):
    """Settle the Homebrew Python toolchain on this Mac.

    Removes unwanted Python versions and pipx, pins one Python version,
    rewrites pip.conf, the shell profile block and the global gitignore,
    optionally clears bytecode caches and prints what python3 resolves to.
    Every touched file is backed up first.
    """
    from pysettle.runner import CleanupRunner

    try:
        settings = load_settings(config_path)
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/] {e}")
        sys.exit(1)

    ctx = RunContext.create(settings.backup_parent, settings.log_dir, console=console)
    with ctx.log as log:
        log.info("Starting Python environment cleanup...")
        _print_plan(settings, ctx)

        if not click.confirm("Are you sure you want to proceed?", default=False):
            log.info("Cancelled by user")
            return

        runner = CleanupRunner(
            settings,
            ctx,
            confirm=lambda prompt: click.confirm(prompt, default=False),
        )
        try:
            report = runner.run()
        except MissingDependency as e:
            log.error(str(e))
            console.print("No files were changed.")
            console.print(f"Log file: {ctx.log_path if ctx.log_path else '(none)'}")
            sys.exit(1)

        _print_summary(report, log)

    if report.failed:
        sys.exit(1)


def _print_plan(settings: Settings, ctx: RunContext) -> None:
    removed = ", ".join(settings.remove_python_formulae + settings.remove_formulae) or "(nothing)"
    console.print("\n[bold yellow]This will:[/]")
    console.print(f"  1. Remove {removed}")
    console.print(f"  2. Install and relink {settings.keep_formula}")
    console.print(f"  3. Rewrite {settings.pip_conf_path}")
    console.print(f"  4. Update the Python block in {settings.shell_profile_path}")
    console.print(f"  5. Rewrite {settings.gitignore_path}")
    console.print("  6. Optionally clear Python cache files")
    console.print(f"\n[bold yellow]Backups will be created in:[/] {ctx.backup_dir}\n")


def _print_summary(report: RunReport, log: RunLog) -> None:
    summary = report.summary()
    console.print()
    console.print(Panel(escape(summary), title="Cleanup Result"))
    log.record(summary)

    if report.failed:
        console.print("\n[red]Python environment cleanup stopped early.[/]")
    else:
        console.print("\n[green]Python environment cleanup complete![/]")
    console.print(f"Backup of configurations can be found in: {report.backup_dir}")
    console.print(f"Log file: {report.log_path if report.log_path else '(none)'}")
    console.print("[yellow]Please open a new terminal window for all changes to take effect.[/]")


if __name__ == "__main__":
    main()
