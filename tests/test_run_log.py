"""Tests for the tagged run log."""

import io
import tempfile
from pathlib import Path

from rich.console import Console

from pysettle.utils.run_log import RunLog


def test_messages_go_to_console_and_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        out = io.StringIO()
        log_path = Path(tmpdir) / "logs" / "run.log"
        with RunLog(log_path, console=Console(file=out, width=200)) as log:
            log.info("Backed up [global] section")
            log.warning("Failed to uninstall pipx")
            log.record("summary line 1\nsummary line 2")

        assert "[INFO] Backed up [global] section" in out.getvalue()
        assert "summary line" not in out.getvalue()
        assert log_path.read_text().splitlines() == [
            "[INFO] Backed up [global] section",
            "[WARNING] Failed to uninstall pipx",
            "summary line 1",
            "summary line 2",
        ]
        assert [e.tag for e in log.entries] == ["INFO", "WARNING"]


def test_log_without_file():
    out = io.StringIO()
    log = RunLog(console=Console(file=out, width=200))
    log.error("Homebrew is not installed.")
    log.close()
    assert "[ERROR] Homebrew is not installed." in out.getvalue()
