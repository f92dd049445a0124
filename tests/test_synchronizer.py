"""Tests for the config synchronizer (backups, managed regions, atomic writes)."""

import io
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path

import pytest
from rich.console import Console

from pysettle.errors import IOFailure, MalformedRegion
from pysettle.models.run import RunContext
from pysettle.sync.synchronizer import ConfigSynchronizer, atomic_write

START = "# >>> marker >>>"
END = "# <<< marker <<<"


def _sync(tmpdir: str, now: datetime | None = None) -> ConfigSynchronizer:
    ctx = RunContext.create(
        Path(tmpdir) / "backups",
        console=Console(file=io.StringIO()),
        now=now or datetime(2024, 5, 1, 12, 30, 0),
    )
    return ConfigSynchronizer(ctx)


# --- backup_file ---


def test_backup_absent_file_is_noop():
    with tempfile.TemporaryDirectory() as tmpdir:
        sync = _sync(tmpdir)
        assert sync.backup_file(Path(tmpdir) / "missing.conf") is None
        assert sync.backups == []
        assert not sync.ctx.backup_dir.exists()


def test_backup_copies_bytes_with_timestamped_name():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        target.write_bytes(b"export FOO=1\r\n")
        sync = _sync(tmpdir)

        record = sync.backup_file(target)

        assert record.backup_path == sync.ctx.backup_dir / ".zshrc.backup_20240501123000"
        assert record.backup_path.read_bytes() == b"export FOO=1\r\n"
        assert record.source == target
        assert sync.ctx.backup_dir.name == "python_cleanup_backups_20240501123000"


def test_backup_twice_in_one_run_keeps_both_copies():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / "pip.conf"
        target.write_text("first\n")
        sync = _sync(tmpdir)

        first = sync.backup_file(target)
        target.write_text("second\n")
        second = sync.backup_file(target)

        assert first.backup_path != second.backup_path
        assert first.backup_path.read_text() == "first\n"
        assert second.backup_path.read_text() == "second\n"


def test_backup_failure_raises_and_skips_write(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / "pip.conf"
        target.write_text("original\n")
        sync = _sync(tmpdir)

        def broken_copy(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(shutil, "copy2", broken_copy)

        with pytest.raises(IOFailure):
            sync.overwrite_file(target, "new\n")
        assert target.read_text() == "original\n"


# --- replace_managed_region ---


def test_replace_region_scenario():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        target.write_text("export FOO=1\n# >>> marker >>>\nold\n# <<< marker <<<\n")
        sync = _sync(tmpdir)

        sync.replace_managed_region(target, START, END, "new")

        assert target.read_text() == "export FOO=1\n# >>> marker >>>\nnew\n# <<< marker <<<\n"


def test_replace_region_backs_up_pre_write_bytes():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        original = "alias ll='ls -l'\n"
        target.write_text(original)
        sync = _sync(tmpdir)

        sync.replace_managed_region(target, START, END, "export PATH=/x:$PATH")

        assert len(sync.backups) == 1
        assert sync.backups[0].backup_path.read_text() == original


def test_replace_region_is_idempotent():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        target.write_text("export FOO=1\n")
        sync = _sync(tmpdir)

        sync.replace_managed_region(target, START, END, "alias python=python3\n")
        once = target.read_bytes()
        sync.replace_managed_region(target, START, END, "alias python=python3\n")

        assert target.read_bytes() == once
        assert once.count(START.encode()) == 1


def test_replace_region_on_absent_file_creates_it_without_backup():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / "home" / ".zshrc"
        sync = _sync(tmpdir)

        sync.replace_managed_region(target, START, END, "new")

        assert target.read_text() == f"{START}\nnew\n{END}\n"
        assert sync.backups == []
        assert sync.ctx.backup_dir.is_dir()
        assert list(sync.ctx.backup_dir.iterdir()) == []


def test_replace_region_preserves_user_content_across_changes():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        user = "# my settings\r\nexport EDITOR=vim\r\n"
        target.write_bytes(user.encode())
        sync = _sync(tmpdir)

        for content in ["one", "two\nthree", "four"]:
            sync.replace_managed_region(target, START, END, content)
            assert target.read_bytes().startswith(user.encode())

        assert target.read_bytes().decode() == f"{user}{START}\nfour\n{END}\n"


def test_replace_region_malformed_leaves_file_untouched():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        original = f"a\n{START}\nno end marker\n"
        target.write_text(original)
        sync = _sync(tmpdir)

        with pytest.raises(MalformedRegion):
            sync.replace_managed_region(target, START, END, "new")

        assert target.read_text() == original
        assert sync.backups == []


def test_replace_region_rejects_content_with_marker_before_touching_anything():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        target.write_text("export A=1\n")
        sync = _sync(tmpdir)

        with pytest.raises(ValueError):
            sync.replace_managed_region(target, START, END, f"echo done\n{END}\n")

        assert target.read_text() == "export A=1\n"
        assert sync.backups == []
        assert not sync.ctx.backup_dir.exists()


def test_replace_region_keeps_undecodable_bytes():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        user = b"# caf\xe9\nexport A=1\n"
        target.write_bytes(user)
        sync = _sync(tmpdir)

        sync.replace_managed_region(target, START, END, "new")

        assert target.read_bytes() == user + f"{START}\nnew\n{END}\n".encode()
        assert sync.backups[0].backup_path.read_bytes() == user


def test_replace_region_writes_through_symlink():
    with tempfile.TemporaryDirectory() as tmpdir:
        real = Path(tmpdir) / "dotfiles" / "zshrc"
        real.parent.mkdir()
        real.write_text("export A=1\n")
        link = Path(tmpdir) / ".zshrc"
        link.symlink_to(real)
        sync = _sync(tmpdir)

        sync.replace_managed_region(link, START, END, "new")

        assert link.is_symlink()
        assert real.read_text() == f"export A=1\n{START}\nnew\n{END}\n"
        assert sync.backups[0].backup_path.read_text() == "export A=1\n"


# --- overwrite_file ---


def test_overwrite_absent_file_scenario():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".config" / "pip" / "pip.conf"
        sync = _sync(tmpdir)

        sync.overwrite_file(target, "[global]\nuser=true\n")

        assert target.read_text() == "[global]\nuser=true\n"
        assert list(sync.ctx.backup_dir.iterdir()) == []


def test_overwrite_existing_file_keeps_backup():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".gitignore_global"
        target.write_text("*.log\n")
        sync = _sync(tmpdir)

        sync.overwrite_file(target, "__pycache__/\n")

        assert target.read_text() == "__pycache__/\n"
        assert [p.name for p in sync.ctx.backup_dir.iterdir()] == [
            ".gitignore_global.backup_20240501123000"
        ]


# --- atomic_write ---


def test_interrupted_write_leaves_original_intact(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / "pip.conf"
        target.write_text("original\n")

        def interrupted(*args, **kwargs):
            raise OSError("interrupted")

        monkeypatch.setattr(os, "replace", interrupted)

        with pytest.raises(IOFailure):
            atomic_write(target, "replacement\n")

        assert target.read_text() == "original\n"
        assert [p.name for p in Path(tmpdir).iterdir()] == ["pip.conf"]


def test_interrupted_region_write_leaves_original_intact(monkeypatch):
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / ".zshrc"
        original = f"export A=1\n{START}\nold\n{END}\n"
        target.write_text(original)
        sync = _sync(tmpdir)

        def interrupted(fd):
            raise OSError("power lost")

        monkeypatch.setattr(os, "fsync", interrupted)

        with pytest.raises(IOFailure):
            sync.replace_managed_region(target, START, END, "new")

        assert target.read_text() == original
        assert sync.backups[0].backup_path.read_text() == original


def test_atomic_write_preserves_mode():
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / "pip.conf"
        target.write_text("old\n")
        target.chmod(0o600)

        atomic_write(target, "new\n")

        assert target.read_text() == "new\n"
        assert target.stat().st_mode & 0o777 == 0o600
