"""Config synchronizer — back up, then idempotently rewrite small config files.

Every write goes through ``atomic_write`` so a target is only ever observed
fully old or fully new, and every existing file is copied into the run's
backup directory before it is touched.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from pysettle.errors import IOFailure
from pysettle.models.run import BackupRecord, RunContext
from pysettle.sync.region import splice_region


def atomic_write(path: str | Path, text: str) -> None:
    """Write ``text`` to ``path`` via a temp file in the same directory and ``os.replace``.

    Raises:
        IOFailure: If any step fails. The temp file is removed and the
            original target is left untouched.
    """
    # Write through symlinks so a linked dotfile stays a link.
    path = Path(path).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise IOFailure(path, f"could not create temp file: {e}") from e

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(text.encode("utf-8", errors="surrogateescape"))
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except OSError as e:
        raise IOFailure(path, f"write failed: {e}") from e
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def read_text(path: Path) -> str:
    """Read a file as UTF-8 without newline translation; absent files read as ''.

    Undecodable bytes are carried through as surrogates so ``atomic_write``
    puts them back unchanged.
    """
    try:
        return path.read_bytes().decode("utf-8", errors="surrogateescape")
    except FileNotFoundError:
        return ""
    except OSError as e:
        raise IOFailure(path, f"read failed: {e}") from e


class ConfigSynchronizer:
    """Keeps managed config files in their desired state for one run."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx
        self.backups: list[BackupRecord] = []

    def backup_file(self, path: str | Path) -> BackupRecord | None:
        """Copy ``path`` into the run's backup directory, if it exists.

        Backups are named ``<basename>.backup_<timestamp>``. A second backup
        of the same file within one run gets a numeric suffix rather than
        overwriting the first.
        """
        path = Path(path)
        if not path.is_file():
            return None

        target = self.ctx.backup_dir / f"{path.name}.backup_{self.ctx.timestamp}"
        counter = 1
        while target.exists():
            target = self.ctx.backup_dir / f"{path.name}.backup_{self.ctx.timestamp}.{counter}"
            counter += 1

        self.ensure_backup_dir()
        try:
            shutil.copy2(path, target)
        except OSError as e:
            raise IOFailure(path, f"backup to {target} failed: {e}") from e

        record = BackupRecord(source=path, backup_path=target, created_at=self.ctx.timestamp)
        self.backups.append(record)
        self.ctx.log.info(f"Backed up {path} to {target}")
        return record

    def replace_managed_region(
        self,
        path: str | Path,
        marker_start: str,
        marker_end: str,
        new_content: str,
        start_prefix: str | None = None,
    ) -> None:
        """Replace (or append) the marker-delimited block in ``path`` with ``new_content``.

        ``start_prefix`` widens the start-marker match; see ``find_region``.
        Nothing is backed up or written if the block cannot be spliced.
        """
        path = Path(path)
        current = read_text(path)
        updated = splice_region(current, marker_start, marker_end, new_content, path, start_prefix)
        self.ensure_backup_dir()
        self.backup_file(path)
        atomic_write(path, updated)

    def overwrite_file(self, path: str | Path, full_content: str) -> None:
        """Replace the whole of ``path`` with ``full_content``."""
        path = Path(path)
        self.ensure_backup_dir()
        self.backup_file(path)
        atomic_write(path, full_content)

    def ensure_backup_dir(self) -> Path:
        """Create the run's backup directory (and parents) if missing."""
        try:
            self.ctx.backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(self.ctx.backup_dir, f"could not create backup directory: {e}") from e
        return self.ctx.backup_dir
