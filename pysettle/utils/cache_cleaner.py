"""Cache cleaner — remove Python bytecode caches under a directory tree."""

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path

CACHE_DIR_NAME = "__pycache__"
BYTECODE_SUFFIX = ".pyc"

# Never descend into these
SKIP_DIRS = {".git", ".hg", ".svn"}


@dataclass
class CacheCleanResult:
    """What a cache sweep removed, and what it could not."""

    removed_dirs: list[Path] = field(default_factory=list)
    removed_files: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total_removed(self) -> int:
        return len(self.removed_dirs) + len(self.removed_files)


def clear_python_caches(root: Path) -> CacheCleanResult:
    """Remove every ``__pycache__`` directory and stray ``*.pyc`` file under ``root``.

    Removal errors are collected on the result rather than raised; a
    half-cleaned cache is harmless.
    """
    result = CacheCleanResult()
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        kept = []
        for name in dirnames:
            if name in SKIP_DIRS:
                continue
            if name == CACHE_DIR_NAME:
                _remove_dir(current / name, result)
                continue
            kept.append(name)
        dirnames[:] = kept

        for name in filenames:
            if name.endswith(BYTECODE_SUFFIX):
                path = current / name
                try:
                    path.unlink()
                    result.removed_files.append(path)
                except OSError as e:
                    result.errors.append(f"{path}: {e}")
    return result


def _remove_dir(path: Path, result: CacheCleanResult) -> None:
    try:
        shutil.rmtree(path)
        result.removed_dirs.append(path)
    except OSError as e:
        result.errors.append(f"{path}: {e}")
