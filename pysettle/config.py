"""Settings — which Python to keep, what to remove, and where config files live.

Defaults reproduce the stock macOS/Homebrew layout. An optional YAML file
overrides any subset of them::

    keep_version: "3.12"
    remove_versions: ["3.10", "3.11", "3.13"]
    shell_profile_path: ~/.zshrc
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

CONFIG_ENV_VAR = "PYSETTLE_CONFIG"


@dataclass
class Settings:
    """Run settings for a toolchain cleanup."""

    keep_version: str = "3.12"
    remove_versions: list[str] = field(default_factory=lambda: ["3.10", "3.11", "3.13"])
    remove_formulae: list[str] = field(default_factory=lambda: ["pipx"])
    homebrew_prefix: Path = Path("/opt/homebrew")

    pip_conf_path: Path = field(default_factory=lambda: Path("~/.config/pip/pip.conf").expanduser())
    shell_profile_path: Path = field(default_factory=lambda: Path("~/.zshrc").expanduser())
    gitignore_path: Path = field(default_factory=lambda: Path("~/.gitignore_global").expanduser())
    git_config_path: Path | None = None  # None -> ~/.gitconfig

    backup_parent: Path = field(default_factory=lambda: Path("~/.config").expanduser())
    log_dir: Path = Path(".")
    cache_root: Path = Path(".")

    @property
    def keep_formula(self) -> str:
        return f"python@{self.keep_version}"

    @property
    def remove_python_formulae(self) -> list[str]:
        return [f"python@{v}" for v in self.remove_versions if v != self.keep_version]


_PATH_FIELDS = {f.name for f in fields(Settings) if f.name.endswith(("_path", "_dir", "_root", "_parent", "_prefix"))}
_LIST_FIELDS = {"remove_versions", "remove_formulae"}


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file, falling back to defaults.

    When ``path`` is omitted the ``PYSETTLE_CONFIG`` environment variable is
    consulted; with neither set, pure defaults are returned.

    Raises:
        ValueError: If the file has unknown keys or badly typed values.
    """
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is None:
        return Settings()

    with open(Path(path).expanduser()) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"{path}: unknown settings: {', '.join(unknown)}")

    overrides: dict = {}
    for key, value in data.items():
        if key in _PATH_FIELDS:
            overrides[key] = Path(str(value)).expanduser() if value is not None else None
        elif key in _LIST_FIELDS:
            if not isinstance(value, list):
                raise ValueError(f"{path}: {key} must be a list")
            overrides[key] = [_version_string(path, key, v) for v in value]
        else:
            overrides[key] = _version_string(path, key, value)

    return Settings(**overrides)


def _version_string(path: str | Path, key: str, value: object) -> str:
    # YAML reads an unquoted 3.10 as the float 3.1
    if isinstance(value, float):
        raise ValueError(f"{path}: {key} value {value!r} must be quoted, e.g. \"3.10\"")
    return str(value)
