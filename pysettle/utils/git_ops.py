"""Git operations — read and write the user's global git config."""

from __future__ import annotations

import configparser
from pathlib import Path

from git import GitConfigParser

from pysettle.errors import ExternalCommandFailure


def global_config_path() -> Path:
    """Return the path of the user-level git config (``~/.gitconfig``)."""
    return Path("~/.gitconfig").expanduser()


def set_global_excludesfile(excludes_path: str | Path, config_path: str | Path | None = None) -> None:
    """Point ``core.excludesfile`` at ``excludes_path``.

    Equivalent to ``git config --global core.excludesfile <path>``, written
    through GitPython so no ``git`` binary is required.

    Raises:
        ExternalCommandFailure: If the config file cannot be read or written.
    """
    config_path = Path(config_path) if config_path else global_config_path()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with GitConfigParser(str(config_path), read_only=False) as writer:
            writer.set_value("core", "excludesfile", str(excludes_path))
    except (OSError, configparser.Error) as e:
        raise ExternalCommandFailure(
            ["git", "config", "--global", "core.excludesfile", str(excludes_path)],
            stderr=str(e),
        ) from e


def get_global_excludesfile(config_path: str | Path | None = None) -> str:
    """Return the configured ``core.excludesfile``, or '' if unset.

    Raises:
        ExternalCommandFailure: If the config file cannot be parsed.
    """
    config_path = Path(config_path) if config_path else global_config_path()
    if not config_path.exists():
        return ""
    reader = GitConfigParser(str(config_path), read_only=True)
    try:
        return str(reader.get_value("core", "excludesfile", default=""))
    except (OSError, configparser.Error) as e:
        raise ExternalCommandFailure(
            ["git", "config", "--global", "core.excludesfile"], stderr=str(e)
        ) from e
    finally:
        reader.release()
