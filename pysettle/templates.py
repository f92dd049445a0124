"""Desired contents of the three files pysettle manages.

All renderers are pure functions of the settings and resolved tool paths,
so re-running the tool with unchanged inputs rewrites byte-identical files.
"""

from __future__ import annotations

from pysettle.config import Settings

SHELL_MARKER_START = "# >>> Python configuration >>>"
# Older profiles carry a dated start line, e.g. "# >>> Python configuration Mon Jan 1 ... >>>".
SHELL_MARKER_PREFIX = "# >>> Python configuration"
SHELL_MARKER_END = "# <<< End Python configuration <<<"

PIP_CONF = """\
[global]
user = true
require-virtualenv = true
"""

GITIGNORE_ENTRIES = [
    "__pycache__/",
    "*.py[cod]",
    "*$py.class",
    ".Python",
    "build/",
    "develop-eggs/",
    "dist/",
    "downloads/",
    "eggs/",
    ".eggs/",
    "lib/",
    "lib64/",
    "parts/",
    "sdist/",
    "var/",
    "wheels/",
    "*.egg-info/",
    ".installed.cfg",
    "*.egg",
    ".pytest_cache/",
    ".coverage",
    "coverage.xml",
    "*.cover",
    ".env",
    "venv/",
    "ENV/",
    ".DS_Store",
]

_SHELL_BLOCK = """\
# Homebrew and Python paths
export PATH="{prefix}/bin:$PATH"
export PATH="{prefix}/opt/{formula}/bin:$PATH"

# Python aliases
alias python3="{python}"
alias python="{python}"
alias pip3="{pip}"
alias pip="{pip}"

# Python virtual environment shortcuts
alias venv='python3 -m venv venv'
alias activate='source venv/bin/activate'
alias create-venv='python3 -m venv venv && source venv/bin/activate'

# Safety aliases
alias pip-install='pip install --user'

# Function to create and activate a new Python project
pynew() {{
    mkdir -p "$1" && cd "$1"
    python3 -m venv venv
    source venv/bin/activate
    PIP_REQUIRE_VIRTUALENV=false pip install --upgrade pip
    echo "Python project $1 created and virtual environment activated"
}}
"""


def render_pip_conf(settings: Settings) -> str:
    return PIP_CONF


def render_gitignore(settings: Settings) -> str:
    return "# Python\n" + "\n".join(GITIGNORE_ENTRIES) + "\n"


def render_shell_block(settings: Settings, python_path: str, pip_path: str) -> str:
    """Body of the managed region in the shell profile (markers excluded).

    Falls back to the bare command names when a path could not be resolved.
    """
    return _SHELL_BLOCK.format(
        prefix=str(settings.homebrew_prefix).rstrip("/"),
        formula=settings.keep_formula,
        python=python_path or "python3",
        pip=pip_path or "pip3",
    )
