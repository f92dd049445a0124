"""pysettle — settle a Homebrew-managed Python toolchain on macOS."""

__version__ = "0.1.0"
