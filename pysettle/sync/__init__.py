"""Config synchronization — the reusable core of pysettle.

This package provides the primitives for:
- Managed regions: locating a marker-delimited block owned by pysettle
- Backups: timestamped copies of every file before it is rewritten
- Atomic writes: temp-file-and-rename replacement of config files
"""
