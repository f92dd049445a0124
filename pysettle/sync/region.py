"""Managed regions — locating and splicing marker-delimited blocks in text.

A managed region starts at the first occurrence of the start marker and
ends after the first following end marker, including the rest of that line
and its newline. Everything outside the span belongs to the user.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pysettle.errors import MalformedRegion
from pysettle.models.run import ManagedRegion


def find_region(
    text: str,
    marker_start: str,
    marker_end: str,
    path: str | Path = "<text>",
    start_prefix: Optional[str] = None,
) -> Optional[ManagedRegion]:
    """Locate the managed region in ``text`` with a single left-to-right scan.

    When ``start_prefix`` is given, any line beginning a region with that
    prefix counts as a start marker, so blocks written with an older,
    variable start line (e.g. one carrying a date) are still recognised.

    Returns ``None`` when neither marker is present.

    Raises:
        ValueError: If either marker is empty, or ``marker_start`` does not
            begin with ``start_prefix``.
        MalformedRegion: If the markers are unpaired, out of order, or a
            second region follows the first.
    """
    if not marker_start or not marker_end:
        raise ValueError("Region markers must be non-empty strings")
    if start_prefix is not None and not marker_start.startswith(start_prefix):
        raise ValueError(f"Start marker {marker_start!r} must begin with {start_prefix!r}")

    opener = start_prefix or marker_start
    start = text.find(opener)
    first_end = text.find(marker_end)

    if start == -1:
        if first_end != -1:
            raise MalformedRegion(path, f"end marker {marker_end!r} has no start marker")
        return None

    if first_end != -1 and first_end < start:
        raise MalformedRegion(path, f"end marker {marker_end!r} appears before the start marker")

    end_marker_at = text.find(marker_end, start + len(opener))
    if end_marker_at == -1:
        raise MalformedRegion(path, f"start marker {opener!r} has no matching end marker")

    line_break = text.find("\n", end_marker_at + len(marker_end))
    end = len(text) if line_break == -1 else line_break + 1

    if text.find(opener, end) != -1 or text.find(marker_end, end) != -1:
        raise MalformedRegion(path, "more than one managed region found")

    return ManagedRegion(start=start, end=end)


def render_block(
    marker_start: str,
    marker_end: str,
    content: str,
    start_prefix: Optional[str] = None,
) -> str:
    """Return ``content`` wrapped in its markers, newline-terminated.

    Raises:
        ValueError: If ``content`` contains a marker; the block could not
            be located again on the next run.
    """
    for marker in (start_prefix or marker_start, marker_end):
        if marker in content:
            raise ValueError(f"Region content must not contain the marker {marker!r}")
    if content and not content.endswith("\n"):
        content += "\n"
    return f"{marker_start}\n{content}{marker_end}\n"


def splice_region(
    text: str,
    marker_start: str,
    marker_end: str,
    content: str,
    path: str | Path = "<text>",
    start_prefix: Optional[str] = None,
) -> str:
    """Drop any existing region from ``text`` and append a fresh one at the end."""
    block = render_block(marker_start, marker_end, content, start_prefix)
    region = find_region(text, marker_start, marker_end, path, start_prefix)
    head = region.remove_from(text) if region else text
    if head and not head.endswith("\n"):
        head += "\n"
    return head + block
