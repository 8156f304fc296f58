"""SRT parsing and the playback-time subtitle index.

WHY: The player receives a playback timestamp several times a second and
must answer "which subtitle is on screen now". Subtitle files are often
hand-edited: blocks overlap, appear out of order, or are malformed. The
lookup must be predictable on such input, so it keeps file order and
returns the first entry whose interval contains the time.

HOW: parse_srt() normalizes line endings, splits on blank lines, and
turns each well-formed block into a SubtitleEntry. Timeline stores the
entries as a tuple and scans them in order for active_at().

RULES:
- Line endings (CR, CRLF, LF) are normalized to LF before splitting
- A block needs at least 3 lines and a matching time range (ASCII digits
  only) on line 2, otherwise it is skipped silently (logged at DEBUG)
- Content is stripped before splitting, so a trailing whitespace-only
  block loses its text line and is skipped
- Text lines are joined with a single space
- ms = ((H*3600 + M*60 + S) * 1000) + mmm, no bounds validation
- Entries keep block order; nothing is re-sorted
- active_at() is inclusive on both ends and first-in-order on overlap
- load() replaces the timeline wholesale
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

from furigana_player.core.ir import SubtitleEntry

logger = logging.getLogger(__name__)

# Time range on the second line of a block: 00:00:01,000 --> 00:00:02,500
_TIME_RANGE_RE = re.compile(r"(\d{2}:\d{2}:\d{2},\d{3}) --> (\d{2}:\d{2}:\d{2},\d{3})", re.ASCII)

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def time_to_ms(stamp: str) -> int:
    """Convert an SRT timestamp ``HH:MM:SS,mmm`` to integer milliseconds.

    Components are read as base-10 integers without range checks, so
    ``00:61:00,000`` is accepted as 61 minutes.
    """
    clock, millis = stamp.split(",")
    hours, minutes, seconds = (int(part, 10) for part in clock.split(":"))
    return (hours * 3600 + minutes * 60 + seconds) * 1000 + int(millis, 10)


def ms_to_time(ms: int) -> str:
    """Format integer milliseconds as an SRT timestamp ``HH:MM:SS,mmm``."""
    seconds, millis = divmod(ms, 1000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, seconds, millis)


def parse_srt(content: str) -> list[SubtitleEntry]:
    """Parse SRT text into subtitle entries in block order.

    Args:
        content: Full SRT file content.

    Returns:
        One SubtitleEntry per well-formed block. Malformed blocks are
        skipped rather than reported.
    """
    if content.startswith("\ufeff"):
        content = content[1:]

    normalized = _LINE_BREAK_RE.sub("\n", content)
    entries: list[SubtitleEntry] = []

    for index, block in enumerate(normalized.strip().split("\n\n")):
        lines = block.split("\n")
        if len(lines) < 3:
            logger.debug("Skipping block %d: only %d line(s)", index, len(lines))
            continue

        match = _TIME_RANGE_RE.search(lines[1])
        if match is None:
            logger.debug("Skipping block %d: no time range in %r", index, lines[1])
            continue

        entries.append(SubtitleEntry(
            start=time_to_ms(match.group(1)),
            end=time_to_ms(match.group(2)),
            text=" ".join(lines[2:]),
        ))

    return entries


def load_srt_file(path: str | Path) -> list[SubtitleEntry]:
    """Read an SRT file as UTF-8 and parse it."""
    return parse_srt(Path(path).read_text(encoding="utf-8"))


class Timeline:
    """Read-only index of subtitle entries for time lookups.

    WHY: Playback glue asks for the active subtitle on every time update.
    Keeping the entries in their original order makes the answer on
    overlapping input match what the subtitle author sees in the file.

    HOW: Entries are held in a tuple. active_at() is a linear scan; a
    subtitle file is small enough that an interval tree would only add
    ordering subtleties.

    RULES:
    - load() replaces any prior entries (no incremental merge)
    - active_at() returns the first entry with start <= t <= end, or None
    - No method other than load() changes state
    """

    def __init__(self, entries: Iterable[SubtitleEntry] = ()) -> None:
        self._entries: tuple[SubtitleEntry, ...] = tuple(entries)

    @classmethod
    def from_srt(cls, content: str) -> Timeline:
        return cls(parse_srt(content))

    def load(self, entries: Iterable[SubtitleEntry]) -> None:
        self._entries = tuple(entries)
        logger.info("Loaded %d subtitle entries", len(self._entries))

    def active_at(self, time_ms: int) -> SubtitleEntry | None:
        for entry in self._entries:
            if entry.start <= time_ms <= entry.end:
                return entry
        return None

    @property
    def entries(self) -> tuple[SubtitleEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[SubtitleEntry]:
        return iter(self._entries)
