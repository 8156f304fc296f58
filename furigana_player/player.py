"""Playback glue: time updates in, subtitle display state out.

WHY: A video element reports its current time many times per second,
while annotating a line awaits dictionary lookups. The display must
follow the active subtitle without re-annotating an unchanged line and
without letting a slow, superseded annotation overwrite a newer one.

HOW: SubtitlePlayer holds a Timeline, the current entry, and a pass
counter. Each time the active entry changes, a new pass id is issued
and the line is annotated in two phases. The reading layer is shown as
soon as it is built, under the new pass id; the glossed tree replaces it
only if its pass id is still the latest one once the lookups complete.

RULES:
- Time conversion: seconds → integer milliseconds by truncation
- Same entry as the current one (identity) → no work, returns None
- Entry change → new pass id, even when the display is only hidden
- No active entry, or whitespace-only text → hidden display
- The readings-only display (glossed=False) is published before any
  dictionary lookup is awaited
- A result whose pass id is no longer current is discarded (logged)
- Annotation failure → the raw subtitle text is shown
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from furigana_player.adapters import FugashiAnalyzer, KakasiFuriganaConverter
from furigana_player.api import DictionaryClient, GlossResolver
from furigana_player.core.annotator import AnnotationResult, Annotator, plain_tree
from furigana_player.core.ir import MarkupNode, SubtitleEntry
from furigana_player.core.timeline import Timeline, parse_srt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Display:
    """What the subtitle overlay currently shows.

    Attributes:
        visible: Whether the overlay is shown at all.
        entry: The subtitle entry behind the display, if any.
        tree: The annotated tree; None while hidden.
        pass_id: Id of the pass that produced this display.
        glossed: False while the tree holds only the reading layer.
    """

    visible: bool
    entry: Optional[SubtitleEntry] = None
    tree: Optional[MarkupNode] = None
    pass_id: int = 0
    glossed: bool = False


HIDDEN = Display(visible=False)


def seconds_to_ms(seconds: float) -> int:
    return int(seconds * 1000)


class SubtitlePlayer:
    """Keeps the subtitle display in sync with playback time."""

    def __init__(self, annotator: Optional[Annotator] = None) -> None:
        self.annotator = annotator if annotator is not None else Annotator()
        self.timeline = Timeline()
        self._current: Optional[SubtitleEntry] = None
        self._pass_id = 0
        self._display = HIDDEN

    @property
    def display(self) -> Display:
        return self._display

    @property
    def pass_id(self) -> int:
        return self._pass_id

    def load_subtitles(self, content: str) -> int:
        """Replace the timeline with the entries parsed from SRT ``content``.

        Any pass still in flight becomes stale.

        Returns:
            The number of entries loaded.
        """
        self.timeline.load(parse_srt(content))
        self._current = None
        self._pass_id += 1
        self._display = Display(visible=False, pass_id=self._pass_id)
        return len(self.timeline)

    async def on_time_update(self, seconds: float) -> Optional[Display]:
        """Bring the display up to date for playback position ``seconds``.

        Returns:
            The new Display, or None when nothing changed or the pass was
            superseded while it was being annotated.
        """
        entry = self.timeline.active_at(seconds_to_ms(seconds))
        if entry is self._current:
            return None

        self._current = entry
        self._pass_id += 1
        pass_id = self._pass_id

        if entry is None or not entry.text.strip():
            self._display = Display(visible=False, entry=entry, pass_id=pass_id)
            return self._display

        try:
            readings = self.annotator.annotate_readings(entry.text)
        except Exception:
            logger.exception("Reading layer failed for %r; showing raw text", entry.text)
            readings = AnnotationResult(tree=plain_tree(entry.text))

        self._display = Display(visible=True, entry=entry, tree=readings.tree, pass_id=pass_id)

        try:
            tree = (await self.annotator.annotate_glosses(entry.text, readings)).tree
        except Exception:
            logger.exception("Annotation failed for %r; showing raw text", entry.text)
            tree = plain_tree(entry.text)

        if pass_id != self._pass_id:
            logger.debug("Discarding stale pass %d (current %d)", pass_id, self._pass_id)
            return None

        self._display = Display(visible=True, entry=entry, tree=tree, pass_id=pass_id, glossed=True)
        return self._display


def build_player(
    client: DictionaryClient,
    readings: bool = True,
    analyzer: bool = True,
) -> SubtitlePlayer:
    """A player wired to the default adapters and a dictionary client.

    Args:
        client: An open DictionaryClient (inside its async context).
        readings: Add furigana with the pykakasi converter.
        analyzer: Discover words with the fugashi analyzer.
    """
    annotator = Annotator(
        analyzer=FugashiAnalyzer() if analyzer else None,
        converter=KakasiFuriganaConverter() if readings else None,
        resolver=GlossResolver(client),
    )
    return SubtitlePlayer(annotator)
