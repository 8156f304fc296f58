"""One annotation pass: subtitle text in, highlighted reading tree out.

WHY: The player, the CLI, and the HTTP server all turn a subtitle line
into the same annotated tree. The steps (reading layer, word discovery,
gloss resolution, compositing) and their degradation rules belong in one
place.

HOW: Annotator.annotate() runs the steps in order. Steps 1-2 form the
synchronous readings phase (annotate_readings), steps 3-4 the awaited
gloss phase (annotate_glosses), so callers can show the readings first:
  1. reading layer  — converter output parsed to a tree (kanji text only)
  2. words          — ruby words from the tree, then analyzer tokens
                      aligned against the text
  3. resolution     — every word glossed sequentially by the resolver
  4. compositing    — composite(tree, words, text)

RULES:
- Every collaborator is optional; a missing one skips its step
- Converter failure → the plain text is used as the reading layer
- Analyzer failure → no token words
- kanji_only keeps only token words containing at least one kanji
- A surface already taken from the reading tree is not added again
- Compositing failure → plain text tree, AnnotationResult.degraded = True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from furigana_player.adapters.base import Analyzer, FuriganaConverter
from furigana_player.core.aligner import align_tokens, words_from_reading_tree
from furigana_player.core.compositor import composite
from furigana_player.core.ir import AnnotatedWord, MarkupNode, TextNode, fragment
from furigana_player.core.japanese import has_kanji
from furigana_player.core.markup import parse_markup

logger = logging.getLogger(__name__)


@dataclass
class AnnotationResult:
    """Outcome of one annotation pass."""

    tree: MarkupNode
    words: list[AnnotatedWord] = field(default_factory=list)
    degraded: bool = False


def plain_tree(text: str) -> MarkupNode:
    """A tree holding ``text`` as a single leaf."""
    return fragment(TextNode(text))


class Annotator:
    """Builds the annotated tree for a subtitle line.

    Args:
        analyzer: An Analyzer, ``parse(text) -> Sequence[Token]``.
        converter: A FuriganaConverter, ``convert(text, mode, to) -> str``.
        resolver: Object with ``async annotate_words(words)`` (a GlossResolver).
        kanji_only: Drop token words without kanji.
    """

    def __init__(
        self,
        analyzer: Optional[Analyzer] = None,
        converter: Optional[FuriganaConverter] = None,
        resolver: Optional[Any] = None,
        kanji_only: bool = True,
    ) -> None:
        self.analyzer = analyzer
        self.converter = converter
        self.resolver = resolver
        self.kanji_only = kanji_only

    def warm_up(self) -> None:
        """Load the analyzer and converter resources now instead of on first use."""
        for collaborator in (self.analyzer, self.converter):
            load = getattr(collaborator, "load", None)
            if load is not None:
                load()

    def reading_tree(self, text: str) -> MarkupNode:
        if self.converter is None or not has_kanji(text):
            return plain_tree(text)
        try:
            markup = self.converter.convert(text, mode="furigana", to="hiragana")
            return parse_markup(markup)
        except Exception as exc:
            logger.warning("Furigana conversion failed for %r: %s", text, exc)
            return plain_tree(text)

    def token_words(self, text: str) -> list[AnnotatedWord]:
        if self.analyzer is None:
            return []
        try:
            tokens = self.analyzer.parse(text)
        except Exception as exc:
            logger.warning("Morphological analysis failed for %r: %s", text, exc)
            return []
        words, _ = align_tokens(text, tokens)
        if self.kanji_only:
            words = [w for w in words if has_kanji(w.word)]
        return words

    def collect_words(self, tree: MarkupNode, text: str) -> list[AnnotatedWord]:
        words = words_from_reading_tree(tree, text)
        seen = {w.word for w in words}
        for word in self.token_words(text):
            if word.word in seen:
                continue
            seen.add(word.word)
            words.append(word)
        # sorted() is stable, so unresolved ruby words keep their tree order
        return sorted(words, key=lambda w: w.position)

    async def annotate(self, text: str) -> AnnotationResult:
        return await self.annotate_glosses(text, self.annotate_readings(text))

    def annotate_readings(self, text: str) -> AnnotationResult:
        """The reading layer with its words collected but not yet glossed.

        Runs synchronously and never awaits, so its tree can be shown
        while the glosses are still being looked up.
        """
        tree = self.reading_tree(text)
        return AnnotationResult(tree=tree, words=self.collect_words(tree, text))

    async def annotate_glosses(self, text: str, readings: AnnotationResult) -> AnnotationResult:
        """Resolve the words of ``readings`` and composite them onto its tree."""
        words = readings.words
        if self.resolver is not None and words:
            words = await self.resolver.annotate_words(words)

        try:
            result = composite(readings.tree, words, text)
        except Exception:
            logger.exception("Compositing failed for %r; showing plain text", text)
            return AnnotationResult(tree=plain_tree(text), words=words, degraded=True)

        return AnnotationResult(tree=result, words=words)
