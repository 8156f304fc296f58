"""Placing analyzer tokens and ruby words back onto the subtitle text.

WHY: The analyzer returns tokens in its own order, and the furigana
converter returns a tree; neither says where a word sits in the original
string. The compositor needs offsets, so every word must be located in
the raw text before it can be highlighted.

HOW: A single forward cursor walks the text. Each word is searched for
from the cursor; a miss falls back to a search from the start of the
string, and a second miss drops the word. The cursor is passed in and
returned explicitly so a pass can be resumed or tested in isolation.

RULES:
- Empty or whitespace-only surfaces are skipped
- Found at p → cursor = p + len(word), also when found by the fallback
- Not found even from 0 → word dropped (logged at DEBUG)
- Repeated surface forms may re-anchor to an earlier occurrence via the
  fallback; that drift is accepted, not treated as an error
- words_from_reading_tree() keeps one entry per distinct surface form and
  keeps unlocated ruby words with position UNRESOLVED
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from furigana_player.core.ir import UNRESOLVED, AnnotatedWord, MarkupNode, Token
from furigana_player.core.markup import RUBY_TAG, iter_elements, ruby_base, ruby_reading

logger = logging.getLogger(__name__)


def locate(text: str, word: str, cursor: int) -> tuple[int, int]:
    """Find ``word`` in ``text`` from ``cursor``, falling back to the start.

    Returns:
        ``(position, new_cursor)``. position is UNRESOLVED when the word
        does not occur at all, in which case the cursor is unchanged.
    """
    position = text.find(word, cursor)
    if position == -1:
        position = text.find(word)
        if position == -1:
            return UNRESOLVED, cursor
        logger.debug("Re-anchored %r to earlier offset %d (cursor %d)", word, position, cursor)
    return position, position + len(word)


def align_tokens(
    text: str,
    tokens: Sequence[Token],
    cursor: int = 0,
) -> tuple[list[AnnotatedWord], int]:
    """Resolve analyzer tokens to offsets in ``text``.

    Args:
        text: The original subtitle text.
        tokens: Analyzer tokens in analyzer order.
        cursor: Offset to start searching from.

    Returns:
        The located words (readings copied from the tokens) and the
        cursor after the last located word.
    """
    words: list[AnnotatedWord] = []
    for token in tokens:
        surface = token.surface_form
        if not surface or not surface.strip():
            continue
        position, cursor = locate(text, surface, cursor)
        if position == UNRESOLVED:
            logger.debug("Dropping token %r: not found in %r", surface, text)
            continue
        words.append(AnnotatedWord(
            word=surface,
            position=position,
            length=len(surface),
            reading=token.reading,
        ))
    return words, cursor


def align_words(
    text: str,
    surfaces: Iterable[str],
    cursor: int = 0,
) -> tuple[list[AnnotatedWord], int]:
    """Same as align_tokens() for bare surface strings."""
    return align_tokens(text, [Token(surface_form=s) for s in surfaces], cursor)


def words_from_reading_tree(tree: MarkupNode, text: str) -> list[AnnotatedWord]:
    """Collect the words already identified by ruby elements of ``tree``.

    Each distinct ruby base text becomes one AnnotatedWord whose reading
    is the ruby's rt text. A base that recurs is not added again, even if
    it sits at another offset.
    """
    words: list[AnnotatedWord] = []
    seen: set[str] = set()
    cursor = 0

    for ruby in iter_elements(tree, RUBY_TAG):
        word = ruby_base(ruby)
        if not word or word in seen:
            continue
        seen.add(word)

        position, cursor = locate(text, word, cursor)
        if position == UNRESOLVED:
            logger.debug("Ruby word %r not found in original text", word)

        words.append(AnnotatedWord(
            word=word,
            position=position,
            length=len(word),
            reading=ruby_reading(ruby),
        ))

    return words
