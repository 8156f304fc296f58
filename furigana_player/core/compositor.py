"""Compositing the reading layer and the highlight layer into one tree.

WHY: Two independent producers describe the same subtitle line. The
furigana converter yields a tree with ruby elements; the aligner and
resolver yield a list of glossed words with offsets into the raw text.
Shown together, every glossed word must be highlighted exactly once,
readings must stay attached to their kanji, and no text may be lost or
duplicated.

HOW: composite() is a pure function ``(tree, words, source) -> tree``.
It picks one of two modes:
  overlay — the tree has no ruby elements. Text leaves are mapped to
            offset ranges of the source text, and each leaf is split
            into plain and highlighted fragments by word offsets.
  merge   — the tree has ruby elements. Ruby elements whose base text
            matches a word are wrapped whole; plain leaves outside ruby
            are split by content, never wrapping a claimed offset twice.

RULES:
- No words → the input tree is returned unchanged
- The input tree is never mutated; the result is a fresh tree
- Highlight order: position ascending, ties → longer word first
- A highlight fragment holds the leaf's own text, truncated at the leaf
  boundary, so visible_text(result) == source text
- A word with an invalid position is skipped for the current leaf only
- Popup text: non-empty [reading, meaning] joined by POPUP_SEPARATOR,
  or NO_MEANING_AVAILABLE when there is nothing to show
- The popup also carries the non-empty reading and meaning as
  READING_ATTR / MEANING_ATTR attributes
"""

from __future__ import annotations

import logging
from typing import Sequence

from furigana_player.config import NO_MEANING_AVAILABLE, POPUP_SEPARATOR
from furigana_player.core.ir import (
    AnnotatedWord,
    ElementNode,
    MarkupNode,
    TextNode,
    fragment,
)
from furigana_player.core.markup import (
    HIGHLIGHT_CLASS,
    MEANING_ATTR,
    POPUP_CLASS,
    READING_ATTR,
    READING_TAGS,
    RUBY_TAG,
    clone,
    contains_tag,
    ruby_base,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Highlight wrappers
# ---------------------------------------------------------------------------


def popup_text(word: AnnotatedWord | None) -> str:
    """Popup payload for a highlighted word."""
    if word is None:
        return NO_MEANING_AVAILABLE
    parts = [part for part in (word.reading, word.meaning) if part]
    if not parts:
        return NO_MEANING_AVAILABLE
    return POPUP_SEPARATOR.join(parts)


def _popup(word: AnnotatedWord) -> ElementNode:
    attributes = {"class": POPUP_CLASS}
    if word.reading:
        attributes[READING_ATTR] = word.reading
    if word.meaning:
        attributes[MEANING_ATTR] = word.meaning
    return ElementNode(
        tag="span",
        attributes=attributes,
        children=[TextNode(popup_text(word))],
    )


def _wrap_text(text: str, word: AnnotatedWord) -> ElementNode:
    return ElementNode(
        tag="span",
        attributes={"class": HIGHLIGHT_CLASS},
        children=[TextNode(text), _popup(word)],
    )


def _wrap_element(node: MarkupNode, word: AnnotatedWord) -> ElementNode:
    return ElementNode(
        tag="span",
        attributes={"class": HIGHLIGHT_CLASS},
        children=[_popup(word), node],
    )


def _priority(word: AnnotatedWord) -> tuple[int, int]:
    return word.position, -word.length


def _as_tree(nodes: list[MarkupNode]) -> MarkupNode:
    if len(nodes) == 1:
        return nodes[0]
    return fragment(*nodes)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def composite(
    tree: MarkupNode,
    words: Sequence[AnnotatedWord],
    source_text: str,
) -> MarkupNode:
    """Merge highlight wrappers for ``words`` into ``tree``.

    Args:
        tree: Reading tree from the converter, or a plain text tree.
        words: Glossed words with offsets into ``source_text``.
        source_text: The raw subtitle text both layers were built from.

    Returns:
        A new tree with highlight wrappers, or ``tree`` itself when there
        are no words.
    """
    if not words:
        return tree
    if contains_tag(tree, RUBY_TAG):
        return merge(tree, words, source_text)
    return overlay(tree, words, source_text)


# ---------------------------------------------------------------------------
# Overlay mode
# ---------------------------------------------------------------------------


class _SourceCursor:
    """Maps text leaves, visited in document order, onto source offsets."""

    def __init__(self, source_text: str) -> None:
        self.source_text = source_text
        self.position = 0

    def place(self, content: str) -> int | None:
        start = self.source_text.find(content, self.position)
        if start == -1:
            return None
        self.position = start + len(content)
        return start


def overlay(
    tree: MarkupNode,
    words: Sequence[AnnotatedWord],
    source_text: str,
) -> MarkupNode:
    """Split text leaves of ``tree`` around the offset ranges of ``words``."""
    cursor = _SourceCursor(source_text)
    return _as_tree(_overlay_node(tree, words, cursor))


def _overlay_node(
    node: MarkupNode,
    words: Sequence[AnnotatedWord],
    cursor: _SourceCursor,
) -> list[MarkupNode]:
    if isinstance(node, TextNode):
        leaf_start = cursor.place(node.content)
        if leaf_start is None:
            logger.debug("Leaf %r not found in source text; kept verbatim", node.content)
            return [TextNode(node.content)]
        return split_leaf(node.content, leaf_start, words, cursor.source_text)

    if node.tag in READING_TAGS:
        return [clone(node)]

    children: list[MarkupNode] = []
    for child in node.children:
        children.extend(_overlay_node(child, words, cursor))
    return [ElementNode(tag=node.tag, attributes=dict(node.attributes), children=children)]


def split_leaf(
    content: str,
    leaf_start: int,
    words: Sequence[AnnotatedWord],
    source_text: str,
) -> list[MarkupNode]:
    """Split one text leaf whose content starts at ``leaf_start`` in the source.

    Words intersecting the leaf are wrapped using the leaf's own text,
    clipped to the leaf. A word overlapping a range already wrapped in
    this leaf is skipped.
    """
    leaf_end = leaf_start + len(content)
    candidates = sorted(
        (
            w for w in words
            if w.is_resolved_in(source_text) and w.position < leaf_end and w.end > leaf_start
        ),
        key=_priority,
    )

    pieces: list[MarkupNode] = []
    offset = leaf_start
    for word in candidates:
        start = max(word.position, leaf_start)
        end = min(word.end, leaf_end)
        if start < offset:
            continue
        if start > offset:
            pieces.append(TextNode(content[offset - leaf_start:start - leaf_start]))
        pieces.append(_wrap_text(content[start - leaf_start:end - leaf_start], word))
        offset = end

    if offset < leaf_end or not pieces:
        pieces.append(TextNode(content[offset - leaf_start:]))
    return pieces


# ---------------------------------------------------------------------------
# Tree-merge mode
# ---------------------------------------------------------------------------


def merge(
    tree: MarkupNode,
    words: Sequence[AnnotatedWord],
    source_text: str,
) -> MarkupNode:
    """Clone a reading tree, wrapping matching ruby elements and plain leaves."""
    return _as_tree(_merge_node(tree, words, source_text))


def _merge_node(
    node: MarkupNode,
    words: Sequence[AnnotatedWord],
    source_text: str,
) -> list[MarkupNode]:
    if isinstance(node, TextNode):
        return split_leaf_by_content(node.content, words, source_text)

    if node.tag == RUBY_TAG:
        match = match_ruby(ruby_base(node), words)
        if match is None:
            return [clone(node)]
        return [_wrap_element(clone(node), match)]

    if node.tag in READING_TAGS:
        return [clone(node)]

    children: list[MarkupNode] = []
    for child in node.children:
        children.extend(_merge_node(child, words, source_text))
    return [ElementNode(tag=node.tag, attributes=dict(node.attributes), children=children)]


def match_ruby(base: str, words: Sequence[AnnotatedWord]) -> AnnotatedWord | None:
    """Word matching a ruby base text: exact first, else either containing the other."""
    if not base:
        return None
    for word in words:
        if word.word == base:
            return word
    for word in words:
        if word.word and (word.word in base or base in word.word):
            return word
    return None


def split_leaf_by_content(
    content: str,
    words: Sequence[AnnotatedWord],
    source_text: str,
) -> list[MarkupNode]:
    """Split a plain leaf of a reading tree around the words it contains.

    Words are taken in order of their first occurrence in the leaf, longer
    words first on ties. Each is searched from the end of the previous
    highlight; offsets already claimed are never wrapped again.
    """
    if not content.strip():
        return [TextNode(content)]

    relevant = sorted(
        (w for w in words if w.word and w.word in content),
        key=lambda w: (content.find(w.word), -len(w.word)),
    )

    pieces: list[MarkupNode] = []
    consumed: set[int] = set()
    last = 0
    for word in relevant:
        if not word.is_resolved_in(source_text):
            continue
        position = content.find(word.word, last)
        if position == -1:
            continue
        end = position + len(word.word)
        if any(i in consumed for i in range(position, end)):
            continue
        if position > last:
            pieces.append(TextNode(content[last:position]))
        pieces.append(_wrap_text(word.word, word))
        consumed.update(range(position, end))
        last = end

    if last < len(content) or not pieces:
        pieces.append(TextNode(content[last:]))
    return pieces
