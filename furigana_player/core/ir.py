"""Intermediate representation dataclasses for subtitles, words, and markup.

WHY: Three coordinate systems meet in this package — raw subtitle text
offsets, analyzer token order, and a rendered markup tree. Each stage
needs a small, well-typed vocabulary so offsets, readings, and tree
nodes are never confused with one another.

HOW: Plain dataclasses:
  SubtitleEntry — one timed subtitle line (immutable)
  Token         — one analyzer token (surface, reading, part of speech)
  AnnotatedWord — a word resolved against the subtitle text, plus its gloss
  TextNode / ElementNode — the two MarkupNode variants of a rendered tree

RULES:
- Times are integer milliseconds
- AnnotatedWord.position is an offset into the original subtitle text;
  UNRESOLVED (-1) means the word was not located
- position + length never exceeds the text it was resolved against
- A tree root is an ElementNode tagged FRAGMENT_TAG; renderers emit only
  its children
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

UNRESOLVED = -1

FRAGMENT_TAG = "#fragment"


@dataclass(frozen=True)
class SubtitleEntry:
    """A single timed subtitle line.

    RULES:
    - start / end: integer milliseconds, inclusive on both ends for lookup
    - text: the block's text lines joined with a single space
    """

    start: int
    end: int
    text: str


@dataclass(frozen=True)
class Token:
    """One token from the external morphological analyzer."""

    surface_form: str
    reading: str = ""
    part_of_speech: str = ""


@dataclass
class AnnotatedWord:
    """A word placed on the subtitle text, with its reading and gloss.

    WHY: The compositor needs each word's offset range to decide where a
    highlight goes, and the popup needs its reading and meaning.

    HOW: Created by the aligner (position, length, reading), then filled
    in by the resolver (meaning, and reading when the analyzer had none).

    RULES:
    - word: the surface form as it appears in the text
    - position: offset into the original text, or UNRESOLVED
    - length: len(word)
    - reading: hiragana reading or "" when unknown
    - meaning: None until resolved; afterwards a gloss or a sentinel string
    """

    word: str
    position: int
    length: int
    reading: str = ""
    meaning: str | None = None

    @property
    def end(self) -> int:
        return self.position + self.length

    def is_resolved_in(self, text: str) -> bool:
        """True if the word's range is a valid range of ``text``."""
        return 0 <= self.position and self.end <= len(text) and self.length > 0


@dataclass
class TextNode:
    """A text leaf of a markup tree."""

    content: str


@dataclass
class ElementNode:
    """An element of a markup tree.

    RULES:
    - tag: lowercase element name, or FRAGMENT_TAG for a tree root
    - attributes: attribute name → string value
    - children: ordered child nodes
    """

    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[MarkupNode] = field(default_factory=list)


MarkupNode = Union[TextNode, ElementNode]


def fragment(*children: MarkupNode) -> ElementNode:
    """Build a tree root holding ``children``."""
    return ElementNode(tag=FRAGMENT_TAG, children=list(children))
