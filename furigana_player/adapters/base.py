"""Interfaces of the external text collaborators.

WHY: Morphological analysis and furigana conversion are done by third-
party libraries that the core must not depend on directly. The annotator
only needs two small call shapes, so any object providing them (the
shipped adapters, or a fake in tests) can be plugged in.

RULES:
- Analyzer.parse() returns tokens in text order as the analyzer sees it;
  it may raise, and callers degrade to "no tokens"
- FuriganaConverter.convert() returns an HTML fragment whose readings are
  ruby elements; it may raise, and callers degrade to the plain text
"""

from __future__ import annotations

from typing import Protocol, Sequence

from furigana_player.core.ir import Token


class Analyzer(Protocol):
    def parse(self, text: str) -> Sequence[Token]:
        ...


class FuriganaConverter(Protocol):
    def convert(self, text: str, mode: str = "furigana", to: str = "hiragana") -> str:
        ...
