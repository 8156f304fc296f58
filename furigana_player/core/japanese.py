"""Character-class helpers for Japanese text.

The kanji ranges are the CJK Unified Ideographs block (U+4E00–U+9FAF) and
Extension A (U+3400–U+4DBF), the same ranges the furigana converter uses
to decide whether a line needs readings at all.
"""

from __future__ import annotations

import re

_KANJI_RE = re.compile(r"[\u4e00-\u9faf\u3400-\u4dbf]")

# Katakana ァ (U+30A1) .. ヶ (U+30F6) map onto hiragana by a fixed offset.
_KATAKANA_START = 0x30A1
_KATAKANA_END = 0x30F6
_KANA_OFFSET = 0x60


def is_kanji(char: str) -> bool:
    return bool(_KANJI_RE.fullmatch(char))


def has_kanji(text: str) -> bool:
    """True if ``text`` contains at least one kanji character."""
    return _KANJI_RE.search(text) is not None


def kanji_chars(text: str) -> list[str]:
    """Kanji characters of ``text`` in order, without duplicates."""
    seen: list[str] = []
    for char in text:
        if is_kanji(char) and char not in seen:
            seen.append(char)
    return seen


def katakana_to_hiragana(text: str) -> str:
    """Convert katakana to hiragana, leaving every other character as is."""
    return "".join(
        chr(ord(c) - _KANA_OFFSET) if _KATAKANA_START <= ord(c) <= _KATAKANA_END else c
        for c in text
    )
