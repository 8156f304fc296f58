"""Adapter: pykakasi conversion chunks to ruby-annotated HTML.

WHY: The compositor expects the reading layer as an HTML fragment in
which every kanji run is a ruby element:
``<ruby>東京<rp>(</rp><rt>とうきょう</rt><rp>)</rp></ruby>``. pykakasi
returns a list of chunks with the original text and its hiragana; this
adapter renders those chunks in that shape.

HOW: Each chunk containing kanji is split into kana prefix, kanji core,
and kana suffix (okurigana) by trimming the kana the original and the
reading share at either end. Only the core gets a ruby element; the rest
is emitted as escaped text.

RULES:
- Only mode="furigana" with to="hiragana" is supported (ValueError otherwise)
- Chunks without kanji, or whose reading equals the original, pass through
- All text outside ruby elements is HTML-escaped
"""

from __future__ import annotations

import html
from typing import Any

from furigana_player.core.japanese import has_kanji, katakana_to_hiragana


def ruby_markup(base: str, reading: str) -> str:
    """One ruby element with parenthesised fallback for non-ruby renderers."""
    return "<ruby>{}<rp>(</rp><rt>{}</rt><rp>)</rp></ruby>".format(
        html.escape(base, quote=False), html.escape(reading, quote=False)
    )


def split_okurigana(orig: str, reading: str) -> tuple[str, str, str, str]:
    """Split ``orig`` into ``(prefix, core, core_reading, suffix)``.

    The prefix and suffix are the kana shared by ``orig`` and ``reading``
    at the start and end; e.g. ``("", "行", "い", "く")`` for 行く/いく.
    """
    orig_kana = katakana_to_hiragana(orig)
    start = 0
    while (
        start < len(orig) and start < len(reading)
        and not has_kanji(orig[start]) and orig_kana[start] == reading[start]
    ):
        start += 1

    end = 0
    while (
        end < len(orig) - start and end < len(reading) - start
        and not has_kanji(orig[-1 - end]) and orig_kana[-1 - end] == reading[-1 - end]
    ):
        end += 1

    return (
        orig[:start],
        orig[start:len(orig) - end],
        reading[start:len(reading) - end],
        orig[len(orig) - end:],
    )


def chunk_markup(orig: str, hira: str) -> str:
    """Markup for one pykakasi chunk."""
    if not has_kanji(orig) or not hira or hira == orig:
        return html.escape(orig, quote=False)

    prefix, core, core_reading, suffix = split_okurigana(orig, hira)
    if not core_reading:
        return html.escape(orig, quote=False)
    return (
        html.escape(prefix, quote=False)
        + ruby_markup(core, core_reading)
        + html.escape(suffix, quote=False)
    )


class KakasiFuriganaConverter:
    """Furigana converter backed by pykakasi.

    ``kakasi`` may be any object with a pykakasi-style ``convert(text)``
    returning ``[{"orig": ..., "hira": ...}, ...]``; by default a
    pykakasi.kakasi instance is created on first use.
    """

    def __init__(self, kakasi: Any = None) -> None:
        self._kakasi = kakasi

    def _ensure_kakasi(self) -> Any:
        if self._kakasi is None:
            import pykakasi

            self._kakasi = pykakasi.kakasi()
        return self._kakasi

    def load(self) -> None:
        self._ensure_kakasi()

    def convert(self, text: str, mode: str = "furigana", to: str = "hiragana") -> str:
        if mode != "furigana" or to != "hiragana":
            raise ValueError("Unsupported conversion mode={!r} to={!r}".format(mode, to))
        chunks = self._ensure_kakasi().convert(text)
        return "".join(chunk_markup(c.get("orig", ""), c.get("hira", "")) for c in chunks)
