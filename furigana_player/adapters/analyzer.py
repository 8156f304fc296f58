"""Adapter: fugashi (MeCab + UniDic) nodes to analyzer Tokens.

WHY: The aligner consumes Token(surface_form, reading, part_of_speech)
values; fugashi yields MeCab nodes whose UniDic features carry the
reading in katakana and the coarse part of speech in pos1.

HOW: FugashiAnalyzer wraps a fugashi.Tagger (created on first use when
none is injected) and maps each node to a Token.

RULES:
- reading: UniDic kana feature converted to hiragana; "" when missing or "*"
- part_of_speech: UniDic pos1 (e.g. "名詞"), "" when missing
- Nodes with an empty surface are dropped
"""

from __future__ import annotations

from typing import Any, Sequence

from furigana_player.core.ir import Token
from furigana_player.core.japanese import katakana_to_hiragana


def _feature(node: Any, name: str) -> str:
    value = getattr(node.feature, name, None)
    if not value or value == "*":
        return ""
    return str(value)


def node_to_token(node: Any) -> Token:
    """Convert one fugashi node to a Token."""
    kana = _feature(node, "kana") or _feature(node, "pron")
    return Token(
        surface_form=node.surface,
        reading=katakana_to_hiragana(kana),
        part_of_speech=_feature(node, "pos1"),
    )


class FugashiAnalyzer:
    """Morphological analyzer backed by fugashi.

    ``tagger`` may be any callable returning fugashi-like nodes; by
    default a fugashi.Tagger over the installed UniDic dictionary is
    created on first use.
    """

    def __init__(self, tagger: Any = None) -> None:
        self._tagger = tagger

    def _ensure_tagger(self) -> Any:
        if self._tagger is None:
            import fugashi

            self._tagger = fugashi.Tagger()
        return self._tagger

    def load(self) -> None:
        """Create the tagger now; loading the dictionary takes a while."""
        self._ensure_tagger()

    def parse(self, text: str) -> Sequence[Token]:
        tagger = self._ensure_tagger()
        return [node_to_token(node) for node in tagger(text) if node.surface]
