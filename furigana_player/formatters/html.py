"""HTML formatter: the annotated tree serialized as markup.

RULES:
- Output is a fragment (no document wrapper), ready for innerHTML
- Text is escaped; ruby, highlight, and popup elements are kept as-is
"""

from __future__ import annotations

from furigana_player.core.ir import MarkupNode
from furigana_player.core.markup import render_markup
from furigana_player.formatters.base import BaseFormatter, FormatterOutput


class HTMLFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "HTML fragment"

    def format(self, tree: MarkupNode) -> list[FormatterOutput]:
        return [FormatterOutput(
            suffix="-annotated.html",
            content=render_markup(tree),
            media_type="text/html",
        )]
