"""Plain text formatter: the subtitle line followed by its glosses.

WHY: Terminals and logs cannot show ruby or popups. The reader still
wants the line itself and what each highlighted word means.

HOW: The first line is the visible text of the tree (readings and popups
excluded). Each highlight then adds one line built from the reading and
meaning carried on its popup.

RULES:
- Gloss line format: "word (reading): meaning" when both are present,
  otherwise "word: popup"
- A highlight repeated with the same gloss is listed once
- Lines end with "\n"; no trailing whitespace
"""

from __future__ import annotations

from typing import List

from furigana_player.core.ir import MarkupNode
from furigana_player.core.markup import iter_glosses, visible_text
from furigana_player.formatters.base import BaseFormatter, FormatterOutput


def gloss_line(word: str, reading: str, meaning: str, popup: str) -> str:
    """One gloss line for a highlighted word."""
    if reading and meaning:
        return "{} ({}): {}".format(word, reading, meaning)
    return "{}: {}".format(word, popup)


class PlainTextFormatter(BaseFormatter):

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(self, tree: MarkupNode) -> list[FormatterOutput]:
        lines: List[str] = [visible_text(tree).rstrip()]
        seen = set()
        for gloss in iter_glosses(tree):
            if gloss in seen:
                continue
            seen.add(gloss)
            lines.append(gloss_line(*gloss).rstrip())

        return [FormatterOutput(
            suffix="-annotated.txt",
            content="\n".join(lines) + "\n",
            media_type="text/plain",
        )]
