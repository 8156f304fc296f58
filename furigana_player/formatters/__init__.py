"""Output formatter registry.

WHY: The CLI and the HTTP API pick a rendering by name. A central dict
makes adding one a matter of a new class and one line here.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["html"]()``.

RULES:
- Keys are snake_case identifiers (used in CLI flags and API responses)
- Values are BaseFormatter subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from furigana_player.formatters.html import HTMLFormatter
from furigana_player.formatters.plain_text import PlainTextFormatter

if TYPE_CHECKING:
    from furigana_player.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "html": HTMLFormatter,
    "plain_text": PlainTextFormatter,
}
