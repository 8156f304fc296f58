"""Abstract base formatter and output container.

WHY: An annotated tree is shown in a browser overlay, printed in a
terminal, and returned by the HTTP API. Each target wants a different
serialization of the same tree, behind one interface.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method. FormatterOutput bundles a file suffix with its content and MIME
type.

RULES:
- ``format()`` returns a list; every shipped formatter returns one item
- ``suffix`` starts with a hyphen, e.g. ``"-annotated.html"``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from furigana_player.core.ir import MarkupNode


@dataclass
class FormatterOutput:
    """One rendering of an annotated tree.

    Attributes:
        suffix: Suffix appended to the subtitle file stem when saved.
        content: The rendered text.
        media_type: MIME type for the content, e.g. ``"text/html"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all annotation formatters.

    To add an output format, subclass this, implement ``name`` and
    ``format()``, and register the class in formatters/__init__.py.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name."""

    @abstractmethod
    def format(self, tree: MarkupNode) -> list[FormatterOutput]:
        """Render an annotated tree."""
