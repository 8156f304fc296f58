"""Markup tree parsing, rendering, and text extraction.

WHY: The furigana converter hands back an HTML string with ruby
elements, while the compositor works on MarkupNode trees and the
formatters need HTML or plain text again. This module is the only place
that knows how HTML maps onto the IR.

HOW: parse_markup() runs BeautifulSoup's html.parser and converts the
soup into TextNode / ElementNode values. render_markup() serializes a
tree back to HTML. The text helpers walk a tree and collect the text a
reader would see, with or without reading annotations and popups.

RULES:
- Parsing never yields comments or doctypes; only text and elements
- Attribute values are strings (multi-valued attributes joined by spaces)
- ruby_base() excludes rt/rp content, drops parentheses, and strips
- visible_text() excludes rt/rp subtrees and highlight popups, so it
  reproduces the source text of a composited tree
- iter_glosses() reads reading and meaning from popup attributes, never
  by splitting the popup text
"""

from __future__ import annotations

import copy
import html
from typing import Iterator

from bs4 import (
    BeautifulSoup,
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    ProcessingInstruction,
    Tag,
)

from furigana_player.core.ir import FRAGMENT_TAG, ElementNode, MarkupNode, TextNode, fragment

HIGHLIGHT_CLASS = "kanji-word"
POPUP_CLASS = "kanji-popup"

# Popup attributes carrying the gloss parts; absent when the part is empty
READING_ATTR = "data-reading"
MEANING_ATTR = "data-meaning"

RUBY_TAG = "ruby"
READING_TAGS = frozenset({"rt", "rp"})

_VOID_TAGS = frozenset({"br", "hr", "img", "wbr"})
_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)


# ---------------------------------------------------------------------------
# Parsing and rendering
# ---------------------------------------------------------------------------


def parse_markup(markup: str) -> ElementNode:
    """Parse an HTML fragment into a tree rooted at a fragment node."""
    soup = BeautifulSoup(markup, "html.parser")
    return fragment(*_convert_children(soup))


def _convert_children(tag: Tag) -> list[MarkupNode]:
    nodes: list[MarkupNode] = []
    for child in tag.children:
        if isinstance(child, _SKIPPED_STRINGS):
            continue
        if isinstance(child, NavigableString):
            nodes.append(TextNode(str(child)))
        elif isinstance(child, Tag):
            nodes.append(ElementNode(
                tag=child.name.lower(),
                attributes={
                    name: " ".join(value) if isinstance(value, list) else str(value)
                    for name, value in child.attrs.items()
                },
                children=_convert_children(child),
            ))
    return nodes


def render_markup(node: MarkupNode) -> str:
    """Serialize a tree to HTML. Fragment roots emit only their children."""
    if isinstance(node, TextNode):
        return html.escape(node.content, quote=False)

    inner = "".join(render_markup(child) for child in node.children)
    if node.tag == FRAGMENT_TAG:
        return inner

    attrs = "".join(
        ' {}="{}"'.format(name, html.escape(value, quote=True))
        for name, value in node.attributes.items()
    )
    if node.tag in _VOID_TAGS and not node.children:
        return "<{}{}>".format(node.tag, attrs)
    return "<{0}{1}>{2}</{0}>".format(node.tag, attrs, inner)


def clone(node: MarkupNode) -> MarkupNode:
    return copy.deepcopy(node)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def has_class(node: MarkupNode, class_name: str) -> bool:
    if not isinstance(node, ElementNode):
        return False
    return class_name in node.attributes.get("class", "").split()


def is_popup(node: MarkupNode) -> bool:
    return has_class(node, POPUP_CLASS)


def contains_tag(node: MarkupNode, tag: str) -> bool:
    """True if ``node`` or any descendant is an element named ``tag``."""
    if not isinstance(node, ElementNode):
        return False
    if node.tag == tag:
        return True
    return any(contains_tag(child, tag) for child in node.children)


def iter_elements(node: MarkupNode, tag: str) -> Iterator[ElementNode]:
    """Yield elements named ``tag`` in document order (not nested inside each other)."""
    if not isinstance(node, ElementNode):
        return
    if node.tag == tag:
        yield node
        return
    for child in node.children:
        yield from iter_elements(child, tag)


# ---------------------------------------------------------------------------
# Text extraction
# ---------------------------------------------------------------------------


def text_content(node: MarkupNode) -> str:
    """All text in ``node``, readings and popups included."""
    if isinstance(node, TextNode):
        return node.content
    return "".join(text_content(child) for child in node.children)


def visible_text(node: MarkupNode) -> str:
    """Text of the underlying line: no rt/rp readings, no popups."""
    if isinstance(node, TextNode):
        return node.content
    if node.tag in READING_TAGS or is_popup(node):
        return ""
    return "".join(visible_text(child) for child in node.children)


def ruby_base(ruby: ElementNode) -> str:
    """Base text of a ruby element, ignoring its rt/rp children.

    Segmented ``<rb>`` children are preferred when present. Parentheses
    are removed and surrounding whitespace stripped.
    """
    rbs = [c for c in ruby.children if isinstance(c, ElementNode) and c.tag == "rb"]
    if rbs:
        base = "".join(text_content(rb) for rb in rbs)
    else:
        base = "".join(
            text_content(child)
            for child in ruby.children
            if not (isinstance(child, ElementNode) and child.tag in READING_TAGS)
        )
    return base.replace("(", "").replace(")", "").strip()


def ruby_reading(ruby: ElementNode) -> str:
    """Concatenated text of the ruby element's direct rt children."""
    return "".join(
        text_content(child)
        for child in ruby.children
        if isinstance(child, ElementNode) and child.tag == "rt"
    ).strip()


def iter_highlights(node: MarkupNode) -> Iterator[tuple[str, str]]:
    """Yield ``(word_text, popup_text)`` for each highlight wrapper in order."""
    for word, _, _, popup in iter_glosses(node):
        yield word, popup


def iter_glosses(node: MarkupNode) -> Iterator[tuple[str, str, str, str]]:
    """Yield ``(word_text, reading, meaning, popup_text)`` per highlight wrapper.

    Reading and meaning come from the popup's data attributes, so a
    meaning that itself contains the popup separator stays intact.
    """
    if not isinstance(node, ElementNode):
        return
    if has_class(node, HIGHLIGHT_CLASS):
        popups = [c for c in node.children if is_popup(c)]
        reading = "".join(p.attributes.get(READING_ATTR, "") for p in popups)
        meaning = "".join(p.attributes.get(MEANING_ATTR, "") for p in popups)
        popup = "".join(text_content(p) for p in popups)
        yield visible_text(node), reading, meaning, popup
        return
    for child in node.children:
        yield from iter_glosses(child)
