"""Dictionary service response dataclasses.

WHY: The dictionary service returns loosely shaped JSON; fields can be
missing or null depending on the entry. Typed dataclasses make the shape
explicit and turn absent fields into empty strings in one place.

HOW: Each dataclass maps 1:1 to a JSON object of the service. Factory
methods (from_dict) parse raw response dicts.

RULES:
- DictionaryMatch fields are always strings; missing/null → ""
- SearchResponse.matches is [] when the key is missing or null
- A non-object response body raises ValueError
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class DictionaryMatch:
    """One dictionary record: headword, English meaning, and kana reading.

    RULES:
    - word: the dictionary headword (may differ from the queried form)
    - meaning: gloss text, "" when the entry has none
    - hiragana: kana reading, "" when the entry has none
    """

    word: str
    meaning: str = ""
    hiragana: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> DictionaryMatch:
        return cls(
            word=str(data.get("word") or ""),
            meaning=str(data.get("meaning") or ""),
            hiragana=str(data.get("hiragana") or ""),
        )


@dataclass
class SearchResponse:
    """Body of any of the three search endpoints."""

    matches: list[DictionaryMatch] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: object) -> SearchResponse:
        """Parse a SearchResponse from a decoded JSON body.

        RULES:
        - data must be a JSON object, else ValueError
        - non-object entries in matches are ignored
        """
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object, got {}".format(type(data).__name__))
        raw = data.get("matches") or []
        return cls(matches=[DictionaryMatch.from_dict(m) for m in raw if isinstance(m, dict)])
