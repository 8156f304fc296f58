"""Tiered dictionary lookup with a session-wide LRU cache.

WHY: The dictionary service is patchy: conjugated forms only show up in
the inflected search, rarer compounds only in a partial search, and any
request can fail. A gloss popup should still say something sensible, and
the same word repeated across subtitles should not cost another round
trip.

HOW: GlossResolver.lookup() checks the cache, then falls through three
tiers — inflected, direct, partial — stopping at the first usable match.
resolve() turns the outcome into display text and never raises.
Per-tier failures are logged and treated as "no result" for that tier.

RULES:
- Tier order: inflected → direct → partial(limit); later tiers are only
  queried when earlier ones yield no usable match
- Usable match: exact headword with a meaning, else any with a meaning
- The first inflected match, even without a meaning, is remembered as a
  fallback record (for its reading) but does not stop the fall-through
- Nothing usable → NO_DEFINITION; aborted resolution → LOOKUP_ERROR
- Cache: checked before tier 1, written after success or exhaustion
  (None is cached too); aborted resolutions are not cached
- Words of one subtitle are resolved sequentially, so an earlier word
  warms the cache for a later identical word
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import replace
from typing import Awaitable, Callable, Sequence

import httpx

from furigana_player.api.client import DictionaryAPIError, DictionaryClient
from furigana_player.api.models import DictionaryMatch
from furigana_player.config import (
    COMPOSE_FROM_KANJI,
    DICTIONARY_CACHE_SIZE,
    LOOKUP_ERROR,
    NO_DEFINITION,
    PARTIAL_SEARCH_LIMIT,
)
from furigana_player.core.ir import AnnotatedWord
from furigana_player.core.japanese import kanji_chars

logger = logging.getLogger(__name__)

_MISSING = object()

# Errors a single tier may raise; any of them means "this tier found nothing".
_TIER_ERRORS = (httpx.HTTPError, DictionaryAPIError, ValueError)


class GlossCache:
    """Bounded word → match mapping with least-recently-used eviction.

    RULES:
    - Keys are exact surface strings
    - A stored None means "looked up, nothing found"
    - get() refreshes recency; peek() does not
    - capacity <= 0 disables eviction
    """

    def __init__(self, capacity: int = DICTIONARY_CACHE_SIZE) -> None:
        self.capacity = capacity
        self._entries: OrderedDict[str, DictionaryMatch | None] = OrderedDict()

    def get(self, word: str, default: object = _MISSING) -> object:
        if word not in self._entries:
            return default
        self._entries.move_to_end(word)
        return self._entries[word]

    def peek(self, word: str) -> DictionaryMatch | None:
        return self._entries.get(word)

    def put(self, word: str, match: DictionaryMatch | None) -> None:
        self._entries[word] = match
        self._entries.move_to_end(word)
        if self.capacity > 0:
            while len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted %r from gloss cache", evicted)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, word: object) -> bool:
        return word in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def pick_match(matches: Sequence[DictionaryMatch], word: str) -> DictionaryMatch | None:
    """Preferred usable match: exact headword with a meaning, else any with a meaning."""
    for match in matches:
        if match.word == word and match.meaning:
            return match
    for match in matches:
        if match.meaning:
            return match
    return None


class GlossResolver:
    """Resolves surface words to glosses through the dictionary tiers.

    WHY: The popup for every highlighted word needs a meaning, and the
    lookup chain plus caching is the same for every caller (player, CLI,
    HTTP API).

    HOW: Holds an open DictionaryClient and a GlossCache. lookup() returns
    the chosen DictionaryMatch (or None); resolve() maps that to display
    text; annotate_words() fills a subtitle's words one after another.

    RULES:
    - resolve() and annotate_word() never raise
    - compose_from_kanji: when no tier resolves a word of several
      characters, look up each kanji (direct, then partial) and combine
      the per-kanji meanings and readings
    """

    def __init__(
        self,
        client: DictionaryClient,
        cache: GlossCache | None = None,
        partial_limit: int = PARTIAL_SEARCH_LIMIT,
        compose_from_kanji: bool = COMPOSE_FROM_KANJI,
    ) -> None:
        self._client = client
        self.cache = cache if cache is not None else GlossCache()
        self._partial_limit = partial_limit
        self._compose_from_kanji = compose_from_kanji

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def _tier(
        self,
        name: str,
        search: Callable[[str], Awaitable[list[DictionaryMatch]]],
        word: str,
    ) -> list[DictionaryMatch]:
        try:
            return await search(word)
        except _TIER_ERRORS as exc:
            logger.warning("%s search failed for %r: %s", name, word, exc)
            return []

    async def _partial(self, word: str) -> list[DictionaryMatch]:
        return await self._client.search_partial(word, limit=self._partial_limit)

    async def lookup(self, word: str) -> DictionaryMatch | None:
        """Return the match chosen for ``word``, consulting the cache first.

        Raises:
            UnicodeEncodeError: ``word`` cannot be sent as a query.
        """
        cached = self.cache.get(word)
        if cached is not _MISSING:
            return cached  # type: ignore[return-value]

        word.encode("utf-8")

        inflected = await self._tier("inflected", self._client.search_inflected, word)
        match = pick_match(inflected, word)
        fallback = inflected[0] if inflected else None

        if match is None:
            match = pick_match(await self._tier("direct", self._client.search, word), word)

        if match is None:
            match = pick_match(await self._tier("partial", self._partial, word), word)

        if match is None and self._compose_from_kanji and len(word) > 1:
            match = await self._compose_from_kanji_chars(word)

        if match is None:
            match = fallback
            logger.info("No definition found for %r", word)

        self.cache.put(word, match)
        return match

    async def _compose_from_kanji_chars(self, word: str) -> DictionaryMatch | None:
        meanings: list[str] = []
        readings: list[str] = []

        for kanji in kanji_chars(word):
            match = pick_match(await self._tier("direct", self._client.search, kanji), kanji)
            if match is None:
                match = pick_match(await self._tier("partial", self._partial, kanji), kanji)
            if match is None:
                continue
            meanings.append("{}: {}".format(kanji, match.meaning))
            if match.hiragana:
                readings.append("{}: {}".format(kanji, match.hiragana))

        if not meanings:
            return None
        return DictionaryMatch(
            word=word,
            meaning="; ".join(meanings),
            hiragana=" + ".join(readings),
        )

    # ------------------------------------------------------------------
    # Display text
    # ------------------------------------------------------------------

    async def resolve(self, word: str) -> str:
        """Gloss for ``word``, or NO_DEFINITION / LOOKUP_ERROR. Never raises."""
        try:
            match = await self.lookup(word)
        except UnicodeError as exc:
            logger.warning("Cannot encode %r for lookup: %s", word, exc)
            return LOOKUP_ERROR
        except Exception:
            logger.exception("Resolution aborted for %r", word)
            return LOOKUP_ERROR

        if match is None or not match.meaning:
            return NO_DEFINITION
        return match.meaning

    async def annotate_word(self, word: AnnotatedWord) -> AnnotatedWord:
        """Copy of ``word`` with its meaning, and reading when it had none."""
        meaning = await self.resolve(word.word)
        match = self.cache.peek(word.word)
        reading = word.reading or (match.hiragana if match else "")
        return replace(word, meaning=meaning, reading=reading)

    async def annotate_words(self, words: Sequence[AnnotatedWord]) -> list[AnnotatedWord]:
        """Resolve ``words`` one at a time, in order."""
        resolved: list[AnnotatedWord] = []
        for word in words:
            resolved.append(await self.annotate_word(word))
        return resolved
