"""Async HTTP client for the dictionary gloss service.

WHY: Word glosses come from an external HTTP dictionary with three
search endpoints. The resolver should not care about URLs, query
encoding, or status codes, so this module wraps them behind one client
class with one method per endpoint.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. DictionaryClient is an
async context manager — enter it to open the connection pool, exit to
close it. Each search returns the parsed list of DictionaryMatch records.

RULES:
- Always use the async context manager (async with DictionaryClient() as client:)
- Endpoints: /search/inflected?q=, /search?q=, /search/partial?q=&limit=
- The query word is UTF-8 encoded before any request; a word that cannot
  be encoded raises UnicodeEncodeError without touching the network
- Non-200 responses raise DictionaryAPIError
- Network failures propagate as httpx.HTTPError; bad JSON as ValueError
"""

from __future__ import annotations

import logging

import httpx

from furigana_player.api.models import DictionaryMatch, SearchResponse
from furigana_player.config import (
    DICTIONARY_BASE_URL,
    DICTIONARY_TIMEOUT_S,
    PARTIAL_SEARCH_LIMIT,
)

logger = logging.getLogger(__name__)


class DictionaryAPIError(Exception):
    """Raised when the dictionary service returns a non-200 response.

    RULES:
    - Always include status_code and message
    - message is the response body text
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Dictionary API error {status_code}: {message}")


class DictionaryClient:
    """Async client for the dictionary search endpoints.

    WHY: Provides a small typed interface over the three search
    endpoints the resolver falls through: inflected, direct, partial.

    HOW: Wraps httpx.AsyncClient. ``transport`` can be supplied to route
    requests elsewhere (tests pass an httpx.MockTransport).

    RULES:
    - base_url defaults to DICTIONARY_BASE_URL from config
    - timeout defaults to DICTIONARY_TIMEOUT_S seconds
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or DICTIONARY_BASE_URL).rstrip("/")
        self._timeout = timeout if timeout is not None else DICTIONARY_TIMEOUT_S
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> DictionaryClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "DictionaryClient must be used as an async context manager: "
                "async with DictionaryClient() as client: ..."
            )
        return self._client

    async def _search(self, path: str, word: str, **extra: int) -> list[DictionaryMatch]:
        client = self._ensure_client()
        # Fail before the request if the word has no UTF-8 form (lone surrogates).
        word.encode("utf-8")

        resp = await client.get(path, params={"q": word, **extra})
        if resp.status_code != 200:
            raise DictionaryAPIError(resp.status_code, resp.text)

        matches = SearchResponse.from_dict(resp.json()).matches
        logger.debug("%s %r → %d match(es)", path, word, len(matches))
        return matches

    async def search_inflected(self, word: str) -> list[DictionaryMatch]:
        """Matches for ``word`` including inflected (conjugated) forms."""
        return await self._search("/search/inflected", word)

    async def search(self, word: str) -> list[DictionaryMatch]:
        """Direct headword matches for ``word``."""
        return await self._search("/search", word)

    async def search_partial(
        self,
        word: str,
        limit: int = PARTIAL_SEARCH_LIMIT,
    ) -> list[DictionaryMatch]:
        """Partial (substring) matches for ``word``, at most ``limit`` of them."""
        return await self._search("/search/partial", word, limit=limit)
