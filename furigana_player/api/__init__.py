"""Dictionary service package — async HTTP lookups and gloss resolution.

WHY: Word glosses come from an external dictionary service. This package
keeps every HTTP detail (endpoints, encoding, status codes) in one client
and the fall-through lookup policy plus caching in one resolver.

HOW: DictionaryClient wraps httpx.AsyncClient with one method per search
endpoint. GlossResolver chains the endpoints and caches the outcome.
Response data is parsed into the dataclasses in models.py.

RULES:
- All HTTP calls go through DictionaryClient (no direct httpx usage elsewhere)
- GlossResolver.resolve() never raises
"""

from furigana_player.api.client import DictionaryAPIError, DictionaryClient
from furigana_player.api.models import DictionaryMatch
from furigana_player.api.resolver import GlossCache, GlossResolver

__all__ = [
    "DictionaryAPIError",
    "DictionaryClient",
    "DictionaryMatch",
    "GlossCache",
    "GlossResolver",
]
