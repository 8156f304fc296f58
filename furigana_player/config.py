"""Configuration constants, display sentinels, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. The dictionary service location, lookup limits,
cache ceiling, and the fixed strings shown in popups are plain data —
not buried in logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values; every tunable one can be overridden through an
environment variable of the same name.

RULES:
- DICTIONARY_BASE_URL points at the gloss service (inflected/direct/partial search)
- PARTIAL_SEARCH_LIMIT bounds the partial search result count
- DICTIONARY_CACHE_SIZE is the LRU ceiling of the session gloss cache
- Sentinel strings are part of the rendered output — change with care
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Dictionary service
# ---------------------------------------------------------------------------

DICTIONARY_BASE_URL = os.getenv("DICTIONARY_BASE_URL", "http://localhost:3000")
DICTIONARY_TIMEOUT_S = float(os.getenv("DICTIONARY_TIMEOUT_S", "10"))
PARTIAL_SEARCH_LIMIT = int(os.getenv("PARTIAL_SEARCH_LIMIT", "5"))
DICTIONARY_CACHE_SIZE = int(os.getenv("DICTIONARY_CACHE_SIZE", "4096"))
COMPOSE_FROM_KANJI = _env_bool("COMPOSE_FROM_KANJI", "false")

# ---------------------------------------------------------------------------
# Display strings
# ---------------------------------------------------------------------------

NO_DEFINITION = "No definition found"
"""Gloss used when no lookup tier yields a usable meaning."""

LOOKUP_ERROR = "Error fetching meaning"
"""Gloss used when resolution of a word aborts entirely."""

NO_MEANING_AVAILABLE = "No meaning available"
"""Popup text for a highlighted word with neither reading nor meaning."""

POPUP_SEPARATOR = " - "

# ---------------------------------------------------------------------------
# Files and logging
# ---------------------------------------------------------------------------

SUBTITLE_FORMATS: set[str] = {".srt"}
"""Subtitle file extensions accepted by the CLI and HTTP API (lowercase, with dot)."""

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()
