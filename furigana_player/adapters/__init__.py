"""Adapter modules for the external text collaborators.

WHY: The annotator talks to a morphological analyzer and a furigana
converter only through the small interfaces in base.py. Adapters bridge
concrete libraries (fugashi, pykakasi) to those interfaces so each side
can evolve independently.

HOW: Each adapter module wraps one library and maps its output onto the
IR: fugashi nodes to Tokens, pykakasi chunks to ruby HTML.

RULES:
- Libraries are imported on first use (or on load()), not at module
  import time
- Adapters never touch the compositor or the dictionary service
"""

from furigana_player.adapters.analyzer import FugashiAnalyzer
from furigana_player.adapters.base import Analyzer, FuriganaConverter
from furigana_player.adapters.furigana import KakasiFuriganaConverter

__all__ = ["Analyzer", "FugashiAnalyzer", "FuriganaConverter", "KakasiFuriganaConverter"]
