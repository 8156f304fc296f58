"""Furigana Player — timed Japanese subtitles with readings and word glosses.

WHY: Learners watching Japanese media need more than the raw subtitle line.
This package finds the subtitle active at a playback time, adds furigana
(reading annotations) to kanji, and wraps each recognised word in a
highlight that carries a dictionary gloss popup.

HOW: Four-stage pipeline — time lookup (core.timeline), word alignment
(core.aligner), dictionary resolution (api.resolver), and composition of
the reading tree with the highlight layer (core.compositor). The player
module glues playback time updates to these stages.

RULES:
- All stages exchange the IR types in core.ir
- Composition is a pure tree transform; nothing mutates a live document
- Every failure degrades to less-annotated but still readable text
"""

__version__ = "0.1.0"
