"""Core text pipeline: subtitle timeline, alignment, and compositing.

WHY: Everything that decides what a subtitle line looks like lives here,
independent of HTTP, the dictionary transport, and the concrete analyzer
or furigana libraries.

HOW: ir.py defines the shared dataclasses, timeline.py parses SRT and
answers time lookups, aligner.py places words on the text, markup.py
converts between HTML and the tree IR, compositor.py merges readings
with highlights, and annotator.py runs one full pass over a line.

RULES:
- No module here performs network I/O
- compositor.composite() is pure; input trees are never mutated
"""
