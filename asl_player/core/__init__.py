"""Core normalization, indexing, matching and queue IR.

WHY: The core package is the deterministic heart of the player. It turns
text plus a dictionary into a queue of clips. Everything here is pure and
synchronous so it can run on every keystroke and be tested without media.

HOW: normalizer.py tokenizes text, index.py builds the sorted phrase list
and word lookup, matcher.py runs the greedy segmentation, ir.py defines the
dataclasses exchanged with the playback layer.

RULES:
- No I/O and no asyncio in this package
- ir.py is the contract with playback
"""
