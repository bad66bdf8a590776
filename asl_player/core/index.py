"""Dictionary index construction and clip filename derivation.

WHY: The raw dictionary artifact is loosely shaped JSON written by hand.
Phrases must be tokenized and sorted once so greedy matching is
deterministic; word values come in two shapes; some entries are broken.
None of that may crash the player; an unusable dictionary simply means
everything is fingerspelled.

HOW: build_index() walks ``phrases`` and ``words`` defensively, drops
invalid entries (logged at debug level), tokenizes phrase keys with the
normalizer, and sorts phrases by (-token_count, key).

RULES:
- Phrase entries need a key with >= 1 token and a non-empty string file
- Word values: "FILE.mp4" or {"file": "FILE.mp4"}; an object without a
  file falls back to derive_clip_filename(key)
- Word keys are used verbatim (assumed already single uppercase tokens)
- The ``weight`` field on phrases is ignored
- Malformed or missing dictionary → EMPTY_INDEX, never an exception
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from asl_player.config import CLIP_EXTENSION
from asl_player.core.ir import EMPTY_INDEX, DictionaryIndex, PhraseEntry
from asl_player.core.normalizer import tokenize

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def derive_clip_filename(key: str) -> str:
    """Derive the conventional clip filename for a dictionary key.

    ``"GOOD MORNING"`` → ``"GOOD_MORNING.mp4"``. Pure; there is no
    runtime existence check, so this must match the asset naming exactly.
    """
    return _WHITESPACE_RE.sub("_", key) + CLIP_EXTENSION


def _resolve_word_file(key: str, value: Any) -> Optional[str]:
    """Return the clip filename for a word value, or None if it is invalid."""
    if isinstance(value, str):
        return value or None
    if isinstance(value, Mapping):
        file = value.get("file")
        if isinstance(file, str) and file:
            return file
        if file is None or file == "":
            return derive_clip_filename(key)
    return None


def _build_phrase_entries(phrases: Any) -> List[PhraseEntry]:
    if not isinstance(phrases, list):
        return []

    entries: List[PhraseEntry] = []
    for raw in phrases:
        if not isinstance(raw, Mapping):
            logger.debug("Skipping non-object phrase entry: %r", raw)
            continue
        key = raw.get("key")
        file = raw.get("file")
        tokens = tokenize(key) if isinstance(key, str) else []
        if not tokens or not isinstance(file, str) or not file:
            logger.debug("Skipping invalid phrase entry: %r", raw)
            continue
        entries.append(PhraseEntry(tokens=tuple(tokens), key=" ".join(tokens), file=file))

    entries.sort(key=lambda e: (-e.token_count, e.key))
    return entries


def _build_word_lookup(words: Any) -> Dict[str, str]:
    if not isinstance(words, Mapping):
        return {}

    lookup: Dict[str, str] = {}
    for key, value in words.items():
        if not isinstance(key, str) or not key.strip():
            continue
        file = _resolve_word_file(key, value)
        if file is None:
            logger.debug("Skipping invalid word entry %r: %r", key, value)
            continue
        lookup[key] = file
    return lookup


def build_index(dictionary: Any) -> DictionaryIndex:
    """Build a DictionaryIndex from a raw dictionary mapping.

    WHY: The index is rebuilt whenever the dictionary changes and is then
    shared by every match call until the next load.

    HOW: Accepts either a plain mapping (parsed JSON) or an object exposing
    ``phrases`` / ``words`` attributes (e.g. api.models.AslDictionary).

    RULES:
    - None, non-mappings and wrongly typed sections contribute nothing
    - Returns EMPTY_INDEX when nothing valid survives
    """
    if dictionary is None:
        return EMPTY_INDEX

    if isinstance(dictionary, Mapping):
        phrases = dictionary.get("phrases")
        words = dictionary.get("words")
    else:
        phrases = getattr(dictionary, "phrases", None)
        words = getattr(dictionary, "words", None)

    phrase_entries = _build_phrase_entries(phrases)
    word_lookup = _build_word_lookup(words)
    if not phrase_entries and not word_lookup:
        return EMPTY_INDEX

    logger.info(
        "Indexed %d phrases and %d words", len(phrase_entries), len(word_lookup)
    )
    return DictionaryIndex(phrase_entries=tuple(phrase_entries), word_lookup=word_lookup)
