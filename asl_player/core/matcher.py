"""Greedy phrase/word matching with fingerspelling fallback.

WHY: A sign dictionary covers whole phrases ("GOOD MORNING"), single
words ("HELLO"), and everything else via the alphabet clips. Text
has to be segmented into the fewest, most specific clips, and the result
must be deterministic so the preview matches what plays.

HOW: Scan the tokens left to right. At each position try every multi-token
phrase in index order (longest first, alphabetical tie-break) and take the
first exact match; otherwise try the single-word lookup; otherwise spell
the token letter by letter. Each unit is followed by a short pause item.

RULES:
- Phrase hit → WordItem + 160 ms pause, advance by the phrase length
- Word hit → WordItem + 140 ms pause, advance by 1
- Otherwise fingerspell → LetterItems (+ SPACE clip for spaces) + 120 ms pause
- Characters other than A–Z and space are skipped when fingerspelling
- letters_only mode fingerspells every token and ignores the dictionary
- Single-token phrase entries never match as phrases (words do that job)
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from asl_player.config import (
    CLIP_EXTENSION,
    FINGERSPELL_PAUSE_MS,
    LETTERS_PATH,
    PHRASE_PAUSE_MS,
    WORD_PAUSE_MS,
    WORDS_PATH,
)
from asl_player.core.ir import (
    EMPTY_INDEX,
    DictionaryIndex,
    LetterItem,
    MatchMode,
    PauseItem,
    PhraseEntry,
    Queue,
    QueueItem,
    WordItem,
)
from asl_player.core.normalizer import tokenize

SPACE_KEY = "SPACE"


def fingerspell(token: str, letters_path: str = LETTERS_PATH) -> List[QueueItem]:
    """Spell *token* as one clip per letter, followed by a 120 ms pause.

    RULES:
    - "A".."Z" → LetterItem(ch, letters_path + "<ch>.mp4")
    - " " → WordItem("SPACE", letters_path + "SPACE.mp4")
    - Anything else (digits, stray symbols) is skipped silently
    - The trailing pause is always emitted, even if nothing was spelled
    """
    items: List[QueueItem] = []
    for ch in token:
        if "A" <= ch <= "Z":
            items.append(LetterItem(key=ch, src=f"{letters_path}{ch}{CLIP_EXTENSION}"))
        elif ch == " ":
            items.append(WordItem(key=SPACE_KEY, src=f"{letters_path}{SPACE_KEY}{CLIP_EXTENSION}"))
    items.append(PauseItem(FINGERSPELL_PAUSE_MS))
    return items


def _match_phrase(
    tokens: Sequence[str], i: int, index: DictionaryIndex
) -> Optional[PhraseEntry]:
    remaining = len(tokens) - i
    for entry in index.phrase_entries:
        count = entry.token_count
        if count <= 1 or count > remaining:
            continue
        if tuple(tokens[i:i + count]) == entry.tokens:
            return entry
    return None


def match(
    tokens: Sequence[str],
    index: DictionaryIndex = EMPTY_INDEX,
    mode: MatchMode = MatchMode.DICTIONARY,
    words_path: str = WORDS_PATH,
    letters_path: str = LETTERS_PATH,
) -> Queue:
    """Segment *tokens* into a playable queue.

    Args:
        tokens: Normalized tokens, usually from normalizer.tokenize().
        index: The current dictionary index (EMPTY_INDEX → all fingerspelled).
        mode: MatchMode.DICTIONARY or MatchMode.LETTERS_ONLY.
        words_path: Prefix for word/phrase clip sources.
        letters_path: Prefix for letter clip sources.

    Returns:
        Tuple of queue items; empty only when *tokens* is empty.
    """
    items: List[QueueItem] = []

    if MatchMode(mode) is MatchMode.LETTERS_ONLY:
        for token in tokens:
            items.extend(fingerspell(token, letters_path))
        return tuple(items)

    i = 0
    while i < len(tokens):
        entry = _match_phrase(tokens, i, index)
        if entry is not None:
            items.append(WordItem(key=entry.key, src=words_path + entry.file))
            items.append(PauseItem(PHRASE_PAUSE_MS))
            i += entry.token_count
            continue

        token = tokens[i]
        file = index.word_lookup.get(token)
        if file:
            items.append(WordItem(key=token, src=words_path + file))
            items.append(PauseItem(WORD_PAUSE_MS))
            i += 1
            continue

        items.extend(fingerspell(token, letters_path))
        i += 1

    return tuple(items)


def match_text(
    text: Optional[str],
    index: DictionaryIndex = EMPTY_INDEX,
    mode: MatchMode = MatchMode.DICTIONARY,
    words_path: str = WORDS_PATH,
    letters_path: str = LETTERS_PATH,
) -> Queue:
    """Tokenize *text* and match it in one call."""
    return match(tokenize(text), index, mode, words_path=words_path, letters_path=letters_path)
