"""Intermediate representation: dictionary index entries and queue items.

WHY: The matcher and the playback controller are developed and tested
separately. They need a small, well-typed contract between them: what a
dictionary looks like once indexed, and what a playable queue item is.

HOW: Frozen dataclasses form two groups:
  PhraseEntry / DictionaryIndex — the derived, immutable lookup structure
  WordItem / LetterItem / PauseItem — the closed set of queue item variants

QueueItem is the Union of the three item classes. Dispatchers branch on
isinstance so an unhandled variant is visible to a type checker.

RULES:
- WordItem / LetterItem always carry a non-empty src
- PauseItem.duration_ms is never negative
- PauseItem.key is derived ("PAUSE_160ms"), never stored
- DictionaryIndex.phrase_entries is already sorted for greedy matching
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Mapping, Tuple, Union


class MatchMode(str, enum.Enum):
    """How the matcher treats the dictionary.

    RULES:
    - dictionary: phrases, then words, then fingerspelling (default)
    - letters_only: fingerspell every token, ignore the dictionary
    """

    DICTIONARY = "dictionary"
    LETTERS_ONLY = "letters_only"


# ---------------------------------------------------------------------------
# Dictionary index
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PhraseEntry:
    """One indexed phrase: the tokens of its key and the clip that signs it.

    RULES:
    - tokens: normalized key tokens, never empty
    - key: the tokens joined with single spaces
    - file: clip filename relative to WORDS_PATH, never empty
    """

    tokens: Tuple[str, ...]
    key: str
    file: str

    @property
    def token_count(self) -> int:
        return len(self.tokens)


@dataclass(frozen=True)
class DictionaryIndex:
    """Lookup structure built once per dictionary load.

    WHY: Matching runs on every keystroke. Sorting phrases and resolving
    word values once at load time keeps each match linear in the token
    count times the phrase count.

    RULES:
    - phrase_entries: sorted by token_count desc, then key asc
    - word_lookup: token → clip filename
    """

    phrase_entries: Tuple[PhraseEntry, ...] = ()
    word_lookup: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.phrase_entries and not self.word_lookup


EMPTY_INDEX = DictionaryIndex()


# ---------------------------------------------------------------------------
# Queue items
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WordItem:
    """One clip for a matched phrase, a dictionary word, or the SPACE sign."""

    key: str
    src: str
    kind: str = field(default="word", init=False)

    def __post_init__(self) -> None:
        if not self.src:
            raise ValueError(f"WordItem {self.key!r} needs a clip src")


@dataclass(frozen=True)
class LetterItem:
    """One fingerspelled character."""

    key: str
    src: str
    kind: str = field(default="letter", init=False)

    def __post_init__(self) -> None:
        if not self.src:
            raise ValueError(f"LetterItem {self.key!r} needs a clip src")


@dataclass(frozen=True)
class PauseItem:
    """A timed gap with no media."""

    duration_ms: int
    kind: str = field(default="pause", init=False)

    def __post_init__(self) -> None:
        if self.duration_ms < 0:
            raise ValueError(f"Pause duration must be >= 0, got {self.duration_ms}")

    @property
    def key(self) -> str:
        return f"PAUSE_{self.duration_ms}ms"


QueueItem = Union[WordItem, LetterItem, PauseItem]
Queue = Tuple[QueueItem, ...]


def item_to_dict(item: QueueItem) -> dict:
    """Serialize a queue item for JSON output (CLI and HTTP API)."""
    if isinstance(item, PauseItem):
        return {"type": item.kind, "key": item.key, "duration_ms": item.duration_ms}
    return {"type": item.kind, "key": item.key, "src": item.src}
