"""Dictionary artifact dataclasses and the JSON schema that guards them.

WHY: The dictionary is hand-maintained JSON. The loader needs to reject
artifacts that are not even the right shape (a list, a string, words as a
list) before indexing, while leaving per-entry validation to the index
builder, which drops bad entries one by one instead of failing the load.

HOW: DICTIONARY_SCHEMA checks only the top-level shape. AslDictionary
mirrors the artifact with typed fields and a from_dict() factory.
LoadResult reports what the loader ended up with.

RULES:
- phrases: a list (entries are validated later, individually)
- words: an object; values ("FILE.mp4" or {"file": "FILE.mp4"}) are
  checked by the index builder, which drops bad ones
- Both sections are optional; a missing section is an empty one
- Unknown top-level fields are allowed and ignored
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DICTIONARY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "phrases": {"type": "array"},
        "words": {"type": "object"},
    },
}


@dataclass
class AslDictionary:
    """The dictionary artifact: phrase entries plus a word table.

    RULES:
    - phrases: [{"key": "GOOD MORNING", "file": "GOOD_MORNING.mp4", "weight": 1}, ...]
    - words: {"HELLO": "HELLO.mp4", "THANKS": {"file": "THANK_YOU.mp4"}}
    - weight is kept as data but never consulted by the matcher
    """

    phrases: List[Dict[str, Any]] = field(default_factory=list)
    words: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> AslDictionary:
        """Build an AslDictionary from parsed JSON that passed the schema."""
        return cls(
            phrases=list(data.get("phrases") or []),
            words=dict(data.get("words") or {}),
        )

    @classmethod
    def empty(cls) -> AslDictionary:
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {"phrases": list(self.phrases), "words": dict(self.words)}


@dataclass
class LoadResult:
    """Outcome of one dictionary load attempt.

    RULES:
    - ok=False always comes with an empty dictionary and an error message
    - source is the path or URL that was tried
    """

    dictionary: AslDictionary
    ok: bool
    source: str
    error: Optional[str] = None
