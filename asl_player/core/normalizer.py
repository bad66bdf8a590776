"""Text normalization and tokenization.

WHY: Users type mixed case, punctuation and emoji. Dictionary keys are
uppercase alphanumeric tokens. Both sides must go through the same
normalization or phrase matching silently fails.

HOW: Uppercase, then replace every run of characters outside [A-Z0-9]
with one space, then trim. Tokens are the space-separated pieces.

RULES:
- Output tokens only ever contain [A-Z0-9]
- normalize() is idempotent
- Empty or blank input → "" / []
"""

from __future__ import annotations

import re
from typing import List, Optional

_NON_ALNUM_RE = re.compile(r"[^A-Z0-9]+")


def normalize(raw: Optional[str]) -> str:
    """Uppercase *raw* and reduce it to single-space-separated [A-Z0-9] runs."""
    return _NON_ALNUM_RE.sub(" ", (raw or "").upper()).strip()


def tokenize(raw: Optional[str]) -> List[str]:
    """Split *raw* into normalized tokens.

    RULES:
    - Returns [] for None, "" and punctuation-only input
    - Never returns empty tokens
    """
    normalized = normalize(raw)
    return normalized.split(" ") if normalized else []
