"""Shared test fixtures for the asl_player test suite.

WHY: The matcher, controller, session, CLI and API tests all need the
same small dictionaries and a media player whose behaviour a test can
script (end immediately, fail, refuse to start, or wait for the test).

HOW: SAMPLE_DICTIONARY is a compact artifact with phrases of different
lengths, a tie on length, both word value shapes, and broken entries.
FakeMediaPlayer implements the MediaPlayer ABC without timers: clips end
on the next loop iteration (auto_end) or when the test calls finish().

RULES:
- Every test builds its own controller/session (no shared mutable state)
- Async scenarios run with asyncio.run() inside plain pytest tests
- settle() yields to the loop enough times for one dispatch step
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Iterable, List, Tuple

import pytest

from asl_player.config import LETTERS_PATH, WORDS_PATH
from asl_player.core.ir import LetterItem, PauseItem, WordItem
from asl_player.playback.media import ENDED, ERROR, ClipStartRejectedError, MediaPlayer


# ---------------------------------------------------------------------------
# Sample dictionary
# ---------------------------------------------------------------------------

SAMPLE_DICTIONARY: Dict[str, Any] = {
    "phrases": [
        {"key": "GOOD MORNING", "file": "GM.mp4"},
        {"key": "THANK YOU", "file": "THANK_YOU.mp4"},
        {"key": "THANK YOU VERY MUCH", "file": "THANKS_A_LOT.mp4", "weight": 5},
        {"key": "SEE YOU", "file": "SEE_YOU_B.mp4"},
        {"key": "SEE YOU", "file": "SEE_YOU_A.mp4"},
        {"key": "   ", "file": "BLANK.mp4"},
        {"key": "NO FILE"},
        {"key": "HELLO", "file": "HELLO_PHRASE.mp4"},
    ],
    "words": {
        "HI": "HI.mp4",
        "GOOD": {"file": "GOOD.mp4"},
        "SORRY": {},
        "THANK": "THANK.mp4",
        "BROKEN": 42,
        "EMPTY": "",
    },
}


def letter(ch: str) -> LetterItem:
    return LetterItem(key=ch, src=f"{LETTERS_PATH}{ch}.mp4")


def word(key: str, file: str) -> WordItem:
    return WordItem(key=key, src=f"{WORDS_PATH}{file}")


def pause(ms: int) -> PauseItem:
    return PauseItem(ms)


@pytest.fixture
def sample_dictionary() -> Dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_DICTIONARY))


@pytest.fixture
def dictionary_file(tmp_path, sample_dictionary):
    path = tmp_path / "asl_dictionary.json"
    path.write_text(json.dumps(sample_dictionary), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Scriptable media player
# ---------------------------------------------------------------------------


class FakeMediaPlayer(MediaPlayer):
    """MediaPlayer double driven entirely by the test.

    RULES:
    - auto_end=True: "ended" (or "error" for srcs in ``failing``) fires on
      the next loop iteration after play()
    - srcs in ``rejecting`` make play() raise ClipStartRejectedError
    - calls records every (method, src) pair in order
    """

    def __init__(
        self,
        auto_end: bool = True,
        failing: Iterable[str] = (),
        rejecting: Iterable[str] = (),
    ) -> None:
        super().__init__()
        self.auto_end = auto_end
        self.failing = set(failing)
        self.rejecting = set(rejecting)
        self.played: List[str] = []
        self.calls: List[Tuple[str, Any]] = []

    async def play(self) -> None:
        self.calls.append(("play", self.src))
        if self.src in self.rejecting:
            raise ClipStartRejectedError("blocked by autoplay policy")
        self.played.append(self.src)
        if self.auto_end:
            event = ERROR if self.src in self.failing else ENDED
            asyncio.get_running_loop().call_soon(self._emit, event)

    def pause(self) -> None:
        self.calls.append(("pause", self.src))

    def stop(self) -> None:
        self.calls.append(("stop", self.src))
        self.src = None

    def set_playback_rate(self, rate: float) -> None:
        super().set_playback_rate(rate)
        self.calls.append(("rate", rate))

    def finish(self, event: str = ENDED) -> None:
        self._emit(event)


async def settle(times: int = 10) -> None:
    """Yield to the event loop so scheduled play-loop steps can run."""
    for _ in range(times):
        await asyncio.sleep(0)


@pytest.fixture
def media() -> FakeMediaPlayer:
    return FakeMediaPlayer()


@pytest.fixture
def manual_media() -> FakeMediaPlayer:
    return FakeMediaPlayer(auto_end=False)
