"""Session — the command surface a UI drives.

WHY: A UI (terminal, web page, desktop window) only sends commands and
renders snapshots. Something has to own the current text, match mode and
dictionary, rebuild the queue whenever one of them changes, and forward
playback commands to the controller. That is the Session.

HOW: Session holds one DictionaryLoader, one DictionaryIndex and one
PlaybackController. Text or mode changes re-run the matcher and install
the new queue with PlaybackController.set_queue(), which stops any running
loop first. load_dictionary() swaps the index and rebuilds.

RULES:
- Every text or mode change rebuilds the queue wholesale (no diffing)
- A failed dictionary load leaves an empty index and status "Dictionary missing"
- play() on an empty queue rebuilds from the current text first
- Speed input goes through config.parse_speed (never zero or negative)
- Commands that touch playback must run inside the event loop
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Optional, Union

from asl_player.api.client import DictionaryLoader
from asl_player.api.models import AslDictionary, LoadResult
from asl_player.config import IDLE_LOOP, LETTERS_PATH, SPEED, WORDS_PATH, parse_speed
from asl_player.core.index import build_index
from asl_player.core.ir import EMPTY_INDEX, DictionaryIndex, MatchMode, Queue
from asl_player.core.matcher import match
from asl_player.core.normalizer import tokenize
from asl_player.playback.controller import (
    STATUS_DICTIONARY_MISSING,
    STATUS_IDLE,
    PlaybackController,
    PlaybackSnapshot,
)
from asl_player.playback.media import MediaPlayer

logger = logging.getLogger(__name__)


class Session:
    """One user's text, mode, dictionary and playback.

    RULES:
    - loader defaults to DictionaryLoader() (config DICTIONARY_SOURCE)
    - The dictionary starts empty; call load_dictionary() or boot()
    - controller is public for adapters that need the raw state machine
    """

    def __init__(
        self,
        media: MediaPlayer,
        loader: Optional[DictionaryLoader] = None,
        mode: Union[MatchMode, str] = MatchMode.DICTIONARY,
        rate: float = SPEED,
        idle_loop: bool = IDLE_LOOP,
        words_path: str = WORDS_PATH,
        letters_path: str = LETTERS_PATH,
    ) -> None:
        self.controller = PlaybackController(media, rate=parse_speed(rate), idle_loop=idle_loop)
        self.loader = loader or DictionaryLoader()
        self.words_path = words_path
        self.letters_path = letters_path
        self._mode = MatchMode(mode)
        self._text = ""
        self._dictionary = AslDictionary.empty()
        self._index: DictionaryIndex = EMPTY_INDEX
        self.dictionary_loaded = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def mode(self) -> MatchMode:
        return self._mode

    @property
    def dictionary(self) -> AslDictionary:
        return self._dictionary

    @property
    def index(self) -> DictionaryIndex:
        return self._index

    @property
    def queue(self) -> Queue:
        return self.controller.queue

    def snapshot(self) -> PlaybackSnapshot:
        return self.controller.snapshot()

    def subscribe(self, observer: Callable[[PlaybackSnapshot], None]) -> Callable[[], None]:
        return self.controller.subscribe(observer)

    # ------------------------------------------------------------------
    # Input commands
    # ------------------------------------------------------------------

    def set_text(self, text: Optional[str]) -> Queue:
        self._text = text or ""
        return self.rebuild()

    def set_mode(self, mode: Union[MatchMode, str]) -> Queue:
        """Switch between dictionary and letters-only matching.

        Raises:
            ValueError: if *mode* is not a MatchMode value.
        """
        self._mode = MatchMode(mode)
        return self.rebuild()

    def set_speed(self, rate: object) -> float:
        parsed = parse_speed(rate)
        self.controller.set_rate(parsed)
        return parsed

    def set_idle_loop(self, enabled: bool) -> None:
        self.controller.set_idle_loop(enabled)

    def set_dictionary(self, dictionary: Optional[AslDictionary]) -> None:
        """Install a dictionary directly (tests, embedded callers) and rebuild."""
        self._dictionary = dictionary or AslDictionary.empty()
        self._index = build_index(self._dictionary)
        self.rebuild()

    async def load_dictionary(self) -> LoadResult:
        """Fetch the dictionary once and rebuild the queue against it."""
        result = await self.loader.load(on_status=self.controller.set_status)
        self.dictionary_loaded = result.ok
        self.set_dictionary(result.dictionary)
        if not result.ok:
            self.controller.set_status(STATUS_DICTIONARY_MISSING)
        return result

    async def boot(self, text: Optional[str] = None) -> LoadResult:
        """Startup sequence: load the dictionary, build the queue, go idle."""
        if text is not None:
            self._text = text
        result = await self.load_dictionary()
        if result.ok:
            self.controller.set_status(STATUS_IDLE)
        return result

    def rebuild(self) -> Queue:
        queue = match(
            tokenize(self._text),
            self._index,
            self._mode,
            words_path=self.words_path,
            letters_path=self.letters_path,
        )
        logger.debug("Rebuilt queue: %d items for %d chars", len(queue), len(self._text))
        self.controller.set_queue(queue)
        return queue

    # ------------------------------------------------------------------
    # Playback commands
    # ------------------------------------------------------------------

    def play(self):
        if not self.controller.queue:
            self.rebuild()
        return self.controller.play()

    def pause(self) -> None:
        self.controller.pause()

    def stop(self) -> None:
        self.controller.stop()

    def step_prev(self):
        return self.controller.step_prev()

    def step_next(self):
        return self.controller.step_next()

    async def wait(self) -> None:
        await self.controller.wait()
