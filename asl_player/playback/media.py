"""Media capability seam — what the controller needs from a video player.

WHY: Decoding and displaying clips happens outside this package (a browser
<video> element, a desktop widget, or nothing at all in headless runs).
The controller only needs to set a source, ask it to play, pause or stop,
set the rate, and hear back when a clip ended or failed.

HOW: MediaPlayer is an ABC with a tiny listener registry for the two
completion events. Concrete players call _emit("ended") or _emit("error").
Two implementations ship here:
  SimulatedMediaPlayer — headless, every clip "plays" for a fixed time
  RemoteMediaPlayer    — a remote client renders clips and reports events

RULES:
- play() either returns (clip started) or raises ClipStartRejectedError
- A player that learns about a refused start later (a remote client)
  emits "rejected" instead; the controller treats both the same way
- "ended", "error" and "rejected" listeners take no arguments
- Listeners are removed by the controller right after each clip
- pause() / stop() never raise for a player that has nothing loaded
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Dict, List, Optional

from asl_player.config import SIMULATED_CLIP_S

logger = logging.getLogger(__name__)

ENDED = "ended"
ERROR = "error"
REJECTED = "rejected"
MEDIA_EVENTS = (ENDED, ERROR, REJECTED)


class ClipStartRejectedError(Exception):
    """Raised by MediaPlayer.play() when playback refuses to start.

    WHY: A browser blocks autoplay until the user interacts with the page.
    That is not a broken clip: the same clip should be retried once the
    user presses Play, so it must be distinguishable from an "error" event.

    RULES:
    - Raised from play(); remote players report the same condition as the
      "rejected" event because their start is confirmed asynchronously
    """


class MediaPlayer(ABC):
    """Abstract media capability driven by the PlaybackController."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Callable[[], None]]] = {
            event: [] for event in MEDIA_EVENTS
        }
        self.src: Optional[str] = None
        self.playback_rate = 1.0

    def add_listener(self, event: str, callback: Callable[[], None]) -> None:
        self._listeners[event].append(callback)

    def remove_listener(self, event: str, callback: Callable[[], None]) -> None:
        try:
            self._listeners[event].remove(callback)
        except ValueError:
            pass

    def listener_count(self, event: str) -> int:
        return len(self._listeners[event])

    def _emit(self, event: str) -> None:
        for callback in list(self._listeners[event]):
            callback()

    def set_source(self, src: str) -> None:
        self.src = src

    def set_playback_rate(self, rate: float) -> None:
        self.playback_rate = rate

    @abstractmethod
    async def play(self) -> None:
        """Start the current source; raise ClipStartRejectedError if refused."""

    @abstractmethod
    def pause(self) -> None:
        """Pause the current clip, keeping its source."""

    @abstractmethod
    def stop(self) -> None:
        """Stop and release the current source."""


class SimulatedMediaPlayer(MediaPlayer):
    """Headless player: each clip ends after clip_seconds / playback_rate.

    WHY: The CLI can preview pacing without a display, and integration
    tests can run whole queues against real event-loop timers.

    RULES:
    - Every started clip is appended to ``played``
    - pause() and stop() cancel the pending "ended" timer
    - on_clip, when given, is called with each src as it starts
    """

    def __init__(
        self,
        clip_seconds: float = SIMULATED_CLIP_S,
        on_clip: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__()
        self.clip_seconds = clip_seconds
        self.played: List[str] = []
        self._on_clip = on_clip
        self._timer: Optional[asyncio.TimerHandle] = None

    async def play(self) -> None:
        if not self.src:
            raise ClipStartRejectedError("No source loaded")
        self._cancel_timer()
        self.played.append(self.src)
        if self._on_clip:
            self._on_clip(self.src)
        delay = self.clip_seconds / (self.playback_rate or 1.0)
        self._timer = asyncio.get_running_loop().call_later(delay, self._finish)

    def _finish(self) -> None:
        self._timer = None
        self._emit(ENDED)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def pause(self) -> None:
        self._cancel_timer()

    def stop(self) -> None:
        self._cancel_timer()
        self.src = None


class RemoteMediaPlayer(MediaPlayer):
    """Player whose rendering happens in a remote client (e.g. a browser).

    WHY: The HTTP API serves a page that owns the real <video> element. The
    server-side controller still sequences the queue; the page polls the
    snapshot for the current src and reports clip completion back.

    HOW: Commands only record state (``command``, ``src``, ``clip_id``).
    report() turns an incoming "ended"/"error"/"rejected" into the matching
    event, provided it names the clip that is currently loaded.

    RULES:
    - clip_id increases on every play() so clients can spot a new clip
      even when the same src repeats
    - report() for any clip_id other than the current one is ignored and
      returns False (a late "ended" must not finish the clip after a step)
    - report() with an unknown event raises ValueError
    """

    def __init__(self) -> None:
        super().__init__()
        self.command = "stop"
        self.clip_id = 0

    async def play(self) -> None:
        if not self.src:
            raise ClipStartRejectedError("No source loaded")
        self.clip_id += 1
        self.command = "play"

    def pause(self) -> None:
        self.command = "pause"

    def stop(self) -> None:
        self.command = "stop"
        self.src = None

    def report(self, event: str, clip_id: int) -> bool:
        """Deliver *event* for *clip_id*. Returns False if the clip is stale."""
        if event not in MEDIA_EVENTS:
            raise ValueError(f"Unknown media event: {event!r}")
        if clip_id != self.clip_id:
            logger.debug(
                "Ignoring %s for stale clip %d (current clip %d)", event, clip_id, self.clip_id
            )
            return False
        logger.debug("Remote media reported %s for clip %d", event, clip_id)
        self._emit(event)
        return True
