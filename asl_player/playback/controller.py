"""Sequential playback state machine over a queue of clips and pauses.

WHY: Playing a sign sequence is more than "play each clip": users pause,
stop, step back and forth, loop idle playback, and some clips fail to load
or are blocked from starting. The controller keeps exactly one playback
sequence alive and turns every failure into a state transition plus a
status string, so the UI never sees an exception.

HOW: play() starts one asyncio task (the play loop). Every loop run owns a
_PlayRun cancellation token. Commands that interrupt playback (pause, stop,
steps, queue rebuilds) cancel the token; the token also wakes whatever the
loop is waiting on (a clip, a pause hold, the idle-loop delay) so the
cancelled loop returns at the next item boundary without advancing.

States:
  IDLE      — nothing running (initial, or after a rejected clip start)
  PLAYING   — the play loop is advancing
  PAUSED    — interrupted by pause(); position kept
  STOPPED   — interrupted by stop(); position reset to -1
  FINISHED  — queue exhausted (idle loop may restart it)

RULES:
- play() while PLAYING is a no-op; an empty queue reports "Nothing to play"
- The loop pre-increments: position is the index of the item in flight
- "ended" or "error" both complete a clip; failed clips are never retried
- ClipStartRejectedError (or a "rejected" event) halts the loop in IDLE
  ("Click Play to start") and rewinds position so the next play() retries
  the same clip
- stop() is idempotent: STOPPED, position -1, queue untouched
- step_prev() replays the previous item; step_next() skips to the next
- Idle loop: after a normal finish, wait IDLE_LOOP_DELAY_MS, rewind, replay;
  the flag is read only at the exhaustion check
- Commands must be called from inside the running event loop
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from asl_player.config import DEFAULT_SPEED, IDLE_LOOP_DELAY_MS, PREVIEW_WINDOW
from asl_player.core.ir import PauseItem, Queue, QueueItem
from asl_player.playback.media import ENDED, ERROR, REJECTED, ClipStartRejectedError, MediaPlayer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Status strings shown to users
# ---------------------------------------------------------------------------

STATUS_IDLE = "Idle"
STATUS_LOADING = "Loading…"
STATUS_PLAYING = "Playing"
STATUS_PAUSED = "Paused"
STATUS_STOPPED = "Stopped"
STATUS_FINISHED = "Finished"
STATUS_NOTHING_TO_PLAY = "Nothing to play"
STATUS_NEEDS_START = "Click Play to start"
STATUS_DICTIONARY_MISSING = "Dictionary missing"

_PLAYBACK_STATUSES = frozenset({
    STATUS_LOADING,
    STATUS_PLAYING,
    STATUS_PAUSED,
    STATUS_STOPPED,
    STATUS_FINISHED,
    STATUS_NOTHING_TO_PLAY,
    STATUS_NEEDS_START,
})

PAUSE_PREVIEW_LABEL = "[PAUSE]"


class PlayerState(str, enum.Enum):
    """States of the playback state machine (values serialize to JSON)."""

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"
    FINISHED = "finished"


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Immutable view of the controller handed to observers.

    RULES:
    - current_* is None before the first item and after stop()
    - current_src is None while a pause item is in flight
    - preview holds up to PREVIEW_WINDOW upcoming keys, pauses as "[PAUSE]"
    - can_* flags mirror which commands would currently do something
    """

    state: PlayerState
    status: str
    position: int
    queue_length: int
    current_key: Optional[str]
    current_src: Optional[str]
    next_key: Optional[str]
    preview: Tuple[str, ...]
    rate: float
    idle_loop: bool
    can_play: bool
    can_pause: bool
    can_stop: bool
    can_step_prev: bool
    can_step_next: bool


def _resolve(future: asyncio.Future, value: Any) -> None:
    if not future.done():
        future.set_result(value)


class _PlayRun:
    """Cancellation token for one play loop run."""

    def __init__(self) -> None:
        self.cancelled = False
        self._pending: Optional[asyncio.Future] = None

    def cancel(self) -> None:
        self.cancelled = True
        if self._pending is not None:
            _resolve(self._pending, None)

    async def wait(self, future: asyncio.Future) -> Any:
        """Await *future*; returns None early if the run is cancelled."""
        if self.cancelled:
            return None
        self._pending = future
        try:
            return await future
        finally:
            self._pending = None

    async def sleep(self, seconds: float) -> None:
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        handle = loop.call_later(seconds, _resolve, future, True)
        try:
            await self.wait(future)
        finally:
            handle.cancel()


class _Outcome(enum.Enum):
    EXHAUSTED = "exhausted"
    CANCELLED = "cancelled"
    REJECTED = "rejected"


class PlaybackController:
    """Walks a queue of clips and pauses against a MediaPlayer.

    WHY: One object owns queue, position and flags; every mutation goes
    through its command methods, so several independent controllers can
    coexist (tests, multiple sessions).

    HOW: See module docstring. Observers subscribe with a callable that
    receives a PlaybackSnapshot after every state, status or position change.

    RULES:
    - rate defaults to DEFAULT_SPEED and is applied before every clip
    - idle_loop_delay_ms defaults to IDLE_LOOP_DELAY_MS
    - Observer exceptions are logged and never reach the play loop
    """

    def __init__(
        self,
        media: MediaPlayer,
        queue: Sequence[QueueItem] = (),
        rate: float = DEFAULT_SPEED,
        idle_loop: bool = False,
        idle_loop_delay_ms: int = IDLE_LOOP_DELAY_MS,
        preview_window: int = PREVIEW_WINDOW,
    ) -> None:
        self._media = media
        self._queue: Queue = tuple(queue)
        self._position = -1
        self._state = PlayerState.IDLE
        self._status = STATUS_IDLE
        self._stop_requested = False
        self._idle_loop = idle_loop
        self._idle_loop_delay_ms = idle_loop_delay_ms
        self._rate = rate
        self._preview_window = preview_window
        self._run: Optional[_PlayRun] = None
        self._task: Optional[asyncio.Task] = None
        self._observers: List[Callable[[PlaybackSnapshot], None]] = []

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def media(self) -> MediaPlayer:
        return self._media

    @property
    def queue(self) -> Queue:
        return self._queue

    @property
    def position(self) -> int:
        return self._position

    @property
    def state(self) -> PlayerState:
        return self._state

    @property
    def status(self) -> str:
        return self._status

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def idle_loop(self) -> bool:
        return self._idle_loop

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def is_running(self) -> bool:
        """True while a play loop task exists and has not finished."""
        return self._task is not None and not self._task.done()

    def snapshot(self) -> PlaybackSnapshot:
        queue = self._queue
        pos = self._position
        current = queue[pos] if 0 <= pos < len(queue) else None
        upcoming = queue[pos + 1] if pos + 1 < len(queue) else None
        start = max(0, pos + 1)
        preview = tuple(
            PAUSE_PREVIEW_LABEL if isinstance(item, PauseItem) else item.key
            for item in queue[start:start + self._preview_window]
        )
        playing = self._state is PlayerState.PLAYING
        return PlaybackSnapshot(
            state=self._state,
            status=self._status,
            position=pos,
            queue_length=len(queue),
            current_key=current.key if current is not None else None,
            current_src=None if current is None or isinstance(current, PauseItem) else current.src,
            next_key=upcoming.key if upcoming is not None else None,
            preview=preview,
            rate=self._rate,
            idle_loop=self._idle_loop,
            can_play=not playing,
            can_pause=playing,
            can_stop=playing or pos >= 0,
            can_step_prev=pos > 0,
            can_step_next=pos + 1 < len(queue),
        )

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Callable[[PlaybackSnapshot], None]) -> Callable[[], None]:
        """Register *observer*; returns a callable that unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def _notify(self) -> None:
        if not self._observers:
            return
        snap = self.snapshot()
        for observer in list(self._observers):
            try:
                observer(snap)
            except Exception:
                logger.exception("Snapshot observer %r failed", observer)

    def _transition(self, state: Optional[PlayerState] = None, status: Optional[str] = None) -> None:
        if state is not None:
            self._state = state
        if status is not None:
            self._status = status
        self._notify()

    def set_status(self, status: str) -> None:
        """Show a status string without changing state (used by the session)."""
        self._transition(status=status)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_rate(self, rate: float) -> None:
        """Change the playback rate; applies to the clip in flight too."""
        self._rate = rate
        self._safe_media_call(self._media.set_playback_rate, rate)
        self._notify()

    def set_idle_loop(self, enabled: bool) -> None:
        self._idle_loop = bool(enabled)
        self._notify()

    def set_queue(self, items: Sequence[QueueItem]) -> None:
        """Install a freshly matched queue.

        RULES:
        - An active loop (or a paused one) is stopped first, exactly like stop()
        - position resets to -1
        - A non-stopped controller returns to IDLE
        - Playback statuses reset to "Idle"; others ("Dictionary missing")
          stay visible across rebuilds
        """
        if self._run is not None or self._state in (PlayerState.PLAYING, PlayerState.PAUSED):
            self.stop()
        self._queue = tuple(items)
        self._position = -1
        if self._state is PlayerState.STOPPED:
            self._notify()
        elif self._status in _PLAYBACK_STATUSES:
            self._transition(PlayerState.IDLE, STATUS_IDLE)
        else:
            self._transition(PlayerState.IDLE)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def play(self) -> Optional[asyncio.Task]:
        """Start (or resume) the play loop.

        Returns:
            The play loop task, or None when there is nothing to play.
        """
        if self._state is PlayerState.PLAYING:
            return self._task
        if not self._queue:
            self._transition(status=STATUS_NOTHING_TO_PLAY)
            return None

        # A finished loop may still be waiting out the idle-loop delay.
        self._cancel_run()
        self._stop_requested = False
        run = _PlayRun()
        self._run = run
        self._transition(PlayerState.PLAYING, STATUS_PLAYING)

        task = asyncio.get_running_loop().create_task(self._play_loop(run))
        task.add_done_callback(self._on_task_done)
        self._task = task
        return task

    def pause(self) -> None:
        if self._state is not PlayerState.PLAYING:
            return
        self._cancel_run()
        self._safe_media_call(self._media.pause)
        self._transition(PlayerState.PAUSED, STATUS_PAUSED)

    def stop(self) -> None:
        self._stop_requested = True
        self._cancel_run()
        self._safe_media_call(self._media.stop)
        self._position = -1
        self._transition(PlayerState.STOPPED, STATUS_STOPPED)

    def step_prev(self) -> Optional[asyncio.Task]:
        """Replay the item before the current one."""
        if self._position <= 0:
            return None
        self.pause()
        # The loop pre-increments, so rewind two slots to land on position - 1.
        self._position = max(-1, self._position - 2)
        return self.play()

    def step_next(self) -> Optional[asyncio.Task]:
        """Abandon the current item and continue with the next one."""
        if self._position + 1 >= len(self._queue):
            return None
        self.pause()
        return self.play()

    async def wait(self) -> None:
        """Wait until no play loop is running (finished, paused, stopped...).

        Follows hand-offs: if a step command replaced the task while we
        waited, the new task is awaited too. Never raises.
        """
        while True:
            task = self._task
            if task is None:
                return
            await asyncio.wait({task})
            if self._task is task:
                return

    # ------------------------------------------------------------------
    # Play loop
    # ------------------------------------------------------------------

    async def _play_loop(self, run: _PlayRun) -> None:
        while True:
            outcome = await self._advance(run)
            if outcome is not _Outcome.EXHAUSTED or run.cancelled:
                return

            self._transition(PlayerState.FINISHED, STATUS_FINISHED)
            if not (self._idle_loop and self._queue):
                self._run = None
                return

            await run.sleep(self._idle_loop_delay_ms / 1000.0)
            if run.cancelled:
                return
            logger.debug("Idle loop restarting queue of %d items", len(self._queue))
            self._position = -1
            self._transition(PlayerState.PLAYING, STATUS_PLAYING)

    async def _advance(self, run: _PlayRun) -> _Outcome:
        while not run.cancelled:
            index = self._position + 1
            if index >= len(self._queue):
                return _Outcome.EXHAUSTED

            self._position = index
            self._notify()
            started = await self._dispatch(run, self._queue[index])
            if run.cancelled:
                break
            if not started:
                self._position = index - 1
                self._run = None
                self._transition(PlayerState.IDLE, STATUS_NEEDS_START)
                return _Outcome.REJECTED
        return _Outcome.CANCELLED

    async def _dispatch(self, run: _PlayRun, item: QueueItem) -> bool:
        """Play one item to completion. Returns False if the clip refused to start."""
        if isinstance(item, PauseItem):
            await run.sleep(item.duration_ms / 1000.0)
            return True

        media = self._media
        loop = asyncio.get_running_loop()
        done = loop.create_future()

        def _on_ended() -> None:
            _resolve(done, ENDED)

        def _on_error() -> None:
            _resolve(done, ERROR)

        def _on_rejected() -> None:
            _resolve(done, REJECTED)

        media.set_playback_rate(self._rate)
        self._transition(status=STATUS_LOADING)
        media.set_source(item.src)
        media.add_listener(ENDED, _on_ended)
        media.add_listener(ERROR, _on_error)
        media.add_listener(REJECTED, _on_rejected)
        try:
            try:
                await media.play()
            except ClipStartRejectedError as exc:
                logger.warning("Clip start rejected for %s: %s", item.src, exc)
                return False
            except Exception:
                logger.exception("Media player failed to start %s", item.src)
                return False

            if run.cancelled:
                return True
            self._transition(status=STATUS_PLAYING)
            outcome = await run.wait(done)
            if outcome == REJECTED:
                logger.warning("Clip start rejected by the player: %s", item.src)
                return False
            if outcome == ERROR:
                logger.warning("Clip failed to play, skipping: %s", item.src)
            return True
        finally:
            media.remove_listener(ENDED, _on_ended)
            media.remove_listener(ERROR, _on_error)
            media.remove_listener(REJECTED, _on_rejected)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _cancel_run(self) -> None:
        if self._run is not None:
            self._run.cancel()
            self._run = None

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Play loop crashed", exc_info=exc)
            if self._task is task:
                self._run = None
                self._transition(PlayerState.IDLE, STATUS_IDLE)

    @staticmethod
    def _safe_media_call(method: Callable[..., Any], *args: Any) -> None:
        try:
            method(*args)
        except Exception:
            logger.exception("Media call %s failed", getattr(method, "__name__", method))
