"""Playback package — media capability seam and the playback state machine.

WHY: Playback is the only stateful, asynchronous part of the player. It is
kept apart from the pure matching core so each side can be tested alone.

HOW: media.py defines what a video player must offer (MediaPlayer) plus a
headless and a remote implementation. controller.py sequences a queue
against one MediaPlayer with a single cooperative asyncio task.

RULES:
- The controller is the only owner of queue, position and play flags
- Media failures become state transitions, never exceptions to callers
"""

from asl_player.playback.controller import PlaybackController, PlaybackSnapshot, PlayerState
from asl_player.playback.media import (
    ClipStartRejectedError,
    MediaPlayer,
    RemoteMediaPlayer,
    SimulatedMediaPlayer,
)

__all__ = [
    "ClipStartRejectedError",
    "MediaPlayer",
    "PlaybackController",
    "PlaybackSnapshot",
    "PlayerState",
    "RemoteMediaPlayer",
    "SimulatedMediaPlayer",
]
