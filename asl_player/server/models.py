"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Each command has a small request model; responses are either the
queue, a playback snapshot, the remote media state, or a dictionary load
report. Enums represent closed sets (playback commands, media events).

RULES:
- All models use Field(description=...) for OpenAPI documentation
- MatchMode and PlayerState are imported from the core (single source of truth)
- Response models never expose controller internals (tokens, futures)
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from asl_player.core.ir import MatchMode
from asl_player.playback.controller import PlayerState


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class PlaybackCommand(str, Enum):
    """Playback commands accepted by POST /playback/{command}."""

    play = "play"
    pause = "pause"
    stop = "stop"
    prev = "prev"
    next = "next"


class MediaEventName(str, Enum):
    """Clip events a browser reports via POST /media/{event}.

    RULES:
    - rejected means the clip never started (e.g. autoplay blocked)
    """

    ended = "ended"
    error = "error"
    rejected = "rejected"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class TextRequest(BaseModel):
    text: str = Field(default="", description="Free-form text to sign.")


class ModeRequest(BaseModel):
    mode: MatchMode = Field(description="'dictionary' or 'letters_only'.")


class SpeedRequest(BaseModel):
    rate: float = Field(gt=0, le=4, description="Playback rate (1.0 = normal speed).")


class IdleLoopRequest(BaseModel):
    enabled: bool = Field(description="Restart the queue automatically after it finishes.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class QueueItemModel(BaseModel):
    """One queue item. src is set for word/letter, duration_ms for pause."""

    type: str = Field(description="'word', 'letter' or 'pause'.")
    key: str = Field(description="Display key, e.g. 'GOOD MORNING', 'H', 'PAUSE_120ms'.")
    src: Optional[str] = Field(default=None, description="Clip path for word/letter items.")
    duration_ms: Optional[int] = Field(default=None, description="Hold time for pause items.")


class QueueResponse(BaseModel):
    length: int = Field(description="Number of items in the queue.")
    items: List[QueueItemModel] = Field(description="Queue items in playback order.")


class SnapshotResponse(BaseModel):
    """Everything a UI needs to render the player."""

    state: PlayerState = Field(description="State machine state.")
    status: str = Field(description="Human-readable status line.")
    position: int = Field(description="Index of the item in flight (-1 = before start).")
    queue_length: int = Field(description="Number of items in the queue.")
    current_key: Optional[str] = Field(default=None, description="Key of the item in flight.")
    current_src: Optional[str] = Field(default=None, description="Clip path of the item in flight.")
    next_key: Optional[str] = Field(default=None, description="Key of the next item.")
    preview: List[str] = Field(description="Upcoming item keys, pauses shown as [PAUSE].")
    rate: float = Field(description="Current playback rate.")
    idle_loop: bool = Field(description="Whether idle looping is enabled.")
    can_play: bool
    can_pause: bool
    can_stop: bool
    can_step_prev: bool
    can_step_next: bool


class MediaStateResponse(BaseModel):
    """What the browser's <video> element should be doing right now."""

    command: str = Field(description="'play', 'pause' or 'stop'.")
    src: Optional[str] = Field(default=None, description="Clip to show.")
    clip_id: int = Field(description="Increments on every clip start.")
    playback_rate: float = Field(description="Rate to apply to the video element.")


class DictionaryStatusResponse(BaseModel):
    ok: bool = Field(description="False when the dictionary could not be loaded.")
    source: str = Field(description="Path or URL that was loaded.")
    error: Optional[str] = Field(default=None, description="Failure reason, if any.")
    phrases: int = Field(description="Indexed phrase entries.")
    words: int = Field(description="Indexed word entries.")


class HealthResponse(BaseModel):
    status: str = Field(description="Always 'ok' when the server is up.")
    version: str = Field(description="Package version.")
