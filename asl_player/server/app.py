"""FastAPI application exposing the player's command surface over HTTP.

WHY: The signing page (or any other client) needs to send text, mode and
playback commands and render the current state. Clip rendering happens in
the browser, so the server also needs a way to hear that a clip ended or
failed. FastAPI provides request validation and OpenAPI docs for free.

HOW: One module-level Session drives a RemoteMediaPlayer. Command endpoints
map 1:1 to Session methods and return the queue or a snapshot. The browser
polls GET /media for the clip to show and reports POST /media/{event}
(with that clip_id) when it ends, errors or is refused at start. The
dictionary is loaded once at startup and again on POST /dictionary/load.

RULES:
- Playback commands run on the server event loop (async endpoints)
- Invalid enum values / out-of-range speeds are rejected with 422
- POST /media/{event} with no clip in flight, or for a clip_id other than
  the current one, returns 409
- The session is a singleton created at import; tests may replace it
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from asl_player import __version__
from asl_player.config import API_HOST, API_PORT
from asl_player.core.ir import Queue, item_to_dict
from asl_player.playback.controller import PlaybackSnapshot
from asl_player.playback.media import ENDED, RemoteMediaPlayer
from asl_player.server.models import (
    DictionaryStatusResponse,
    HealthResponse,
    IdleLoopRequest,
    MediaEventName,
    MediaStateResponse,
    ModeRequest,
    PlaybackCommand,
    QueueItemModel,
    QueueResponse,
    SnapshotResponse,
    SpeedRequest,
    TextRequest,
)
from asl_player.session import Session

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and session setup
# ---------------------------------------------------------------------------

session = Session(RemoteMediaPlayer())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the dictionary on startup, stop playback on shutdown."""
    result = await session.boot()
    if not result.ok:
        logger.warning("Starting without a dictionary: %s", result.error)
    yield
    session.stop()


app = FastAPI(
    lifespan=lifespan,
    title="ASL Clip Player API",
    description=(
        "Turn text into a queue of ASL sign clips and drive sequential "
        "playback. Set text and mode, issue playback commands, poll the "
        "snapshot, and report clip completion from the rendering client."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _remote_media() -> RemoteMediaPlayer:
    media = session.controller.media
    if not isinstance(media, RemoteMediaPlayer):
        raise HTTPException(status_code=409, detail="Session is not driven by a remote player")
    return media


def _queue_to_response(queue: Queue) -> QueueResponse:
    return QueueResponse(
        length=len(queue),
        items=[QueueItemModel(**item_to_dict(item)) for item in queue],
    )


def _snapshot_to_response(snap: PlaybackSnapshot) -> SnapshotResponse:
    return SnapshotResponse(
        state=snap.state,
        status=snap.status,
        position=snap.position,
        queue_length=snap.queue_length,
        current_key=snap.current_key,
        current_src=snap.current_src,
        next_key=snap.next_key,
        preview=list(snap.preview),
        rate=snap.rate,
        idle_loop=snap.idle_loop,
        can_play=snap.can_play,
        can_pause=snap.can_pause,
        can_stop=snap.can_stop,
        can_step_prev=snap.can_step_prev,
        can_step_next=snap.can_step_next,
    )


# ---------------------------------------------------------------------------
# Endpoints: Input
# ---------------------------------------------------------------------------


@app.put(
    "/text",
    response_model=QueueResponse,
    tags=["input"],
    summary="Set the text to sign",
    description="Replaces the text and rebuilds the queue. Stops any running playback.",
)
async def set_text(body: TextRequest) -> QueueResponse:
    return _queue_to_response(session.set_text(body.text))


@app.put(
    "/mode",
    response_model=QueueResponse,
    tags=["input"],
    summary="Set the matching mode",
    description="'dictionary' uses phrases and words; 'letters_only' fingerspells everything.",
)
async def set_mode(body: ModeRequest) -> QueueResponse:
    return _queue_to_response(session.set_mode(body.mode))


@app.put(
    "/speed",
    response_model=SnapshotResponse,
    tags=["input"],
    summary="Set the playback rate",
)
async def set_speed(body: SpeedRequest) -> SnapshotResponse:
    session.set_speed(body.rate)
    return _snapshot_to_response(session.snapshot())


@app.put(
    "/idle-loop",
    response_model=SnapshotResponse,
    tags=["input"],
    summary="Enable or disable idle looping",
)
async def set_idle_loop(body: IdleLoopRequest) -> SnapshotResponse:
    session.set_idle_loop(body.enabled)
    return _snapshot_to_response(session.snapshot())


@app.get(
    "/queue",
    response_model=QueueResponse,
    tags=["input"],
    summary="Get the current queue",
)
async def get_queue() -> QueueResponse:
    return _queue_to_response(session.queue)


# ---------------------------------------------------------------------------
# Endpoints: Dictionary
# ---------------------------------------------------------------------------


@app.post(
    "/dictionary/load",
    response_model=DictionaryStatusResponse,
    tags=["dictionary"],
    summary="Reload the dictionary",
    description=(
        "Fetches the dictionary once from the configured source. On failure "
        "the player keeps working with an empty dictionary (fingerspelling only)."
    ),
)
async def load_dictionary() -> DictionaryStatusResponse:
    result = await session.load_dictionary()
    return DictionaryStatusResponse(
        ok=result.ok,
        source=result.source,
        error=result.error,
        phrases=len(session.index.phrase_entries),
        words=len(session.index.word_lookup),
    )


# ---------------------------------------------------------------------------
# Endpoints: Playback
# ---------------------------------------------------------------------------


@app.post(
    "/playback/{command}",
    response_model=SnapshotResponse,
    tags=["playback"],
    summary="Issue a playback command",
    description="play, pause, stop, prev (replay previous item) or next (skip to next item).",
)
async def playback_command(command: PlaybackCommand) -> SnapshotResponse:
    if command is PlaybackCommand.play:
        session.play()
    elif command is PlaybackCommand.pause:
        session.pause()
    elif command is PlaybackCommand.stop:
        session.stop()
    elif command is PlaybackCommand.prev:
        session.step_prev()
    elif command is PlaybackCommand.next:
        session.step_next()
    return _snapshot_to_response(session.snapshot())


@app.get(
    "/snapshot",
    response_model=SnapshotResponse,
    tags=["playback"],
    summary="Get the current player state",
)
async def get_snapshot() -> SnapshotResponse:
    return _snapshot_to_response(session.snapshot())


# ---------------------------------------------------------------------------
# Endpoints: Remote media
# ---------------------------------------------------------------------------


@app.get(
    "/media",
    response_model=MediaStateResponse,
    tags=["media"],
    summary="Get what the rendering client should show",
)
async def get_media() -> MediaStateResponse:
    media = _remote_media()
    return MediaStateResponse(
        command=media.command,
        src=media.src,
        clip_id=media.clip_id,
        playback_rate=media.playback_rate,
    )


@app.post(
    "/media/{event}",
    status_code=204,
    tags=["media"],
    summary="Report that the current clip ended, failed or was refused at start",
    description=(
        "clip_id must be the value from GET /media. Events for an older clip "
        "(one the user already skipped or stepped away from) are rejected with 409. "
        "'rejected' parks the player in idle with 'Click Play to start'."
    ),
    responses={409: {"description": "No clip is waiting, or the event is for a stale clip"}},
)
async def report_media_event(
    event: MediaEventName,
    clip_id: int = Query(description="clip_id of the clip the event refers to."),
) -> Response:
    media = _remote_media()
    if media.listener_count(ENDED) == 0:
        raise HTTPException(status_code=409, detail="No clip is waiting for a media event")
    if not media.report(event.value, clip_id):
        raise HTTPException(
            status_code=409,
            detail=f"Stale media event for clip {clip_id} (current clip {media.clip_id})",
        )
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api() -> None:
    """Entry point for the asl-player-api console script."""
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)
