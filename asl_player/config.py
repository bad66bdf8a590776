"""Configuration constants, asset path conventions, and .env loading.

WHY: Centralizes the dictionary location, clip path prefixes, playback
pacing and server defaults so they are easy to find and override. Pacing
constants are plain module-level values rather than matcher internals, so
both humans and coding agents can see exactly what the player does.

HOW: python-dotenv loads the .env file on import. Locations and defaults
are read from the environment with sensible fallbacks. Pause durations,
the idle-loop settle delay, the preview window and the clip extension are
fixed constants (they define playback parity, not deployment).

RULES:
- Clip src = prefix + filename, no other protocol
- Word clips live under WORDS_PATH, letter clips under LETTERS_PATH
- Pause durations (160 / 140 / 120 ms) are NOT overridable
- parse_speed() never raises; bad input falls back to DEFAULT_SPEED
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Dictionary and asset locations
# ---------------------------------------------------------------------------

DICTIONARY_SOURCE = os.getenv("ASL_DICTIONARY_SOURCE", "./data/asl_dictionary.json")
"""File path or http(s) URL of the dictionary JSON artifact."""

WORDS_PATH = os.getenv("ASL_WORDS_PATH", "./assets/asl/words/")
LETTERS_PATH = os.getenv("ASL_LETTERS_PATH", "./assets/asl/letters/")

CLIP_EXTENSION = ".mp4"

# ---------------------------------------------------------------------------
# Playback pacing (fixed)
# ---------------------------------------------------------------------------

PHRASE_PAUSE_MS = 160
WORD_PAUSE_MS = 140
FINGERSPELL_PAUSE_MS = 120

IDLE_LOOP_DELAY_MS = 400
"""Settle delay between queue exhaustion and an idle-loop restart."""

PREVIEW_WINDOW = 20
"""Number of upcoming item keys exposed in a snapshot preview."""

# ---------------------------------------------------------------------------
# Runtime defaults
# ---------------------------------------------------------------------------

DEFAULT_SPEED = 1.0


def parse_speed(raw: object) -> float:
    """Turn user input into a positive playback rate.

    WHY: The speed control is free text in most UIs, and the controller
    must never receive zero or a negative rate.

    RULES:
    - Floats and numeric strings are accepted
    - Non-numeric, zero, negative, NaN or infinite → DEFAULT_SPEED
    """
    try:
        rate = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return DEFAULT_SPEED
    if not rate > 0 or rate == float("inf"):
        return DEFAULT_SPEED
    return rate


SPEED = parse_speed(os.getenv("ASL_DEFAULT_SPEED", str(DEFAULT_SPEED)))
IDLE_LOOP = os.getenv("ASL_IDLE_LOOP", "false").lower() == "true"

SIMULATED_CLIP_S = float(os.getenv("ASL_SIMULATED_CLIP_S", "0.8"))
"""Clip length used by the headless SimulatedMediaPlayer, in seconds at 1x."""

API_HOST = os.getenv("ASL_API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("ASL_API_PORT", "8000"))
