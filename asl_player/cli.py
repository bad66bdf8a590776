"""Command-line interface for the ASL clip player.

WHY: Dictionary authors need a quick way to see how a sentence will be
signed: which phrases match and which words fall back to fingerspelling.
It can also check pacing without opening the web page. The CLI runs the same
Session as the HTTP API, with a headless media player.

HOW: Uses argparse to collect the text, dictionary source, match mode,
output format and playback options. Runs the async pipeline via
asyncio.run(): boot the session (load dictionary, build queue), print the
queue to stdout, and optionally play it through SimulatedMediaPlayer while
printing each item to stderr.

RULES:
- Positional arguments are joined with spaces into the input text
- --text-file reads the text from a file instead ("-" = stdin)
- Queue output goes to stdout (text or JSON); status goes to stderr
- A missing dictionary is a warning (fingerspelling still works) unless
  --strict is given, which exits 1
- Exit code 2 for usage errors (argparse), 1 for --strict failures
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from asl_player.api.client import DictionaryLoader
from asl_player.config import DICTIONARY_SOURCE, SIMULATED_CLIP_S, SPEED
from asl_player.core.ir import MatchMode, PauseItem, Queue, item_to_dict
from asl_player.playback.controller import PlaybackSnapshot
from asl_player.playback.media import SimulatedMediaPlayer
from asl_player.session import Session


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the queue can be piped.

    RULES:
    - All status messages go to stderr
    - Always flush after writing
    """
    print(msg, file=sys.stderr, flush=True)


def format_queue_text(queue: Queue) -> str:
    """Render a queue as aligned plain-text lines, one item per line."""
    lines: List[str] = []
    for item in queue:
        if isinstance(item, PauseItem):
            lines.append("{:<6}  {:<20}  {} ms".format(item.kind, item.key, item.duration_ms))
        else:
            lines.append("{:<6}  {:<20}  {}".format(item.kind, item.key, item.src))
    return "\n".join(lines)


def format_queue_json(queue: Queue) -> str:
    return json.dumps([item_to_dict(item) for item in queue], indent=2)


def _read_text(args: argparse.Namespace) -> str:
    if args.text_file == "-":
        return sys.stdin.read()
    if args.text_file:
        return Path(args.text_file).read_text(encoding="utf-8")
    return " ".join(args.text)


class _ProgressPrinter:
    """Snapshot observer that prints each newly reached item to stderr."""

    def __init__(self) -> None:
        self._last_position = -1

    def __call__(self, snap: PlaybackSnapshot) -> None:
        if snap.position == self._last_position or snap.current_key is None:
            return
        self._last_position = snap.position
        _status("  [{}/{}] {}".format(snap.position + 1, snap.queue_length, snap.current_key))


async def _run(args: argparse.Namespace) -> int:
    text = _read_text(args)
    media = SimulatedMediaPlayer(clip_seconds=args.clip_seconds)
    session = Session(
        media,
        loader=DictionaryLoader(args.dictionary),
        mode=args.mode,
        rate=args.speed,
    )

    _status("Loading dictionary from {}...".format(args.dictionary))
    result = await session.boot(text)
    if not result.ok:
        _status("Warning: {}".format(result.error))
        if args.strict:
            return 1
        _status("  Continuing with an empty dictionary (everything is fingerspelled).")
    else:
        _status("  {} phrases, {} words".format(
            len(session.index.phrase_entries), len(session.index.word_lookup),
        ))

    queue = session.queue
    if args.format == "json":
        print(format_queue_json(queue))
    elif queue:
        print(format_queue_text(queue))

    if not args.play:
        return 0

    session.subscribe(_ProgressPrinter())
    _status("Playing {} items at {}x...".format(len(queue), session.controller.rate))
    task = session.play()
    if task is None:
        _status(session.snapshot().status)
        return 0
    await session.wait()
    _status(session.snapshot().status)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running the pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="asl-player",
        description="Turn text into a queue of ASL sign clips (phrases, words, "
                    "fingerspelling) and optionally play it headlessly.",
    )

    parser.add_argument(
        "text",
        nargs="*",
        help="Text to sign. Joined with spaces.",
    )

    parser.add_argument(
        "--text-file",
        default=None,
        help="Read the text from a file instead ('-' for stdin).",
    )

    parser.add_argument(
        "--dictionary",
        default=DICTIONARY_SOURCE,
        help="Dictionary JSON path or http(s) URL (default: %(default)s).",
    )

    parser.add_argument(
        "--mode",
        choices=[m.value for m in MatchMode],
        default=MatchMode.DICTIONARY.value,
        help="Matching mode (default: %(default)s).",
    )

    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Queue output format (default: %(default)s).",
    )

    parser.add_argument(
        "--play",
        action="store_true",
        help="Play the queue through the headless simulated player.",
    )

    parser.add_argument(
        "--speed",
        type=float,
        default=SPEED,
        help="Playback rate (default: %(default)s).",
    )

    parser.add_argument(
        "--clip-seconds",
        type=float,
        default=SIMULATED_CLIP_S,
        help="Simulated clip length at 1x, in seconds (default: %(default)s).",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with an error if the dictionary cannot be loaded.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.text and not args.text_file:
        parser.error("provide text to sign or --text-file")
    code = asyncio.run(_run(args))
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
