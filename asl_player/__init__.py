"""ASL clip player — text in, sign-language clip queue out, sequential playback.

WHY: Deaf and hard-of-hearing viewers read sign language more comfortably
than English text, but a library of pre-recorded sign clips is only useful
if free-form text can be turned into the right clips in the right order.
This package segments text against a phrase/word dictionary, falls back to
fingerspelling for unknown words, and plays the resulting queue back with
deterministic pacing.

HOW: Three-stage pipeline — normalize (core.normalizer), match
(core.index + core.matcher), play (playback.controller). The Session class
wires them together behind a small command surface that the CLI and the
HTTP API drive.

RULES:
- The matcher is pure: same tokens + same index → same queue
- The controller owns the queue and position; nothing else mutates them
- Media rendering is an external capability (playback.media.MediaPlayer)
"""

__version__ = "0.1.0"
