"""HTTP API package — FastAPI adapter over the Session command surface.

WHY: A browser page renders the clips; it needs HTTP endpoints to send
commands, read snapshots and report clip completion.

HOW: app.py holds the FastAPI app and the singleton Session; models.py
holds the pydantic request/response schemas.

RULES:
- No playback logic here; endpoints only translate HTTP to Session calls
"""
