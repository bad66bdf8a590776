"""Dictionary loader — one fetch of the dictionary artifact, file or URL.

WHY: The dictionary lives either next to the app (./data/asl_dictionary.json)
or behind a static file server. Loading it must never crash the player: a
missing or broken dictionary only degrades matching to fingerspelling.

HOW: DictionaryLoader.fetch() reads a local file or GETs an http(s) URL
with httpx.AsyncClient, parses JSON and validates the top-level shape with
jsonschema. Any failure raises DictionaryUnavailableError. load() wraps
fetch() and substitutes an empty dictionary on failure.

RULES:
- Exactly one attempt per load() call, no retries
- HTTP requests send Cache-Control: no-store (always fetch a fresh copy)
- Non-200 responses, invalid JSON and schema violations are all
  DictionaryUnavailableError
- load() never raises; it returns a LoadResult
- Status callback (on_status) is optional; when provided, called with status strings
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

import httpx
import jsonschema

from asl_player.api.models import DICTIONARY_SCHEMA, AslDictionary, LoadResult
from asl_player.config import DICTIONARY_SOURCE

logger = logging.getLogger(__name__)

_FETCH_TIMEOUT_S = 10.0


class DictionaryUnavailableError(Exception):
    """Raised when the dictionary artifact cannot be fetched or parsed.

    WHY: Callers that want the raw failure (tests, the CLI with --strict)
    need a typed exception distinct from programming errors.

    HOW: Raised by DictionaryLoader.fetch(); caught by DictionaryLoader.load().

    RULES:
    - Message names the source and the reason
    """


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


class DictionaryLoader:
    """Fetches the dictionary artifact from a path or URL.

    WHY: Keeps file-vs-HTTP details and failure handling out of the session.

    HOW: For URLs, a short-lived httpx.AsyncClient is opened per fetch (one
    fetch per explicit load command, so pooling buys nothing). A custom
    transport can be injected for tests.

    RULES:
    - source defaults to DICTIONARY_SOURCE from config
    - transport is passed straight to httpx.AsyncClient
    """

    def __init__(
        self,
        source: Optional[str] = None,
        timeout: float = _FETCH_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.source = source or DICTIONARY_SOURCE
        self._timeout = timeout
        self._transport = transport

    async def fetch(self) -> AslDictionary:
        """Fetch, parse and validate the dictionary.

        Raises:
            DictionaryUnavailableError: on any I/O, HTTP, JSON or schema failure.
        """
        if is_url(self.source):
            data = await self._fetch_url(self.source)
        else:
            data = self._read_file(Path(self.source))

        try:
            jsonschema.validate(instance=data, schema=DICTIONARY_SCHEMA)
        except jsonschema.ValidationError as exc:
            raise DictionaryUnavailableError(
                f"Dictionary at {self.source} has an invalid shape: {exc.message}"
            ) from exc

        return AslDictionary.from_dict(data)

    async def load(
        self,
        on_status: Callable[[str], None] | None = None,
    ) -> LoadResult:
        """Fetch the dictionary, substituting an empty one on failure."""
        if on_status:
            on_status("Loading…")
        try:
            dictionary = await self.fetch()
        except DictionaryUnavailableError as exc:
            logger.error("%s", exc)
            if on_status:
                on_status("Dictionary missing")
            return LoadResult(
                dictionary=AslDictionary.empty(),
                ok=False,
                source=self.source,
                error=str(exc),
            )

        logger.info(
            "Loaded dictionary from %s (%d phrases, %d words)",
            self.source,
            len(dictionary.phrases),
            len(dictionary.words),
        )
        return LoadResult(dictionary=dictionary, ok=True, source=self.source)

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    async def _fetch_url(self, url: str) -> Any:
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            ) as client:
                resp = await client.get(url, headers={"Cache-Control": "no-store"})
        except httpx.HTTPError as exc:
            raise DictionaryUnavailableError(
                f"Dictionary fetch failed: {url}: {exc}"
            ) from exc

        if resp.status_code != 200:
            raise DictionaryUnavailableError(
                f"Dictionary fetch failed: {resp.status_code} from {url}"
            )

        try:
            return resp.json()
        except ValueError as exc:
            raise DictionaryUnavailableError(
                f"Dictionary at {url} is not valid JSON: {exc}"
            ) from exc

    @staticmethod
    def _read_file(path: Path) -> Any:
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DictionaryUnavailableError(
                f"Dictionary file not readable: {path}: {exc}"
            ) from exc

        try:
            return json.loads(text)
        except ValueError as exc:
            raise DictionaryUnavailableError(
                f"Dictionary file {path} is not valid JSON: {exc}"
            ) from exc
