"""Unit tests for DictionaryLoader (file and HTTP sources).

WHY: The loader is the only network/disk I/O in the player. A failure must
degrade to an empty dictionary with status "Dictionary missing", never an
exception in the UI.

HOW: Local files come from tmp_path; HTTP sources use httpx.MockTransport
so no network is touched. Each test runs the coroutine with asyncio.run().
"""

import asyncio
import json

import httpx
import pytest

from asl_player.api.client import DictionaryLoader, DictionaryUnavailableError, is_url
from asl_player.api.models import AslDictionary
from asl_player.core.index import build_index

URL = "https://cdn.example.org/asl_dictionary.json"


def _mock_loader(handler):
    return DictionaryLoader(URL, transport=httpx.MockTransport(handler))


class TestIsUrl:
    def test_http_and_https(self):
        assert is_url("http://x/dict.json")
        assert is_url(URL)

    def test_paths_are_not_urls(self):
        assert not is_url("./data/asl_dictionary.json")
        assert not is_url("/abs/dict.json")


class TestFileSource:
    def test_loads_valid_file(self, dictionary_file, sample_dictionary):
        result = asyncio.run(DictionaryLoader(str(dictionary_file)).load())
        assert result.ok
        assert result.error is None
        assert result.source == str(dictionary_file)
        assert result.dictionary.phrases == sample_dictionary["phrases"]
        assert result.dictionary.words == sample_dictionary["words"]

    def test_missing_file_gives_empty_dictionary(self, tmp_path):
        result = asyncio.run(DictionaryLoader(str(tmp_path / "nope.json")).load())
        assert not result.ok
        assert result.dictionary == AslDictionary.empty()
        assert "not readable" in result.error

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json", encoding="utf-8")
        with pytest.raises(DictionaryUnavailableError, match="not valid JSON"):
            asyncio.run(DictionaryLoader(str(path)).fetch())

    @pytest.mark.parametrize("payload", [
        [],
        "words",
        {"phrases": "GOOD MORNING"},
        {"words": ["HI"]},
    ])
    def test_wrong_shape_is_unavailable(self, tmp_path, payload):
        path = tmp_path / "shape.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        with pytest.raises(DictionaryUnavailableError, match="invalid shape"):
            asyncio.run(DictionaryLoader(str(path)).fetch())

    def test_missing_sections_are_empty(self, tmp_path):
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"version": 2}), encoding="utf-8")
        dictionary = asyncio.run(DictionaryLoader(str(path)).fetch())
        assert dictionary.phrases == []
        assert dictionary.words == {}

    def test_malformed_entries_do_not_fail_the_load(self, tmp_path):
        path = tmp_path / "entries.json"
        path.write_text(json.dumps({
            "phrases": [None, {"key": "GOOD MORNING", "file": "GM.mp4"}],
            "words": {"HI": 42, "YES": "YES.mp4"},
        }), encoding="utf-8")
        result = asyncio.run(DictionaryLoader(str(path)).load())
        assert result.ok
        index = build_index(result.dictionary)
        assert dict(index.word_lookup) == {"YES": "YES.mp4"}
        assert [e.key for e in index.phrase_entries] == ["GOOD MORNING"]

    def test_status_callback_sequence(self, tmp_path, dictionary_file):
        statuses = []
        asyncio.run(DictionaryLoader(str(dictionary_file)).load(on_status=statuses.append))
        assert statuses == ["Loading…"]

        statuses.clear()
        asyncio.run(DictionaryLoader(str(tmp_path / "gone.json")).load(on_status=statuses.append))
        assert statuses == ["Loading…", "Dictionary missing"]


class TestUrlSource:
    def test_fetches_with_no_store(self, sample_dictionary):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=sample_dictionary)

        result = asyncio.run(_mock_loader(handler).load())
        assert result.ok
        assert len(result.dictionary.phrases) == len(sample_dictionary["phrases"])
        assert len(seen) == 1
        assert seen[0].headers["Cache-Control"] == "no-store"
        assert str(seen[0].url) == URL

    def test_non_200_is_unavailable(self):
        def handler(request):
            return httpx.Response(404, text="not found")

        result = asyncio.run(_mock_loader(handler).load())
        assert not result.ok
        assert "404" in result.error
        assert result.dictionary.words == {}

    def test_single_attempt_no_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        asyncio.run(_mock_loader(handler).load())
        assert len(calls) == 1

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(DictionaryUnavailableError, match="fetch failed"):
            asyncio.run(_mock_loader(handler).fetch())

    def test_invalid_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        with pytest.raises(DictionaryUnavailableError, match="not valid JSON"):
            asyncio.run(_mock_loader(handler).fetch())
