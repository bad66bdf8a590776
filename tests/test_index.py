"""Unit tests for dictionary index construction.

WHY: The index ordering is what makes greedy matching longest-first and
deterministic, and the index builder is the only line of defence against
hand-edited dictionary mistakes.

HOW: Build indexes from the shared sample dictionary and from broken
inputs; check ordering, filtering, word value shapes and filename
derivation.
"""

import pytest

from asl_player.api.models import AslDictionary
from asl_player.core.index import build_index, derive_clip_filename
from asl_player.core.ir import EMPTY_INDEX


class TestPhraseEntries:
    def test_sorted_by_length_desc_then_key(self, sample_dictionary):
        index = build_index(sample_dictionary)
        keys = [e.key for e in index.phrase_entries]
        assert keys == [
            "THANK YOU VERY MUCH",
            "GOOD MORNING",
            "SEE YOU",
            "SEE YOU",
            "THANK YOU",
            "HELLO",
        ]

    def test_token_counts(self, sample_dictionary):
        index = build_index(sample_dictionary)
        counts = [e.token_count for e in index.phrase_entries]
        assert counts == sorted(counts, reverse=True)
        assert index.phrase_entries[0].tokens == ("THANK", "YOU", "VERY", "MUCH")

    def test_duplicate_keys_keep_dictionary_order(self, sample_dictionary):
        index = build_index(sample_dictionary)
        files = [e.file for e in index.phrase_entries if e.key == "SEE YOU"]
        assert files == ["SEE_YOU_B.mp4", "SEE_YOU_A.mp4"]

    def test_blank_key_and_missing_file_are_dropped(self, sample_dictionary):
        index = build_index(sample_dictionary)
        files = {e.file for e in index.phrase_entries}
        assert "BLANK.mp4" not in files
        assert all(e.key != "NO FILE" for e in index.phrase_entries)

    def test_keys_are_normalized(self):
        index = build_index({"phrases": [{"key": "good  morning!", "file": "GM.mp4"}]})
        assert index.phrase_entries[0].key == "GOOD MORNING"
        assert index.phrase_entries[0].tokens == ("GOOD", "MORNING")

    def test_weight_is_ignored_for_ordering(self):
        index = build_index({
            "phrases": [
                {"key": "B C", "file": "BC.mp4", "weight": 100},
                {"key": "A B", "file": "AB.mp4", "weight": 1},
            ]
        })
        assert [e.key for e in index.phrase_entries] == ["A B", "B C"]


class TestWordLookup:
    def test_string_and_object_values(self, sample_dictionary):
        index = build_index(sample_dictionary)
        assert index.word_lookup["HI"] == "HI.mp4"
        assert index.word_lookup["GOOD"] == "GOOD.mp4"

    def test_object_without_file_uses_derived_name(self, sample_dictionary):
        index = build_index(sample_dictionary)
        assert index.word_lookup["SORRY"] == "SORRY.mp4"

    def test_invalid_values_are_dropped(self, sample_dictionary):
        index = build_index(sample_dictionary)
        assert "BROKEN" not in index.word_lookup
        assert "EMPTY" not in index.word_lookup

    def test_word_keys_are_not_retokenized(self):
        index = build_index({"words": {"hello": "HELLO.mp4"}})
        assert index.word_lookup == {"hello": "HELLO.mp4"}


class TestMalformedDictionaries:
    @pytest.mark.parametrize("raw", [
        None,
        [],
        "not a dictionary",
        42,
        {},
        {"phrases": "nope", "words": ["HI"]},
        {"phrases": [None, 3, "x"], "words": {"": "X.mp4"}},
    ])
    def test_returns_empty_index(self, raw):
        index = build_index(raw)
        assert index is EMPTY_INDEX
        assert index.phrase_entries == ()
        assert dict(index.word_lookup) == {}
        assert index.is_empty

    def test_accepts_dictionary_dataclass(self, sample_dictionary):
        index = build_index(AslDictionary.from_dict(sample_dictionary))
        assert len(index.phrase_entries) == 6
        assert "HI" in index.word_lookup


class TestDeriveClipFilename:
    def test_single_word(self):
        assert derive_clip_filename("HELLO") == "HELLO.mp4"

    def test_spaces_become_underscores(self):
        assert derive_clip_filename("GOOD MORNING") == "GOOD_MORNING.mp4"

    def test_whitespace_runs_collapse(self):
        assert derive_clip_filename("THANK  YOU") == "THANK_YOU.mp4"
