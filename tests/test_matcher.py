"""Unit tests for greedy phrase/word matching and fingerspelling.

WHY: The matcher decides what the viewer actually sees. Wrong precedence
(word before phrase), unstable tie-breaks or dropped tokens are all
visible signing mistakes.

HOW: Tests cover the reference scenarios (phrase hit, empty dictionary,
word + fingerspell, letters-only mode), precedence and tie-break rules,
fingerspelling details, determinism and exhaustiveness.

RULES:
- Expected queues are written out item by item, including pause items
- Clip paths use the config prefixes via the conftest helpers
"""

import pytest

from asl_player.config import LETTERS_PATH
from asl_player.core.index import build_index
from asl_player.core.ir import EMPTY_INDEX, LetterItem, MatchMode, PauseItem, WordItem
from asl_player.core.matcher import fingerspell, match, match_text
from asl_player.core.normalizer import tokenize

from conftest import letter, pause, word


class TestReferenceScenarios:
    def test_phrase_hit(self):
        index = build_index({"phrases": [{"key": "GOOD MORNING", "file": "GM.mp4"}], "words": {}})
        queue = match(tokenize("Good morning!"), index)
        assert queue == (word("GOOD MORNING", "GM.mp4"), pause(160))

    def test_empty_dictionary_fingerspells(self):
        queue = match(tokenize("HI"), EMPTY_INDEX)
        assert queue == (letter("H"), letter("I"), pause(120))

    def test_word_then_fingerspelling(self):
        index = build_index({"words": {"HI": "HI.mp4"}})
        queue = match(tokenize("HI THERE"), index)
        assert queue == (
            word("HI", "HI.mp4"),
            pause(140),
            letter("T"), letter("H"), letter("E"), letter("R"), letter("E"),
            pause(120),
        )

    def test_letters_only_ignores_dictionary(self, sample_dictionary):
        index = build_index(sample_dictionary)
        queue = match(tokenize("good morning hi"), index, MatchMode.LETTERS_ONLY)
        assert all(not isinstance(item, WordItem) for item in queue)
        letters = [item.key for item in queue if isinstance(item, LetterItem)]
        assert letters == list("GOODMORNINGHI")
        assert [item for item in queue if isinstance(item, PauseItem)] == [pause(120)] * 3

    def test_letters_only_accepts_string_mode(self, sample_dictionary):
        index = build_index(sample_dictionary)
        assert match(["HI"], index, "letters_only") == (letter("H"), letter("I"), pause(120))


class TestPrecedence:
    def test_phrase_beats_word(self, sample_dictionary):
        index = build_index(sample_dictionary)
        queue = match(["THANK", "YOU"], index)
        assert queue == (word("THANK YOU", "THANK_YOU.mp4"), pause(160))

    def test_longest_phrase_wins(self, sample_dictionary):
        index = build_index(sample_dictionary)
        queue = match(tokenize("thank you very much"), index)
        assert queue == (word("THANK YOU VERY MUCH", "THANKS_A_LOT.mp4"), pause(160))

    def test_word_used_when_phrase_incomplete(self, sample_dictionary):
        index = build_index(sample_dictionary)
        queue = match(["THANK"], index)
        assert queue == (word("THANK", "THANK.mp4"), pause(140))

    def test_duplicate_phrase_first_in_index_wins(self, sample_dictionary):
        index = build_index(sample_dictionary)
        queue = match(["SEE", "YOU"], index)
        assert queue == (word("SEE YOU", "SEE_YOU_B.mp4"), pause(160))

    def test_equal_length_phrases_resolve_by_key_order(self):
        index = build_index({
            "phrases": [
                {"key": "B C", "file": "BC.mp4"},
                {"key": "A B", "file": "AB.mp4"},
            ]
        })
        # "A B" sorts first and consumes B, so "B C" can no longer match.
        queue = match(["A", "B", "C"], index)
        assert queue == (word("A B", "AB.mp4"), pause(160), letter("C"), pause(120))

    def test_single_token_phrase_is_not_a_phrase_match(self, sample_dictionary):
        index = build_index(sample_dictionary)
        queue = match(["HELLO"], index)
        assert queue == tuple(letter(c) for c in "HELLO") + (pause(120),)

    def test_phrase_in_middle_of_sentence(self, sample_dictionary):
        index = build_index(sample_dictionary)
        queue = match(tokenize("hi, good morning sorry"), index)
        assert queue == (
            word("HI", "HI.mp4"), pause(140),
            word("GOOD MORNING", "GM.mp4"), pause(160),
            word("SORRY", "SORRY.mp4"), pause(140),
        )

    def test_phrase_longer_than_remaining_tokens_is_skipped(self, sample_dictionary):
        index = build_index(sample_dictionary)
        queue = match(["GOOD"], index)
        assert queue == (word("GOOD", "GOOD.mp4"), pause(140))


class TestFingerspell:
    def test_letters_then_pause(self):
        assert fingerspell("AB") == [letter("A"), letter("B"), pause(120)]

    def test_space_maps_to_space_clip(self):
        items = fingerspell("A B")
        assert items[1] == WordItem(key="SPACE", src=f"{LETTERS_PATH}SPACE.mp4")

    def test_digits_are_skipped(self):
        assert fingerspell("R2D2") == [letter("R"), letter("D"), pause(120)]

    def test_digit_only_token_still_yields_pause(self):
        assert match(["66"], EMPTY_INDEX) == (pause(120),)

    def test_custom_letters_path(self):
        items = fingerspell("A", letters_path="/clips/abc/")
        assert items[0].src == "/clips/abc/A.mp4"


class TestProperties:
    @pytest.mark.parametrize("text", [
        "Good morning! Thank you very much, see you.",
        "HI THERE 123",
        "",
        "sorry sorry sorry",
    ])
    def test_deterministic(self, sample_dictionary, text):
        index = build_index(sample_dictionary)
        assert match_text(text, index) == match_text(text, index)

    def test_every_token_produces_items(self, sample_dictionary):
        index = build_index(sample_dictionary)
        for token in ["HI", "ZEBRA", "GOOD", "42", "SORRY"]:
            assert len(match([token], index)) >= 1

    def test_empty_tokens_give_empty_queue(self, sample_dictionary):
        assert match([], build_index(sample_dictionary)) == ()

    def test_custom_words_path(self):
        index = build_index({"words": {"HI": "HI.mp4"}})
        queue = match(["HI"], index, words_path="https://cdn.example/words/")
        assert queue[0].src == "https://cdn.example/words/HI.mp4"

    def test_pause_items_have_keys(self):
        queue = match(["HI"], EMPTY_INDEX)
        assert queue[-1].key == "PAUSE_120ms"
