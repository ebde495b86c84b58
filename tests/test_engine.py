"""Tests for tokenization, ORP calculation and display timing."""

import pytest

from speedreader.playback.engine import (
    calculate_delay,
    orp_index,
    process_word,
    tokenize,
)

SAMPLE_WORDS = [
    "",
    "a",
    "to",
    "cat",
    "word",
    "words",
    "reading",
    "paragraph",
    "understanding",
    "incomprehensible",
    "antidisestablishmentarianism",
]


class TestTokenize:
    def test_splits_on_whitespace_runs(self) -> None:
        assert tokenize("Hello world. This is a test.") == [
            "Hello",
            "world.",
            "This",
            "is",
            "a",
            "test.",
        ]

    def test_discards_empty_tokens(self) -> None:
        assert tokenize("  one\n\n\ttwo  \r\n three ") == ["one", "two", "three"]

    def test_empty_text(self) -> None:
        assert tokenize("") == []
        assert tokenize(" \n ") == []

    def test_deterministic(self) -> None:
        text = "Repeatable,  tokenization\nis relied upon; always."
        assert tokenize(text) == tokenize(text)


class TestOrpIndex:
    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("", 0),
            ("a", 0),
            ("cat", 0),
            ("word", 1),
            ("words", 1),
            ("reading", 2),
            ("paragraph", 2),
            ("containers", 3),
            ("understanding", 3),
            ("incomprehensible", 4),
            ("antidisestablishmentarianism", 7),
        ],
    )
    def test_length_bands(self, word: str, expected: int) -> None:
        assert orp_index(word) == expected

    @pytest.mark.parametrize("word", SAMPLE_WORDS)
    def test_index_in_range(self, word: str) -> None:
        index = orp_index(word)
        if word:
            assert 0 <= index < len(word)
        else:
            assert index == 0


class TestProcessWord:
    def test_cat(self) -> None:
        result = process_word("cat")
        assert result.orp_index == 0
        assert result.before_orp == ""
        assert result.orp_char == "c"
        assert result.after_orp == "at"

    def test_reading(self) -> None:
        result = process_word("reading")
        assert result.orp_index == 2
        assert result.before_orp == "re"
        assert result.orp_char == "a"
        assert result.after_orp == "ding"

    def test_empty_word(self) -> None:
        result = process_word("")
        assert result.orp_index == 0
        assert result.before_orp == ""
        assert result.orp_char == ""
        assert result.after_orp == ""

    @pytest.mark.parametrize("word", SAMPLE_WORDS)
    def test_parts_reassemble_word(self, word: str) -> None:
        result = process_word(word)
        assert result.before_orp + result.orp_char + result.after_orp == word


class TestCalculateDelay:
    def test_sentence_punctuation_adds_full_pause(self) -> None:
        assert calculate_delay("test.", 300, 150) == 350

    def test_comma_adds_half_pause(self) -> None:
        assert calculate_delay("test,", 300, 150) == 275

    def test_plain_word(self) -> None:
        assert calculate_delay("test", 300, 150) == 200

    @pytest.mark.parametrize("word", ["end!", "why?", "list;", "note:"])
    def test_all_sentence_punctuation(self, word: str) -> None:
        assert calculate_delay(word, 600, 100) == 200

    def test_long_word_multiplier(self) -> None:
        assert calculate_delay("extraordinary", 300, 150) == pytest.approx(240)

    def test_punctuation_takes_precedence_over_length(self) -> None:
        assert calculate_delay("extraordinary.", 300, 150) == 350
        assert calculate_delay("extraordinary,", 300, 150) == 275

    def test_ten_characters_is_not_long(self) -> None:
        assert calculate_delay("abcdefghij", 300, 150) == 200

    @pytest.mark.parametrize("word", ["test.", "test,", "test", "extraordinary"])
    def test_decreasing_in_wpm(self, word: str) -> None:
        delays = [calculate_delay(word, wpm, 150) for wpm in (100, 200, 300, 600, 1000)]
        assert all(a > b for a, b in zip(delays, delays[1:]))

    @pytest.mark.parametrize("word", ["test.", "test,", "test", "extraordinary"])
    def test_non_decreasing_in_pause(self, word: str) -> None:
        delays = [calculate_delay(word, 300, pause) for pause in (0, 50, 150, 500)]
        assert all(a <= b for a, b in zip(delays, delays[1:]))
