"""Tests for the text transforms."""

from __future__ import annotations

from collections import Counter

import pytest

from spacybot.rng import LockedRandom, Rng
from spacybot.transforms import (
    DEFAULT_CASE_TEXT,
    DEFAULT_SPACES_TEXT,
    DEFAULT_TYPOS_TEXT,
    add_spaces,
    create_typos,
    generate_me,
    mirror,
    randomize_case,
    repeat,
    reverse,
    scramble_letters,
)


class ScriptedRng(Rng):
    """Rng returning pre-programmed values and recording requested bounds."""

    def __init__(self, draws: list[int] | None = None, words: list[int] | None = None) -> None:
        self._draws = iter(draws or [])
        self._words = iter(words or [])
        self.bounds: list[int] = []
        self.word_calls = 0

    def randbelow(self, k: int) -> int:
        self.bounds.append(k)
        value = next(self._draws, 0)
        assert 0 <= value < k
        return value

    def uint64(self) -> int:
        self.word_calls += 1
        return next(self._words, 0)


SAMPLES = ["ab", "hello world", "上海自来水", "naïve café", "🌌 emoji 🤐 text", "x"]


def _non_whitespace(text: str) -> Counter[str]:
    return Counter(char for char in text if not char.isspace())


# ---------------------------------------------------------------------------
# add_spaces
# ---------------------------------------------------------------------------


class TestAddSpaces:
    def test_ascii_gets_single_space(self):
        assert add_spaces("ab") == "a b"

    def test_non_ascii_is_padded_on_both_sides(self):
        assert add_spaces("a好b") == "a  好 b"

    def test_cjk_only(self):
        assert add_spaces("上海") == "上  海"

    def test_empty_uses_default(self):
        assert add_spaces("") == "🌌   I   n e e d   s o m e   s p a c e !"
        assert add_spaces("") == add_spaces(DEFAULT_SPACES_TEXT)

    def test_result_is_trimmed(self):
        result = add_spaces("好")
        assert result == "好"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_preserves_non_whitespace(self, text):
        assert _non_whitespace(add_spaces(text)) == _non_whitespace(text)


# ---------------------------------------------------------------------------
# randomize_case
# ---------------------------------------------------------------------------


class TestRandomizeCase:
    def test_zero_bits_leave_text_unchanged(self):
        assert randomize_case("Hello, World!", ScriptedRng(words=[0])) == "Hello, World!"

    def test_all_bits_flip_every_letter(self):
        rng = ScriptedRng(words=[2**64 - 1])
        assert randomize_case("Hello, World!", rng) == "hELLO, wORLD!"

    def test_bits_are_consumed_per_letter(self):
        assert randomize_case("a-b-c", ScriptedRng(words=[0b101])) == "A-b-C"

    def test_non_latin_letters_are_untouched(self):
        rng = ScriptedRng(words=[2**64 - 1])
        assert randomize_case("éß好1", rng) == "éß好1"
        assert rng.word_calls == 0

    def test_one_word_covers_64_letters(self):
        rng = ScriptedRng()
        randomize_case("a" * 64, rng)
        assert rng.word_calls == 1
        randomize_case("a" * 65, rng)
        assert rng.word_calls == 3

    def test_empty_uses_default(self):
        result = randomize_case("", ScriptedRng(words=[0]))
        assert result == DEFAULT_CASE_TEXT

    @pytest.mark.parametrize("text", SAMPLES + ["The Quick Brown Fox"])
    def test_case_folding_matches_input(self, text):
        result = randomize_case(text, LockedRandom(seed=3))
        assert len(result) == len(text)
        assert result.lower() == text.lower()


# ---------------------------------------------------------------------------
# create_typos / scramble_letters
# ---------------------------------------------------------------------------


class TestCreateTypos:
    def test_single_swap(self):
        assert create_typos("abcd", 1, ScriptedRng(draws=[0])) == "bacd"

    def test_swaps_repeat_per_round(self):
        assert create_typos("abcd", 3, ScriptedRng(draws=[0, 1, 2])) == "bcda"

    def test_swap_count_grows_every_twenty_characters(self):
        rng = ScriptedRng()
        create_typos("x" * 25, 2, rng)
        assert rng.bounds == [24] * 4

    def test_short_text_is_returned_as_is(self):
        rng = ScriptedRng()
        assert create_typos("a", 5, rng) == "a"
        assert rng.bounds == []

    def test_empty_uses_default(self):
        result = create_typos("", 1, LockedRandom(seed=1))
        assert sorted(result) == sorted(DEFAULT_TYPOS_TEXT)

    def test_swaps_code_points_not_bytes(self):
        assert create_typos("上海", 1, ScriptedRng(draws=[0])) == "海上"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_result_is_permutation(self, text):
        result = create_typos(text, 7, LockedRandom(seed=11))
        assert len(result) == len(text)
        assert Counter(result) == Counter(text)


class TestScrambleLetters:
    def test_rounds_drawn_from_ten_to_nineteen(self):
        rng = ScriptedRng(draws=[0])
        assert scramble_letters("ab", rng) == "ab"
        assert rng.bounds == [10] + [1] * 10

    def test_upper_round_bound(self):
        rng = ScriptedRng(draws=[9])
        scramble_letters("ab", rng)
        assert len(rng.bounds) == 1 + 19

    def test_result_is_permutation(self):
        text = "scramble these letters please"
        result = scramble_letters(text, LockedRandom(seed=5))
        assert Counter(result) == Counter(text)

    def test_empty_uses_default(self):
        result = scramble_letters("", LockedRandom(seed=5))
        assert Counter(result) == Counter(DEFAULT_TYPOS_TEXT)


# ---------------------------------------------------------------------------
# deterministic transforms
# ---------------------------------------------------------------------------


class TestReverse:
    def test_reverses_code_points(self):
        assert reverse("上海自来水") == "水来自海上"

    def test_empty_uses_default(self):
        assert reverse("") == "水来自海上"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_involution(self, text):
        assert reverse(reverse(text)) == text


class TestMirror:
    def test_pivots_on_last_character(self):
        assert mirror("ABCD") == "ABCDCBA"

    def test_single_character(self):
        assert mirror("A") == "A"

    def test_empty_uses_default(self):
        assert mirror("") == "上海自来水来自海上"

    @pytest.mark.parametrize("text", SAMPLES)
    def test_palindrome_of_expected_length(self, text):
        result = mirror(text)
        assert len(result) == 2 * len(text) - 1
        assert result == result[::-1]
        assert result.startswith(text)


class TestRepeat:
    def test_three_lines(self):
        assert repeat("hi") == "hi\nhi\nhi"

    def test_empty_uses_default(self):
        assert repeat("") == "I repeat!\nI repeat!\nI repeat!"

    def test_adds_exactly_two_newlines(self):
        text = "line one\nline two"
        assert repeat(text).count("\n") == text.count("\n") * 3 + 2


class TestGenerateMe:
    def test_formats_action(self):
        assert generate_me("Alice", "is testing") == "* Alice is testing"

    def test_empty_uses_default(self):
        assert generate_me("Bob", "") == "* Bob doesn't know what to say. 🤐"

    def test_contains_first_name(self):
        assert "Zoë" in generate_me("Zoë", "waves")
