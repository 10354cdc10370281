import pytest

from services.similarity import (
    letter_presence_accuracy,
    partial_credit,
    phoneme_accuracy,
    positional_accuracy,
)

class TestPhonemeAccuracy:
    def test_exact_match_ignores_case(self):
        assert phoneme_accuracy("Cave", "cAVE") == 1.0

    def test_empty_attempt(self):
        assert phoneme_accuracy("cave", "") == 0.0

    def test_missing_last_letter(self):
        # positional 3/4, letter presence 3/4
        assert phoneme_accuracy("cave", "cav") == pytest.approx(0.75)

    def test_letters_in_wrong_positions(self):
        # no aligned matches, every letter present
        assert phoneme_accuracy("tape", "etap") == pytest.approx(0.3)

    def test_letters_are_consumed_once(self):
        assert letter_presence_accuracy("tape", "tttt") == pytest.approx(0.25)
        assert letter_presence_accuracy("knife", "kkniff") == pytest.approx(0.8)

    def test_empty_correct_word_does_not_divide_by_zero(self):
        assert letter_presence_accuracy("", "abc") == 0.0
        assert phoneme_accuracy("", "abc") == 0.0

class TestPositionalAccuracy:
    def test_differs_from_blended_formula(self):
        assert positional_accuracy("tape", "etap") == 0.0
        assert phoneme_accuracy("tape", "etap") > positional_accuracy("tape", "etap")

    def test_longer_attempt_uses_longest_length(self):
        assert positional_accuracy("cave", "caves") == pytest.approx(0.8)

    def test_shortcuts(self):
        assert positional_accuracy("knife", "KNIFE") == 1.0
        assert positional_accuracy("knife", "") == 0.0

class TestPartialCredit:
    def test_exact_match(self):
        assert partial_credit("dinosaur", "DINOSAUR") == 1.0

    @pytest.mark.parametrize(
        "correct, attempt, expected",
        [
            ("magazine", "magazin", 0.8),   # 0.875
            ("cave", "cav", 0.6),           # 0.75 is not above 0.8
            ("tape", "etap", 0.2),          # 0.3
            ("cave", "xyz", 0.0),
        ],
    )
    def test_buckets(self, correct, attempt, expected):
        assert partial_credit(correct, attempt) == expected

    def test_thresholds_are_strict(self):
        # "ca" against "cave": positional 2/4, presence 2/4 -> 0.5
        assert phoneme_accuracy("cave", "ca") == pytest.approx(0.5)
        assert partial_credit("cave", "ca") == 0.4
