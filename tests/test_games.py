import random

import pytest

from models.trials import RecallTrial, StroopTrial
from services.games import (
    COLOR_NAMES,
    MAX_SEQUENCE_ATTEMPTS,
    WORD_BANK,
    PhonicsGame,
    SequenceRecallGame,
    StroopGame,
    TimedRecallGame,
    TrialGame,
    Verdict,
    build_game,
    next_sequence_step,
)
from tests.helpers import ScriptedRandom

class TestSequenceGeneration:
    def test_retries_immediate_repeat(self):
        rng = ScriptedRandom(randrange=[4, 4, 4, 7])
        assert next_sequence_step([1, 4], 9, rng) == 7
        assert rng.calls == [("randrange", 9)] * 4

    def test_accepts_repeat_after_max_attempts(self):
        rng = ScriptedRandom(randrange=[2] * (MAX_SEQUENCE_ATTEMPTS + 5))
        assert next_sequence_step([2], 9, rng) == 2
        assert len(rng.calls) == MAX_SEQUENCE_ATTEMPTS

    def test_first_step_is_never_retried(self):
        rng = ScriptedRandom(randrange=[0])
        assert next_sequence_step([], 16, rng) == 0
        assert len(rng.calls) == 1

    def test_no_adjacent_repeats_with_real_randomness(self):
        game = SequenceRecallGame(grid_size=3, rng=random.Random(7))
        trial = None
        for index in range(40):
            trial = game.next_trial(index)
        assert len(trial.sequence) == 40
        assert all(a != b for a, b in zip(trial.sequence, trial.sequence[1:]))
        assert all(0 <= cell < 9 for cell in trial.sequence)

    def test_sequence_grows_and_resets(self):
        game = SequenceRecallGame(grid_size=4, rng=ScriptedRandom(randrange=[3, 9, 1]))
        assert game.next_trial(0).sequence == (3,)
        assert game.next_trial(1).sequence == (3, 9)
        game.reset()
        assert game.next_trial(0).sequence == (1,)

    def test_default_source_is_system_random(self):
        assert isinstance(SequenceRecallGame().rng, random.SystemRandom)

class TestRecallResponses:
    def setup_method(self):
        self.game = SequenceRecallGame(grid_size=3)
        self.trial = RecallTrial(sequence=(2, 5, 8), grid_size=3)

    def test_verdicts(self):
        assert self.game.evaluate(self.trial, [2]) is Verdict.PENDING
        assert self.game.evaluate(self.trial, [2, 5]) is Verdict.PENDING
        assert self.game.evaluate(self.trial, [2, 5, 8]) is Verdict.SUCCESS
        assert self.game.evaluate(self.trial, [2, 6]) is Verdict.FAILURE

    @pytest.mark.parametrize("unit", [-1, 9, "x", None, True])
    def test_rejects_cells_outside_the_grid(self, unit):
        assert self.game.normalize_response(self.trial, unit) is None

    def test_accepts_numeric_strings(self):
        assert self.game.normalize_response(self.trial, "4") == 4

class TestTimedRecall:
    def test_allowed_time_windows(self):
        rng = ScriptedRandom(randint=[20000, 7000])
        game = TimedRecallGame(rng=rng)
        assert game.allowed_time_ms(6) == 20000
        assert game.allowed_time_ms(9) == 7000
        assert rng.calls == [("randint", 15000, 30000), ("randint", 5000, 10000)]

    def test_mode_and_scorer(self):
        game = TimedRecallGame(grid_size=4)
        assert game.mode == "timed-4x4"
        assert game.skill == "processing_speed"
        assert game.create_scorer(5).timeout_penalty == 15

class TestStroopGame:
    def test_congruent_trial(self):
        game = StroopGame(rng=ScriptedRandom(choice=["GREEN"], random=[0.39]))
        trial = game.next_trial(0)
        assert trial == StroopTrial(word="GREEN", ink_color="GREEN", is_congruent=True)

    def test_incongruent_trial_picks_another_colour(self):
        rng = ScriptedRandom(choice=["RED", "PURPLE"], random=[0.4])
        trial = StroopGame(rng=rng).next_trial(0)
        assert trial == StroopTrial(word="RED", ink_color="PURPLE", is_congruent=False)
        assert rng.calls[-1] == ("choice", tuple(c for c in COLOR_NAMES if c != "RED"))

    def test_incongruent_ink_never_matches_word(self):
        game = StroopGame(rng=random.Random(3))
        for index in range(200):
            trial = game.next_trial(index)
            assert trial.word in COLOR_NAMES
            assert (trial.word == trial.ink_color) == trial.is_congruent

    def test_colour_responses(self):
        game = StroopGame()
        trial = StroopTrial(word="RED", ink_color="BLUE", is_congruent=False)
        assert game.normalize_response(trial, " blue ") == "BLUE"
        assert game.normalize_response(trial, "orange") is None
        assert game.evaluate(trial, ["BLUE"]) is Verdict.SUCCESS
        assert game.evaluate(trial, ["RED"]) is Verdict.FAILURE

    def test_feedback(self):
        game = StroopGame()
        trial = StroopTrial(word="RED", ink_color="BLUE", is_congruent=False)
        session = game.build_session(trial, ["RED"], success=False, trial_number=1,
                                     response_time=900, completed_on_time=True, allowed_time=None)
        assert session.selected_color == "RED"
        assert game.feedback(trial, session) == "Incorrect. The word was blue ink."

class TestPhonicsGame:
    def test_words_are_drawn_without_replacement(self):
        game = PhonicsGame(rng=random.Random(11))
        words = [game.next_trial(i).word for i in range(len(WORD_BANK))]
        assert sorted(words) == sorted(w.word for w in WORD_BANK)

    def test_bank_refills_when_exhausted(self):
        game = PhonicsGame(rng=random.Random(5))
        for i in range(len(WORD_BANK)):
            game.next_trial(i)
        extra = game.next_trial(len(WORD_BANK))
        assert extra.word in [w.word for w in WORD_BANK]
        assert game.used_words == [extra.word]

    def test_spelling_session(self):
        game = PhonicsGame()
        trial = WORD_BANK[4]
        assert game.normalize_response(trial, "   ") is None
        spelling = game.normalize_response(trial, " Cav ")
        assert spelling == "Cav"
        assert game.evaluate(trial, [spelling]) is Verdict.FAILURE

        session = game.build_session(trial, [spelling], success=False, trial_number=2,
                                     response_time=5000, completed_on_time=True, allowed_time=None)
        # live display uses the positional-only formula
        assert session.phoneme_accuracy == pytest.approx(0.75)
        assert session.partial_credit == pytest.approx(0.75)
        assert game.feedback(trial, session) == (
            'Not quite right. The word was "cave". You got 75% of the sounds right!'
        )

    def test_correct_spelling_ignores_case(self):
        game = PhonicsGame()
        trial = WORD_BANK[0]
        assert game.evaluate(trial, ["MAGAZINE"]) is Verdict.SUCCESS

def test_build_game_rejects_unknown_kind():
    with pytest.raises(ValueError):
        build_game("chess")

def test_game_kinds_must_supply_their_own_rules():
    with pytest.raises(TypeError):
        TrialGame()

    class HalfGame(TrialGame):
        def next_trial(self, trial_index):
            return None

    with pytest.raises(TypeError):
        HalfGame()
