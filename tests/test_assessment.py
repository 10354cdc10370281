import random

from services.assessment import COMPLETED, Assessment
from services.ledger_service import InMemoryScoreLedger
from services.speech import QueuedSpeechEngine
from services.trial_runner import RunnerState
from tests.helpers import answer_correctly, play_through, wait_for_input

def make_assessment(age=8, **kwargs):
    kwargs.setdefault("rng", random.Random(21))
    kwargs.setdefault("ledger", InMemoryScoreLedger())
    return Assessment(age, **kwargs)

def test_phases_run_in_fixed_order():
    assessment = make_assessment()
    seen = []
    while assessment.phase != COMPLETED:
        assert assessment.start_game()
        seen.append((assessment.phase, assessment.runner.game.mode))
        play_through(assessment.runner)

    assert seen == [
        ("working_memory", "3x3"),
        ("processing_speed", "timed-3x3"),
        ("attention", "chameleon"),
        ("auditory_processing", "phonics"),
    ]

def test_perfect_run_fills_every_score():
    assessment = make_assessment()
    for _ in range(4):
        assert assessment.start_game()
        play_through(assessment.runner)

    assert assessment.phase == COMPLETED
    assert assessment.scores.model_dump() == {
        "working_memory": 100,
        "processing_speed": 100,
        "attention": 100,
        "auditory_processing": 100,
    }
    assert assessment.ready_for_classification
    assert assessment.start_game() is False

def test_frame_reports_round_events():
    assessment = make_assessment()
    assessment.start_game()
    play_through(assessment.runner)

    expected = []
    for index in range(1, 6):
        expected += ["present", f"advance:{index}"]
    assert assessment.snapshot()["frame"]["events"] == expected + ["complete:100"]

def test_scores_are_written_once_per_pass():
    assessment = make_assessment()
    assessment.start_game()
    runner = assessment.runner
    play_through(runner)
    assert assessment.scores.working_memory == 100

    # a stray second completion of the same game is ignored
    assessment._on_game_complete(runner, 0)
    assert assessment.scores.working_memory == 100
    assert assessment.phase == "processing_speed"

def test_not_ready_without_age():
    assessment = make_assessment(age=None)
    assert assessment.start_game() is False
    assert assessment.runner.state is RunnerState.IDLE
    assert not assessment.ready_for_classification

    assessment.set_age(9)
    assert assessment.start_game()

def test_phonics_phase_blocked_without_speech():
    assessment = make_assessment(speech=QueuedSpeechEngine(supported=False))
    for _ in range(3):
        assessment.start_game()
        play_through(assessment.runner)
    assert assessment.phase == "auditory_processing"
    assert assessment.start_game() is False
    assert "speech synthesis" in assessment.runner.blocked_reason

def test_reset_saves_raw_score_and_starts_over():
    ledger = InMemoryScoreLedger()
    assessment = make_assessment(ledger=ledger)
    assessment.start_game()
    wait_for_input(assessment.runner)
    answer_correctly(assessment.runner)

    assessment.reset()

    records = ledger.load()
    assert [(r.score, r.mode) for r in records] == [(1, "3x3")]
    assert assessment.phase == "working_memory"
    assert assessment.runner.state is RunnerState.IDLE
    assert assessment.scheduler.pending == 0
    assert assessment.scores.model_dump() == {
        "working_memory": 0, "processing_speed": 0, "attention": 0, "auditory_processing": 0,
    }

def test_reset_without_progress_saves_nothing():
    ledger = InMemoryScoreLedger()
    assessment = make_assessment(ledger=ledger)
    assessment.start_game()
    assessment.reset()
    assert ledger.load() == []

def test_speech_round_trip_through_assessment():
    assessment = make_assessment()
    for _ in range(3):
        assessment.start_game()
        play_through(assessment.runner)
    assessment.start_game()
    assert assessment.play_word()
    snapshot = assessment.snapshot()
    assert snapshot["utterance"] == assessment.runner.current_trial.word
    assert snapshot["game"]["is_playing"]
    assert assessment.speech_ended()
    assert assessment.snapshot()["game"]["is_playing"] is False
